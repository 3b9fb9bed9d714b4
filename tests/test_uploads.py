"""Unit tests for the upload handler: allow-list, size cap, naming, cleanup."""

from __future__ import annotations

import io
import re
from pathlib import Path
from unittest.mock import patch

import pytest

from mediaposts.core.errors import ValidationError
from mediaposts.models.enums import MediaType
from mediaposts.services import uploads


class _ZeroStream:
    """Readable stream of *total* zero bytes without holding them in memory."""

    def __init__(self, total: int) -> None:
        self.remaining = total

    def read(self, size: int = -1) -> bytes:
        if self.remaining <= 0:
            return b""
        n = self.remaining if size < 0 else min(size, self.remaining)
        self.remaining -= n
        return b"\0" * n


class _FailingStream:
    """Yields one chunk, then raises like a dropped connection."""

    def __init__(self) -> None:
        self.calls = 0

    def read(self, size: int = -1) -> bytes:
        self.calls += 1
        if self.calls == 1:
            return b"partial"
        raise OSError("connection reset")


class TestAllowList:
    """Extension and content type must both be allowed."""

    @pytest.mark.parametrize(
        ("filename", "content_type"),
        [
            ("photo.jpg", "image/jpeg"),
            ("PHOTO.JPEG", "image/jpeg"),
            ("anim.gif", "image/gif"),
            ("pic.webp", "image/webp"),
            ("shot.png", "image/png; charset=binary"),
            ("clip.mp4", "video/mp4"),
            ("clip.mov", "video/quicktime"),
            ("clip.avi", "video/x-msvideo"),
            ("clip.webm", "video/webm"),
        ],
    )
    def test_allowed_combinations(self, filename: str, content_type: str) -> None:
        assert uploads.is_allowed(filename, content_type) is True

    @pytest.mark.parametrize(
        ("filename", "content_type"),
        [
            ("notes.txt", "text/plain"),
            ("notes.txt", "image/jpeg"),
            ("photo.jpg", "text/plain"),
            ("photo.jpg", None),
            ("noextension", "image/png"),
            ("archive.jpg.zip", "application/zip"),
        ],
    )
    def test_rejected_combinations(self, filename: str, content_type: str | None) -> None:
        assert uploads.is_allowed(filename, content_type) is False

    def test_media_type_from_content_type(self) -> None:
        assert uploads.media_type_for("image/png") == MediaType.image
        assert uploads.media_type_for("video/webm") == MediaType.video
        assert uploads.media_type_for("video/quicktime") == MediaType.video


class TestAccept:
    """accept() persists valid files and leaves nothing behind otherwise."""

    def test_stores_file_under_generated_name(self, tmp_path: Path) -> None:
        stored = uploads.accept(
            io.BytesIO(b"jpeg-bytes"),
            "holiday.JPG",
            "image/jpeg",
            upload_dir=tmp_path,
            url_prefix="/uploads",
        )

        assert re.fullmatch(r"\d{13}-\d+\.JPG", stored.filename)
        assert stored.path == tmp_path / stored.filename
        assert stored.path.read_bytes() == b"jpeg-bytes"
        assert stored.url == f"/uploads/{stored.filename}"
        assert stored.size == len(b"jpeg-bytes")
        assert stored.content_type == "image/jpeg"
        assert stored.original_filename == "holiday.JPG"

    def test_generated_names_differ(self, tmp_path: Path) -> None:
        names = {
            uploads.accept(io.BytesIO(b"x"), "a.png", "image/png", upload_dir=tmp_path).filename
            for _ in range(20)
        }
        assert len(names) == 20

    def test_rejects_disallowed_type_without_writing(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            uploads.accept(io.BytesIO(b"hello"), "notes.txt", "text/plain", upload_dir=tmp_path)
        assert not tmp_path.exists() or list(tmp_path.iterdir()) == []

    def test_rejects_missing_filename(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            uploads.accept(io.BytesIO(b"x"), None, "image/png", upload_dir=tmp_path)

    def test_rejects_oversized_payload_and_cleans_up(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError) as exc_info:
            uploads.accept(
                io.BytesIO(b"0123456789A"),
                "big.png",
                "image/png",
                upload_dir=tmp_path,
                max_bytes=10,
            )
        assert exc_info.value.status_code == 400
        assert list(tmp_path.iterdir()) == []

    def test_payload_at_limit_is_accepted(self, tmp_path: Path) -> None:
        stored = uploads.accept(
            io.BytesIO(b"0123456789"), "ok.png", "image/png", upload_dir=tmp_path, max_bytes=10
        )
        assert stored.size == 10

    def test_default_cap_is_fifty_mebibytes(self, storage_dir: Path) -> None:
        upload_dir = storage_dir / "uploads"
        with pytest.raises(ValidationError):
            uploads.accept(_ZeroStream(50 * 1024 * 1024 + 1), "huge.mp4", "video/mp4")
        assert list(upload_dir.iterdir()) == []

    def test_name_collision_draws_new_name_and_keeps_existing_file(
        self, tmp_path: Path
    ) -> None:
        existing = tmp_path / "1-1.png"
        existing.write_bytes(b"other upload")

        with patch(
            "mediaposts.services.uploads.generate_filename",
            side_effect=["1-1.png", "1-2.png"],
        ):
            stored = uploads.accept(io.BytesIO(b"new"), "a.png", "image/png", upload_dir=tmp_path)

        assert stored.filename == "1-2.png"
        assert stored.path.read_bytes() == b"new"
        assert existing.read_bytes() == b"other upload"

    def test_stream_error_removes_partial_file(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            uploads.accept(_FailingStream(), "clip.webm", "video/webm", upload_dir=tmp_path)
        assert list(tmp_path.iterdir()) == []


class TestRemoveStoredFile:
    def test_removes_file(self, tmp_path: Path) -> None:
        stored = uploads.accept(io.BytesIO(b"x"), "a.gif", "image/gif", upload_dir=tmp_path)
        uploads.remove_stored_file(stored)
        assert not stored.path.exists()

    def test_missing_file_is_ignored(self, tmp_path: Path) -> None:
        stored = uploads.accept(io.BytesIO(b"x"), "a.gif", "image/gif", upload_dir=tmp_path)
        stored.path.unlink()
        uploads.remove_stored_file(stored)
        assert not stored.path.exists()
