"""Upload handler.

Validates an incoming file against the extension and content-type
allow-lists, then copies it into the content directory under a generated
``<epoch-ms>-<random>.<ext>`` name.  Rejected or oversized payloads never
leave a file behind.

The handler does not classify the post; ``media_type_for`` derives the
record type from the declared content type for the caller.
"""

from __future__ import annotations

import logging
import random
import time
from pathlib import Path
from typing import BinaryIO

from mediaposts.core.config import settings
from mediaposts.core.constants import (
    ALLOWED_EXTENSIONS,
    ALLOWED_MIME_TYPES,
    MSG_FILE_TOO_LARGE,
    MSG_FILE_TYPE_NOT_ALLOWED,
    RANDOM_SUFFIX_MAX,
    UPLOAD_CHUNK_SIZE,
)
from mediaposts.core.errors import ValidationError
from mediaposts.models.enums import MediaType
from mediaposts.models.upload import StoredFile

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _normalize_content_type(content_type: str | None) -> str:
    """Return the bare lower-case ``type/subtype`` without parameters."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def is_allowed(filename: str | None, content_type: str | None) -> bool:
    """Return True when both the extension and the content type are allowed."""
    extension = Path(filename or "").suffix.lstrip(".").lower()
    return (
        extension in ALLOWED_EXTENSIONS
        and _normalize_content_type(content_type) in ALLOWED_MIME_TYPES
    )


def media_type_for(content_type: str | None) -> MediaType:
    """Derive the post type from the top-level declared content type."""
    if _normalize_content_type(content_type).startswith("image/"):
        return MediaType.image
    return MediaType.video


def generate_filename(original_filename: str) -> str:
    """Return a collision-resistant stored name keeping the original extension."""
    timestamp_ms = int(time.time() * 1000)
    suffix = random.randint(0, RANDOM_SUFFIX_MAX)
    return f"{timestamp_ms}-{suffix}{Path(original_filename).suffix}"


# ---------------------------------------------------------------------------
# Accept / remove
# ---------------------------------------------------------------------------

def _create_target(target_dir: Path, filename: str) -> tuple[BinaryIO, Path]:
    """Open a new file exclusively, drawing a fresh name on collision.

    Only a file created here is ever cleaned up by ``accept``.
    """
    while True:
        target = target_dir / generate_filename(filename)
        try:
            return target.open("xb"), target
        except FileExistsError:
            logger.debug("upload_name_collision", extra={"stored_name": target.name})


def accept(
    stream: BinaryIO,
    filename: str | None,
    content_type: str | None,
    upload_dir: Path | None = None,
    url_prefix: str | None = None,
    max_bytes: int | None = None,
) -> StoredFile:
    """Validate and persist an uploaded file.

    The payload is read from *stream* in chunks; once more than
    *max_bytes* have been read the partial file is deleted and a
    ``ValidationError`` is raised.  Any other failure while writing also
    removes the partial file before propagating.

    Directory, URL prefix and size cap default to the values in ``settings``.
    """
    target_dir = Path(upload_dir if upload_dir is not None else settings.UPLOAD_DIR)
    prefix = (url_prefix if url_prefix is not None else settings.UPLOAD_URL_PREFIX).rstrip("/")
    limit = max_bytes if max_bytes is not None else settings.MAX_UPLOAD_BYTES

    if not filename or not is_allowed(filename, content_type):
        logger.warning(
            "upload_rejected",
            extra={"upload_filename": filename, "content_type": content_type},
        )
        raise ValidationError(MSG_FILE_TYPE_NOT_ALLOWED)

    target_dir.mkdir(parents=True, exist_ok=True)
    out, target = _create_target(target_dir, filename)
    stored_name = target.name

    written = 0
    try:
        with out:
            while True:
                chunk = stream.read(UPLOAD_CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > limit:
                    raise ValidationError(MSG_FILE_TOO_LARGE)
                out.write(chunk)
    except BaseException:
        target.unlink(missing_ok=True)
        logger.warning(
            "upload_aborted",
            extra={"upload_filename": filename, "bytes_read": written, "limit": limit},
        )
        raise

    logger.info(
        "upload_stored",
        extra={"stored_name": stored_name, "size": written, "content_type": content_type},
    )

    return StoredFile(
        filename=stored_name,
        path=target,
        url=f"{prefix}/{stored_name}",
        content_type=_normalize_content_type(content_type),
        size=written,
        original_filename=filename,
    )


def remove_stored_file(stored: StoredFile) -> None:
    """Delete an accepted file; a file that is already gone is ignored."""
    try:
        stored.path.unlink(missing_ok=True)
    except OSError as exc:
        logger.error(
            "upload_cleanup_failed",
            extra={"stored_name": stored.filename, "error_message": str(exc)},
        )
    else:
        logger.info("upload_removed", extra={"stored_name": stored.filename})
