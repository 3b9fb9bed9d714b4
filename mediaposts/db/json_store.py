"""Flat-file post store.

The whole collection lives in one JSON array, newest post first.  Every
operation reads the entire document, mutates it in memory and writes the
entire document back.

Each ``PostStore`` serializes its own read-mutate-write sequences with a
``threading.Lock``, so requests served by the process-wide store from
``get_store()`` never lose updates.  Separate stores (or processes) over the
same file are not coordinated: the last writer wins.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import time
from datetime import datetime, timezone
from pathlib import Path

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from mediaposts.core.config import settings
from mediaposts.core.constants import (
    MSG_INVALID_TAGS,
    MSG_POST_NOT_FOUND,
    MSG_STORE_UNREADABLE,
    MSG_STORE_UNWRITABLE,
    MSG_TITLE_DESCRIPTION_REQUIRED,
)
from mediaposts.core.errors import NotFoundError, StoreIOError, ValidationError
from mediaposts.models.post import Post, PostFields, PostUpdate
from mediaposts.models.upload import StoredFile
from mediaposts.services.uploads import media_type_for

logger = logging.getLogger(__name__)

_POST_LIST = TypeAdapter(list[Post])


# ---------------------------------------------------------------------------
# Field normalization
# ---------------------------------------------------------------------------

def parse_tags(raw: str | None) -> list[str]:
    """Decode the serialized tags form (a JSON array of strings).

    Absent or blank input yields an empty list.
    """
    if raw is None or not raw.strip():
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError(MSG_INVALID_TAGS) from exc
    if not isinstance(value, list) or not all(isinstance(tag, str) for tag in value):
        raise ValidationError(MSG_INVALID_TAGS)
    return value


def normalize_external_link(value: str | None) -> str | None:
    """Trim the link; blank becomes None."""
    if value is None:
        return None
    return value.strip() or None


def _today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class PostStore:
    """Ordered post collection persisted as a single JSON document."""

    def __init__(
        self,
        posts_file: Path | str,
        upload_dir: Path | str,
    ) -> None:
        self.posts_file = Path(posts_file)
        self.upload_dir = Path(upload_dir)
        self._lock = threading.Lock()

    def initialize(self) -> None:
        """Create the content directory and an empty document if missing."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        if not self.posts_file.exists():
            self.posts_file.parent.mkdir(parents=True, exist_ok=True)
            self.write_document([])
            logger.info("post_document_created", extra={"path": str(self.posts_file)})

    # -- whole-document primitives ------------------------------------------

    def read_document(self) -> list[Post]:
        """Load and validate the full collection."""
        try:
            raw = self.posts_file.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error(
                "post_document_read_failed",
                extra={"path": str(self.posts_file), "error_message": str(exc)},
            )
            raise StoreIOError(MSG_STORE_UNREADABLE) from exc
        try:
            return _POST_LIST.validate_json(raw)
        except PydanticValidationError as exc:
            logger.error(
                "post_document_invalid",
                extra={"path": str(self.posts_file), "error_count": exc.error_count()},
            )
            raise StoreIOError(MSG_STORE_UNREADABLE) from exc

    def write_document(self, posts: list[Post]) -> None:
        """Replace the document with *posts* via a temp file and rename."""
        payload = json.dumps(
            [post.model_dump(mode="json", by_alias=True) for post in posts],
            indent=2,
            ensure_ascii=False,
        )
        tmp_path: str | None = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self.posts_file.parent,
                prefix=f".{self.posts_file.name}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_path, self.posts_file)
        except OSError as exc:
            if tmp_path is not None:
                Path(tmp_path).unlink(missing_ok=True)
            logger.error(
                "post_document_write_failed",
                extra={"path": str(self.posts_file), "error_message": str(exc)},
            )
            raise StoreIOError(MSG_STORE_UNWRITABLE) from exc

    # -- operations -----------------------------------------------------------

    def list_all(self) -> list[Post]:
        """Return every post, newest first."""
        with self._lock:
            return self.read_document()

    def get_by_id(self, post_id: int) -> Post:
        with self._lock:
            posts = self.read_document()
        for post in posts:
            if post.id == post_id:
                return post
        raise NotFoundError(MSG_POST_NOT_FOUND)

    def create(self, fields: PostFields, stored: StoredFile) -> Post:
        """Build a post for *stored* and prepend it to the collection.

        Raises ``ValidationError`` when title or description is empty or the
        tags cannot be decoded.  The stored file is left in place; removing
        it is the caller's job.
        """
        if not fields.title or not fields.description:
            raise ValidationError(MSG_TITLE_DESCRIPTION_REQUIRED)
        tags = parse_tags(fields.tags)

        with self._lock:
            posts = self.read_document()
            post = Post(
                id=self._next_id(posts),
                type=media_type_for(stored.content_type),
                url=stored.url,
                title=fields.title,
                description=fields.description,
                date=fields.date or _today(),
                tags=tags,
                external_link=normalize_external_link(fields.external_link),
            )
            posts.insert(0, post)
            self.write_document(posts)

        logger.info(
            "post_created",
            extra={"post_id": post.id, "media_type": post.type.value, "url": post.url},
        )
        return post

    def update(self, post_id: int, changes: PostUpdate) -> Post:
        """Apply the non-empty fields of *changes* to the post.

        ``externalLink`` is applied whenever it was supplied, so a blank or
        null value clears it.  ``tags`` replaces the list wholesale.
        """
        data: dict[str, object] = {}
        if changes.title:
            data["title"] = changes.title
        if changes.description:
            data["description"] = changes.description
        if changes.date:
            data["date"] = changes.date
        if isinstance(changes.tags, list):
            data["tags"] = changes.tags
        elif changes.tags:
            data["tags"] = parse_tags(changes.tags)
        if "external_link" in changes.model_fields_set:
            data["external_link"] = normalize_external_link(changes.external_link)

        with self._lock:
            posts = self.read_document()
            index = self._index_of(posts, post_id)
            updated = posts[index].model_copy(update=data)
            posts[index] = updated
            self.write_document(posts)

        logger.info(
            "post_updated",
            extra={"post_id": post_id, "fields": sorted(data)},
        )
        return updated

    def delete(self, post_id: int) -> None:
        """Remove the post and, best-effort, its backing file."""
        with self._lock:
            posts = self.read_document()
            index = self._index_of(posts, post_id)
            post = posts.pop(index)
            self.write_document(posts)
            self._remove_backing_file(post)

        logger.info("post_deleted", extra={"post_id": post_id, "url": post.url})

    # -- helpers --------------------------------------------------------------

    def file_path_for(self, post: Post) -> Path:
        """Location of the file behind ``post.url`` in the content directory."""
        return self.upload_dir / Path(post.url).name

    def _remove_backing_file(self, post: Post) -> None:
        path = self.file_path_for(post)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning(
                "post_file_delete_failed",
                extra={"post_id": post.id, "path": str(path), "error_message": str(exc)},
            )

    @staticmethod
    def _index_of(posts: list[Post], post_id: int) -> int:
        for index, post in enumerate(posts):
            if post.id == post_id:
                return index
        raise NotFoundError(MSG_POST_NOT_FOUND)

    @staticmethod
    def _next_id(posts: list[Post]) -> int:
        """Epoch milliseconds, bumped past the newest id on collision."""
        now_ms = int(time.time() * 1000)
        highest = max((post.id for post in posts), default=0)
        return max(now_ms, highest + 1)


# ---------------------------------------------------------------------------
# Process-wide store
# ---------------------------------------------------------------------------

_store: PostStore | None = None


def get_store() -> PostStore:
    """Return the singleton store, creating it from ``settings`` on first call."""
    global _store
    if _store is None:
        _store = PostStore(settings.POSTS_FILE, settings.UPLOAD_DIR)
        _store.initialize()
    return _store


def reset_store() -> None:
    """Drop the singleton so the next ``get_store()`` rereads ``settings``."""
    global _store
    _store = None
