"""Post CRUD endpoints.

GET    /api/posts        -- list posts, newest first
GET    /api/posts/{id}   -- fetch one post
POST   /api/posts        -- multipart upload + metadata, creates a post
PUT    /api/posts/{id}   -- partial metadata update (JSON)
DELETE /api/posts/{id}   -- delete the post and its file

Domain errors map to their HTTP status with the message as ``detail``.
"""

from __future__ import annotations

import logging
import re
from typing import NoReturn

from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from mediaposts.core.constants import MSG_FILE_MISSING, MSG_POST_DELETED, MSG_POST_NOT_FOUND
from mediaposts.core.errors import MediaPostsError
from mediaposts.db.json_store import get_store
from mediaposts.models.post import Post, PostFields, PostUpdate
from mediaposts.services.posts import create_post

logger = logging.getLogger(__name__)

router = APIRouter()

_POST_ID_PATTERN = re.compile(r"-?[0-9]+")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_post_id(raw: str) -> int:
    """Parse the path id; a non-numeric id can never match a post."""
    if not _POST_ID_PATTERN.fullmatch(raw):
        raise HTTPException(status_code=404, detail=MSG_POST_NOT_FOUND)
    return int(raw)


def _raise_http(exc: Exception, fallback: str) -> NoReturn:
    """Translate *exc* into an ``HTTPException``."""
    if isinstance(exc, MediaPostsError):
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
    logger.exception(fallback)
    raise HTTPException(status_code=500, detail=fallback) from exc


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------

@router.get("", response_model=list[Post])
async def list_posts() -> list[Post]:
    """Return every post, newest first."""
    try:
        return get_store().list_all()
    except Exception as exc:
        _raise_http(exc, "Failed to load posts")


@router.get("/{post_id}", response_model=Post)
async def get_post(post_id: str) -> Post:
    """Return a single post by id."""
    parsed_id = _parse_post_id(post_id)
    try:
        return get_store().get_by_id(parsed_id)
    except Exception as exc:
        _raise_http(exc, "Failed to load post")


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

@router.post("", status_code=201, response_model=Post)
async def create_post_endpoint(
    file: UploadFile | None = File(default=None),
    title: str | None = Form(default=None),
    description: str | None = Form(default=None),
    date: str | None = Form(default=None),
    tags: str | None = Form(default=None),
    external_link: str | None = Form(default=None, alias="externalLink"),
) -> Post:
    """Upload an image or video and create a post for it.

    ``tags`` is a JSON-encoded array of strings.  Missing file, title or
    description answer 400; a rejected post never leaves its file behind.
    """
    if file is None:
        raise HTTPException(status_code=400, detail=MSG_FILE_MISSING)

    fields = PostFields(
        title=title,
        description=description,
        date=date,
        tags=tags,
        external_link=external_link,
    )
    try:
        return create_post(file.file, file.filename, file.content_type, fields)
    except Exception as exc:
        _raise_http(exc, "Failed to create post")
    finally:
        await file.close()


# ---------------------------------------------------------------------------
# Update / delete
# ---------------------------------------------------------------------------

@router.put("/{post_id}", response_model=Post)
async def update_post(post_id: str, changes: PostUpdate) -> Post:
    """Apply a partial update; empty values leave fields untouched."""
    parsed_id = _parse_post_id(post_id)
    try:
        return get_store().update(parsed_id, changes)
    except Exception as exc:
        _raise_http(exc, "Failed to update post")


@router.delete("/{post_id}")
async def delete_post(post_id: str) -> dict[str, str]:
    """Delete the post and its backing file."""
    parsed_id = _parse_post_id(post_id)
    try:
        get_store().delete(parsed_id)
    except Exception as exc:
        _raise_http(exc, "Failed to delete post")
    return {"message": MSG_POST_DELETED}
