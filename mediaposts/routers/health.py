"""Health check endpoint.

Reports whether the post document is readable and the content directory
exists.  Returns 503 when either check fails.
"""

import logging
from typing import Any

from fastapi import APIRouter
from starlette.responses import JSONResponse

from mediaposts.core.errors import StoreIOError
from mediaposts.db.json_store import get_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check() -> Any:
    """Return storage status and the number of stored posts."""
    store = get_store()
    document_status = "unreadable"
    post_count: int | None = None

    try:
        post_count = len(store.list_all())
        document_status = "ok"
    except StoreIOError:
        logger.warning("Health check: post document unreadable", exc_info=True)

    uploads_ok = store.upload_dir.is_dir()
    healthy = document_status == "ok" and uploads_ok

    payload: dict[str, Any] = {
        "status": "ok" if healthy else "degraded",
        "document": document_status,
        "uploads": "ok" if uploads_ok else "missing",
        "posts": post_count,
    }

    if not healthy:
        return JSONResponse(status_code=503, content=payload)

    return payload
