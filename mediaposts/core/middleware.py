"""HTTP middleware.

``reject_oversized_uploads`` answers 400 for a post upload whose declared
``Content-Length`` cannot fit within ``settings.MAX_UPLOAD_BYTES`` before the
multipart body is read.  Requests without a usable length still hit the
chunked cap in the upload handler.
"""

import logging
from collections.abc import Awaitable, Callable

from fastapi import Request
from starlette.responses import JSONResponse, Response

from mediaposts.core.config import settings
from mediaposts.core.constants import MSG_FILE_TOO_LARGE, UPLOAD_FORM_OVERHEAD_BYTES

logger = logging.getLogger(__name__)

UPLOAD_PATH = "/api/posts"


async def reject_oversized_uploads(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Short-circuit ``POST /api/posts`` when the declared body is too large."""
    if request.method == "POST" and request.url.path.rstrip("/") == UPLOAD_PATH:
        raw_length = request.headers.get("content-length")
        if raw_length is not None and raw_length.isdigit():
            limit = settings.MAX_UPLOAD_BYTES + UPLOAD_FORM_OVERHEAD_BYTES
            if int(raw_length) > limit:
                logger.warning(
                    "upload_rejected_content_length",
                    extra={"content_length": int(raw_length), "limit": limit},
                )
                return JSONResponse(status_code=400, content={"detail": MSG_FILE_TOO_LARGE})
    return await call_next(request)
