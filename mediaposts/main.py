"""FastAPI application entry point.

Configures CORS, structured logging, lifespan events (store
initialization), router registration and the optional static front-end.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from mediaposts.core.config import settings
from mediaposts.core.logging import setup_logging
from mediaposts.core.middleware import reject_oversized_uploads
from mediaposts.db.json_store import get_store
from mediaposts.routers import health, posts, uploads

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: startup and shutdown hooks.

    Creates the content directory and the post document when missing.
    """
    setup_logging()
    store = get_store()
    logger.info(
        "Application starting up",
        extra={
            "posts_file": str(store.posts_file),
            "upload_dir": str(store.upload_dir),
            "public_dir": settings.PUBLIC_DIR,
        },
    )
    yield
    logger.info("Application shutting down")


app = FastAPI(
    title="Media Posts API",
    description="Upload images and videos with metadata and manage them as posts",
    version="0.1.0",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS Configuration
# ---------------------------------------------------------------------------
_raw_origins = settings.ALLOWED_ORIGINS.strip()
if _raw_origins == "*":
    _allowed_origins: list[str] = ["*"]
else:
    _allowed_origins = [o.strip() for o in _raw_origins.split(",") if o.strip()]

# Oversized uploads are refused before the multipart body is parsed
app.middleware("http")(reject_oversized_uploads)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Router Registration
# ---------------------------------------------------------------------------
app.include_router(health.router, tags=["Health"])
app.include_router(posts.router, prefix="/api/posts", tags=["Posts"])
app.include_router(uploads.router, prefix=settings.UPLOAD_URL_PREFIX.rstrip("/"), tags=["Uploads"])

# Front-end, mounted last so the API routes take precedence
if Path(settings.PUBLIC_DIR).is_dir():
    app.mount("/", StaticFiles(directory=settings.PUBLIC_DIR, html=True), name="public")
