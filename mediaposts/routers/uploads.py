"""Serves stored media files by the name embedded in a post's ``url``."""

from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from mediaposts.db.json_store import get_store

router = APIRouter()


@router.get("/{name}")
async def get_upload(name: str) -> FileResponse:
    """Return the stored file, or 404 when it does not exist."""
    path = get_store().upload_dir / Path(name).name
    if not path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path)
