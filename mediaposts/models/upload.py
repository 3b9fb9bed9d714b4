"""Pydantic model for a file accepted by the upload handler."""

from pathlib import Path

from pydantic import BaseModel


class StoredFile(BaseModel):
    """A file persisted under the content directory."""
    filename: str
    path: Path
    url: str
    content_type: str
    size: int
    original_filename: str
