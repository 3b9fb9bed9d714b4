"""Shared test fixtures.

Points the storage settings at a temporary directory, provides a fresh
``PostStore`` and a FastAPI ``TestClient`` bound to it.
"""

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from mediaposts.core.config import settings
from mediaposts.db import json_store
from mediaposts.db.json_store import PostStore


@pytest.fixture()
def storage_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect ``UPLOAD_DIR`` and ``POSTS_FILE`` into *tmp_path*."""
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "POSTS_FILE", str(tmp_path / "posts.json"))
    return tmp_path


@pytest.fixture()
def store(storage_dir: Path) -> Generator[PostStore, None, None]:
    """Provide the process-wide store, rebuilt for the temporary directory."""
    json_store.reset_store()
    yield json_store.get_store()
    json_store.reset_store()


@pytest.fixture()
def test_client(store: PostStore) -> Generator[TestClient, None, None]:
    """Provide a FastAPI TestClient."""
    from mediaposts.main import app

    with TestClient(app) as client:
        yield client
