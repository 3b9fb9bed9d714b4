"""Post creation flow.

Runs the upload handler, then records the post.  Once the file is on disk
any later failure removes it again, so rejected metadata never leaves an
orphaned file in the content directory.
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from mediaposts.db.json_store import PostStore, get_store
from mediaposts.models.post import Post, PostFields
from mediaposts.services import uploads

logger = logging.getLogger(__name__)


def create_post(
    stream: BinaryIO,
    filename: str | None,
    content_type: str | None,
    fields: PostFields,
    store: PostStore | None = None,
) -> Post:
    """Store the uploaded file and prepend a post describing it.

    Upload rejections propagate before anything is written.  Errors raised
    while building or persisting the record trigger deletion of the stored
    file before being re-raised.
    """
    store = store or get_store()
    stored = uploads.accept(
        stream,
        filename,
        content_type,
        upload_dir=store.upload_dir,
    )

    try:
        return store.create(fields, stored)
    except Exception:
        logger.warning(
            "create_post_rolled_back",
            extra={"stored_name": stored.filename},
        )
        uploads.remove_stored_file(stored)
        raise
