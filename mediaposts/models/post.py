"""Pydantic models for post records.

``Post`` mirrors one entry of the persisted document.  Attributes use
snake_case; ``externalLink`` is the wire and on-disk name of
``external_link``.
"""

from pydantic import BaseModel, ConfigDict, Field

from mediaposts.models.enums import MediaType


class Post(BaseModel):
    """Full post record as stored in the document."""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    type: MediaType
    url: str
    title: str
    description: str
    date: str
    tags: list[str] = Field(default_factory=list)
    external_link: str | None = Field(default=None, alias="externalLink")


class PostFields(BaseModel):
    """Metadata submitted alongside an upload.

    ``tags`` is the raw serialized form received from the multipart form.
    """
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    description: str | None = None
    date: str | None = None
    tags: str | None = None
    external_link: str | None = Field(default=None, alias="externalLink")


class PostUpdate(BaseModel):
    """Partial update payload for ``PUT /api/posts/{id}``.

    Empty values are ignored except ``externalLink``: when it is present in
    the payload (``model_fields_set``) it is applied, and a blank value
    clears it.
    """
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    description: str | None = None
    date: str | None = None
    tags: list[str] | str | None = None
    external_link: str | None = Field(default=None, alias="externalLink")
