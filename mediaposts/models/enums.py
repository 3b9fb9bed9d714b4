"""Enum types shared by the models and the upload capability table."""

from enum import Enum


class MediaType(str, Enum):
    """Kind of media backing a post."""
    image = "image"
    video = "video"
