"""Domain error taxonomy.

Every error carries a human-readable ``message`` and the HTTP status the
routers answer with.
"""


class MediaPostsError(Exception):
    """Base class for errors raised by the upload handler and post store."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(MediaPostsError):
    """Missing or invalid fields, or a rejected upload."""

    status_code = 400


class NotFoundError(MediaPostsError):
    """No post with the requested id."""

    status_code = 404


class StoreIOError(MediaPostsError):
    """The post document could not be read, parsed or written."""

    status_code = 500
