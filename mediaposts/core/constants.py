"""Application constants.

Contains the upload capability table and user-facing error messages.
"""

from mediaposts.models.enums import MediaType

# ---------------------------------------------------------------------------
# Upload capability table
# Extension (lower-case, without the dot) -> media kind
# ---------------------------------------------------------------------------
ALLOWED_EXTENSIONS: dict[str, MediaType] = {
    "jpeg": MediaType.image,
    "jpg": MediaType.image,
    "png": MediaType.image,
    "gif": MediaType.image,
    "webp": MediaType.image,
    "mp4": MediaType.video,
    "mov": MediaType.video,
    "avi": MediaType.video,
    "webm": MediaType.video,
}

# Declared content types accepted for the formats above
ALLOWED_MIME_TYPES: dict[str, MediaType] = {
    "image/jpeg": MediaType.image,
    "image/jpg": MediaType.image,
    "image/pjpeg": MediaType.image,
    "image/png": MediaType.image,
    "image/gif": MediaType.image,
    "image/webp": MediaType.image,
    "video/mp4": MediaType.video,
    "video/quicktime": MediaType.video,
    "video/mov": MediaType.video,
    "video/avi": MediaType.video,
    "video/x-msvideo": MediaType.video,
    "video/msvideo": MediaType.video,
    "video/webm": MediaType.video,
}

# Stored names are "<epoch-ms>-<0..RANDOM_SUFFIX_MAX>.<ext>"
RANDOM_SUFFIX_MAX: int = 1_000_000_000

UPLOAD_CHUNK_SIZE: int = 1024 * 1024

# Allowance for multipart boundaries and text fields on top of the file cap
UPLOAD_FORM_OVERHEAD_BYTES: int = 64 * 1024

# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------
MSG_FILE_TYPE_NOT_ALLOWED = "Only images and videos are allowed"
MSG_FILE_TOO_LARGE = "File exceeds the maximum upload size"
MSG_FILE_MISSING = "No file uploaded"
MSG_TITLE_DESCRIPTION_REQUIRED = "Title and description are required"
MSG_INVALID_TAGS = "Tags must be a JSON array of strings"
MSG_POST_NOT_FOUND = "Post not found"
MSG_POST_DELETED = "Post deleted successfully"
MSG_STORE_UNREADABLE = "Post document is unreadable"
MSG_STORE_UNWRITABLE = "Post document could not be written"
