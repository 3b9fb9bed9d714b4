"""Application configuration via pydantic-settings.

Loads all settings from environment variables with sensible defaults.
A global `settings` singleton is available for import throughout the app.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Storage
    UPLOAD_DIR: str = "uploads"
    POSTS_FILE: str = "posts.json"
    PUBLIC_DIR: str = "public"
    UPLOAD_URL_PREFIX: str = "/uploads"

    # Uploads
    MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024

    # CORS
    ALLOWED_ORIGINS: str = "*"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Logging
    LOG_LEVEL: str = "INFO"


settings = Settings()
