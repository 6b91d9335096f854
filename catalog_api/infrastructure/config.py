"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False
    cors_origins: list[str] = ["http://localhost:5173"]

    # Storage
    store_backend: str = "sql"  # "sql" or "memory"
    database_url: str = "postgresql+asyncpg://catalog:catalog_dev_password@db:5432/catalog"
    auto_create_schema: bool = True
    db_connect_retries: int = 5
    db_connect_backoff_seconds: float = 1.0
    store_timeout_seconds: float = 5.0

    # Authentication
    jwt_secret: str = "dev-jwt-secret-change-in-production"
    jwt_expiration_minutes: int = 60 * 24
    bcrypt_rounds: int = 12
    min_password_length: int = 6

    # Uploads
    upload_dir: str = "uploads"
    max_upload_bytes: int = 5 * 1024 * 1024

    # Product listing
    lenient_numeric_parsing: bool = True
    default_page_size: int = 10
    max_page_size: int = 100
    max_page: int = 100_000

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
