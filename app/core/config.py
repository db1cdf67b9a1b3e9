from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "folio"
    APP_ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    # In unit tests / CI we avoid long startup retries against external deps.
    ENSURE_EXTERNAL_DEPS_ON_STARTUP: bool = True

    ADMIN_TOKEN: str = "change-me-admin-token"
    SESSION_TTL_HOURS: int = 24 * 7

    DATABASE_URL: str

    # Revision counters for the project list. Unset -> in-process counters.
    REDIS_URL: str | None = None

    # "minio" or "local"
    OBJECT_STORE_BACKEND: str = "minio"
    MINIO_ENDPOINT: str = "localhost:9000"
    MINIO_ACCESS_KEY: str = "minioadmin"
    MINIO_SECRET_KEY: str = "minioadmin"
    MINIO_BUCKET: str = "folio"
    MINIO_SECURE: bool = False
    LOCAL_OBJECT_STORE_DIR: str = "var/objects"

    # Public URLs of uploaded images are MEDIA_PUBLIC_BASE_URL + "/" + object key.
    MEDIA_PUBLIC_BASE_URL: str = "/media"
    MAX_IMAGE_BYTES: int = 10 * 1024 * 1024

    DOCS_DIR: str = "docs"
    TOC_INITIAL_DELAY_S: float = 0.1

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
