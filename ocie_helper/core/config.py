"""Runtime settings.

Values come from the environment or ``.env``/``.env.local`` in the working
directory. Paths default relative to ``DATA_DIR`` so a single volume holds the
SQLite file and locally stored photos. Import ``settings`` for the cached
instance; :func:`get_settings` builds it once and creates the data folders.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "OCIE Helper"
    LOG_LEVEL: str = "INFO"

    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parent.parent)
    DATA_DIR: Path = Field(default_factory=lambda: Path.cwd() / "data")
    MEDIA_DIR: Path | None = None
    TEMPLATES_DIR: Path | None = None
    STATIC_DIR: Path | None = None

    # Shared secrets. An empty value disables the matching gate entirely (nothing verifies).
    ADMIN_PASSCODE: str = Field(default="", validation_alias=AliasChoices("ADMIN_PASSCODE", "WRITE_PASSCODE"))
    SITE_PASSCODE: str = ""

    APP_SECRET: str = "dev-insecure-secret-change-me"
    SESSION_COOKIE_NAME: str = "ocie_session"
    SESSION_MAX_AGE: int = 60 * 60 * 24 * 30
    # The write grant lives only for one page visit and never longer than this.
    WRITE_GRANT_MAX_AGE: int = 30 * 60
    ALLOWED_ORIGINS: str = ""

    DB_URL: str = Field(default="", validation_alias=AliasChoices("DATABASE_URL", "DB_URL"))

    BLOB_BACKEND: Literal["local", "s3"] = "local"
    BLOB_PREFIX: str = "equipment"
    S3_BUCKET: str | None = None
    S3_REGION: str | None = None
    S3_ACCESS_KEY: str | None = None
    S3_SECRET_KEY: str | None = None
    S3_ENDPOINT_URL: str | None = None
    S3_PUBLIC_BASE_URL: str | None = None

    ADD_ITEM_CLOSE_DELAY_MS: int = 1500

    HOST: str = "0.0.0.0"
    PORT: int = 8089

    @property
    def database_url(self) -> str:
        return self.DB_URL or f"sqlite:///{self.DATA_DIR / 'equipment.db'}"

    @property
    def media_dir(self) -> Path:
        return self.MEDIA_DIR if self.MEDIA_DIR is not None else self.DATA_DIR / "media"

    @property
    def templates_dir(self) -> Path:
        return self.TEMPLATES_DIR if self.TEMPLATES_DIR is not None else self.BASE_DIR / "templates"

    @property
    def static_dir(self) -> Path:
        return self.STATIC_DIR if self.STATIC_DIR is not None else self.BASE_DIR / "static"

    @property
    def allowed_origins(self) -> list[str]:
        return _split_csv(self.ALLOWED_ORIGINS)


def _split_csv(value: Any) -> list[str]:
    if value in (None, "", []):
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, Iterable):
        return [str(item).strip() for item in value if str(item).strip()]
    raise TypeError("ALLOWED_ORIGINS must be a comma separated string or list")


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    settings.media_dir.mkdir(parents=True, exist_ok=True)
    return settings


settings = get_settings()
