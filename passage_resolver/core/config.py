"""Application configuration loaded via Pydantic settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed configuration sourced from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Remote passage source (ESV API)
    ESV_API_TOKEN: str | None = Field(default=None)
    ESV_API_BASE_URL: str = Field(default="https://api.esv.org/v3/passage/html/")
    ESV_REQUEST_TIMEOUT_SECONDS: float = Field(default=15.0)
    DOWNLOAD_ON_DEMAND: bool = Field(default=True)
    PREFERRED_BIBLE_VERSION: str = Field(default="ESV")

    # Optional local corpus loaded when services are built
    BIBLE_CORPUS_PATH: Path | None = Field(default=None)

    PASSAGE_RESOLVER_LOG_LEVEL: str = Field(default="info")
    PASSAGE_RESOLVER_LOG_DIR: Path | None = Field(default=None)
    PASSAGE_RESOLVER_LOG_SCHEMA_VERSION: str = Field(default="1.0.0")

    DATA_DIR: Path = Field(default=Path("/data"))

    @property
    def has_esv_credential(self) -> bool:
        """True when a non-blank API token is configured."""
        return bool(self.ESV_API_TOKEN and self.ESV_API_TOKEN.strip())


settings = Settings()
config = settings


__all__ = ["Settings", "settings", "config"]
