"""Registry configuration using pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import ClassVar, Literal, Optional

from pydantic import Field, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_UPLOAD_BYTES = 100 * 1024 * 1024


class RegistrySettings(BaseSettings):
    """Process/runtime settings for the registry API server."""

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="REGISTRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="127.0.0.1", description="Bind address for the registry API.")
    port: PositiveInt = Field(default=8080, description="Port for the registry API.")
    reload: bool = Field(default=False, description="Enable uvicorn auto-reload (dev only).")
    log_level: Literal["critical", "error", "warning", "info", "debug", "trace"] = Field(
        default="info",
        description="Log level for registry API / uvicorn.",
    )
    base_url: Optional[str] = Field(
        default=None,
        description="Public base URL used when building archive URLs.",
    )
    database_url: str = Field(
        default="sqlite+aiosqlite:///./var/data/registry.db",
        description="SQLAlchemy database URL; sync drivers are mapped to async ones.",
    )
    storage_root: Path = Field(
        default=Path("./var/storage"),
        description="Root directory for package archive blobs.",
    )
    docs_root: Path = Field(
        default=Path("./var/docs"),
        description="Root directory for generated documentation.",
    )
    admin_token: Optional[str] = Field(
        default=None,
        description="Bearer token seeded for the bootstrap administrator account.",
    )
    admin_email: str = Field(
        default="admin@localhost",
        description="Email of the bootstrap administrator account.",
    )
    job_concurrency: PositiveInt = Field(
        default=1,
        description="Maximum number of background jobs running at once.",
    )
    max_upload_bytes: PositiveInt = Field(
        default=DEFAULT_MAX_UPLOAD_BYTES,
        description="Largest accepted package archive in bytes.",
    )
    run_migrations: bool = Field(
        default=True,
        description="Apply Alembic migrations on startup.",
    )
    cors_origins: list[str] = Field(
        default_factory=list,
        description="Browser origins allowed to call the API; empty disables CORS.",
    )

    @property
    def effective_base_url(self) -> str:
        if self.base_url:
            return self.base_url.rstrip("/")
        return f"http://{self.host}:{self.port}"


@lru_cache(maxsize=1)
def get_settings() -> RegistrySettings:
    return RegistrySettings()


__all__ = ["DEFAULT_MAX_UPLOAD_BYTES", "RegistrySettings", "get_settings"]
