"""Helpers to apply Alembic migrations programmatically."""

from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config

from .session import resolve_async_database_url


def upgrade_database(database_url: str) -> None:
    """Run Alembic migrations up to the latest revision.

    The migration environment drives an async engine with ``asyncio.run`` so
    this must be called from a thread without a running event loop.
    """

    project_dir = Path(__file__).resolve().parents[3]
    alembic_cfg = Config(str(project_dir / "alembic.ini"))
    # Prevent Alembic from overriding the application's logging configuration.
    alembic_cfg.attributes["configure_logger"] = False
    alembic_cfg.set_main_option("script_location", str(project_dir / "migrations"))
    alembic_cfg.set_main_option(
        "sqlalchemy.url",
        resolve_async_database_url(database_url).replace("%", "%%"),
    )
    command.upgrade(alembic_cfg, "head")


__all__ = ["upgrade_database"]
