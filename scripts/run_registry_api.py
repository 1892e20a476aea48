"""Launch the registry API, or only apply database migrations."""

from __future__ import annotations

import argparse
import logging
import os
from typing import Final, Optional

import uvicorn

from registry_api.config.settings import RegistrySettings, get_settings
from registry_api.db.migrations import upgrade_database

LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVELS: Final[tuple[str, ...]] = ("critical", "error", "warning", "info", "debug", "trace")

LOGGER = logging.getLogger("registry_api.launcher")

# CLI flag -> environment variable read by RegistrySettings.
_ENV_OVERRIDES: Final[dict[str, str]] = {
    "database_url": "REGISTRY_DATABASE_URL",
    "storage_root": "REGISTRY_STORAGE_ROOT",
    "docs_root": "REGISTRY_DOCS_ROOT",
    "base_url": "REGISTRY_BASE_URL",
}


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the artifact registry API.")
    parser.add_argument("--host", default=None, help="Bind address (overrides REGISTRY_HOST).")
    parser.add_argument("--port", type=int, default=None, help="Port (overrides REGISTRY_PORT).")
    parser.add_argument("--reload", action="store_true", help="Enable uvicorn auto-reload.")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default=None)
    parser.add_argument("--database-url", default=None, help="SQLAlchemy database URL.")
    parser.add_argument("--storage-root", default=None, help="Directory for package archives.")
    parser.add_argument("--docs-root", default=None, help="Directory for generated documentation.")
    parser.add_argument("--base-url", default=None, help="Public URL used in archive links.")
    parser.add_argument(
        "--migrate-only",
        action="store_true",
        help="Apply database migrations and exit without serving.",
    )
    return parser.parse_args(argv)


def _export_overrides(args: argparse.Namespace) -> RegistrySettings:
    # The app module builds its own settings on import, possibly in a
    # reloader child process, so overrides travel through the environment.
    for option, variable in _ENV_OVERRIDES.items():
        value = getattr(args, option)
        if value:
            os.environ[variable] = value
    get_settings.cache_clear()
    return get_settings()


def configure_logging(log_level: str) -> None:
    root_level = logging.DEBUG if log_level == "trace" else getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(level=root_level, format=LOG_FORMAT)
    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(logger_name).setLevel(root_level)


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    settings = _export_overrides(args)
    log_level = (args.log_level or settings.log_level).lower()
    configure_logging(log_level)

    if args.migrate_only:
        LOGGER.info("Applying migrations to %s", settings.database_url)
        upgrade_database(settings.database_url)
        return

    uvicorn.run(
        "registry_api.app:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload or settings.reload,
        log_level="debug" if log_level == "trace" else log_level,
        log_config=None,
    )


if __name__ == "__main__":
    main()
