"""FastAPI application factory for the artifact registry."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from registry_api import __version__
from registry_api.apis.admin_api import router as AdminApiRouter
from registry_api.apis.health_api import router as HealthApiRouter
from registry_api.apis.packages_api import router as PackagesApiRouter
from registry_api.config.settings import RegistrySettings, get_settings
from registry_api.db.migrations import upgrade_database
from registry_api.db.seed_data import seed_admin_account
from registry_api.http.errors import http_exception_handler
from registry_api.runtime import RegistryRuntime

LOGGER = logging.getLogger(__name__)


def create_app(settings: Optional[RegistrySettings] = None) -> FastAPI:
    resolved = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if resolved.run_migrations:
            await asyncio.to_thread(upgrade_database, resolved.database_url)
        runtime = RegistryRuntime.from_settings(resolved)
        app.state.runtime = runtime
        await seed_admin_account(runtime.users, resolved)
        runtime.start()
        LOGGER.info(
            "Registry API ready (storage=%s, docs=%s, job_concurrency=%s)",
            resolved.storage_root,
            resolved.docs_root,
            resolved.job_concurrency,
        )
        try:
            yield
        finally:
            await runtime.aclose()

    app = FastAPI(
        title="Artifact Registry API",
        description="Publish, resolve and download immutable package archives.",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    if resolved.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=resolved.cors_origins,
            allow_methods=["GET", "POST", "PUT"],
            allow_headers=["Authorization", "Content-Type"],
        )

    app.include_router(HealthApiRouter)
    app.include_router(PackagesApiRouter)
    app.include_router(AdminApiRouter)
    return app


__all__ = ["create_app"]
