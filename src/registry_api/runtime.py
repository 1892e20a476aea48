"""Wiring of long-lived registry components."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from registry_api.config.settings import RegistrySettings
from registry_api.db.session import create_database_engine, create_session_factory
from registry_api.jobs.queue import JobQueue, log_job_events
from registry_api.repo.audit import AuditLogRepository
from registry_api.repo.packages import PackageRepository
from registry_api.repo.uploaders import PackageUploaderRepository
from registry_api.repo.users import UserRepository
from registry_api.repo.versions import VersionRepository
from registry_api.services.audit import AuditRecorder
from registry_api.services.publish import PublishOrchestrator
from registry_api.storage import BlobStore, FileSystemBlobStore
from registry_api.tasks import TaskSupervisor

LOGGER = logging.getLogger(__name__)


@dataclass
class RegistryRuntime:
    settings: RegistrySettings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    blob_store: BlobStore
    docs_store: BlobStore
    jobs: JobQueue
    supervisor: TaskSupervisor
    packages: PackageRepository
    versions: VersionRepository
    uploaders: PackageUploaderRepository
    users: UserRepository
    audit_logs: AuditLogRepository
    audit: AuditRecorder
    publisher: PublishOrchestrator
    _event_logger: Optional[asyncio.Task[None]] = None

    @classmethod
    def from_settings(cls, settings: RegistrySettings) -> "RegistryRuntime":
        engine = create_database_engine(settings.database_url)
        session_factory = create_session_factory(engine)
        blob_store = FileSystemBlobStore(settings.storage_root)
        docs_store = FileSystemBlobStore(settings.docs_root)
        jobs = JobQueue(max_concurrent=settings.job_concurrency)
        supervisor = TaskSupervisor()
        packages = PackageRepository(session_factory)
        versions = VersionRepository(session_factory)
        uploaders = PackageUploaderRepository(session_factory)
        audit_logs = AuditLogRepository(session_factory)
        audit = AuditRecorder(audit_logs, supervisor)
        publisher = PublishOrchestrator(
            packages=packages,
            versions=versions,
            uploaders=uploaders,
            blob_store=blob_store,
            docs_store=docs_store,
            audit=audit,
            jobs=jobs,
            base_url=settings.effective_base_url,
            max_upload_bytes=settings.max_upload_bytes,
        )
        return cls(
            settings=settings,
            engine=engine,
            session_factory=session_factory,
            blob_store=blob_store,
            docs_store=docs_store,
            jobs=jobs,
            supervisor=supervisor,
            packages=packages,
            versions=versions,
            uploaders=uploaders,
            users=UserRepository(session_factory),
            audit_logs=audit_logs,
            audit=audit,
            publisher=publisher,
        )

    def start(self) -> None:
        """Attach the logging subscriber to the job queue."""

        if self._event_logger is None:
            self._event_logger = asyncio.get_running_loop().create_task(
                log_job_events(self.jobs.subscribe()),
                name="job-event-logger",
            )

    async def aclose(self) -> None:
        await self.jobs.shutdown()
        if self._event_logger is not None:
            # Ends once shutdown has closed its subscription.
            await self._event_logger
            self._event_logger = None
        await self.supervisor.shutdown()
        await self.engine.dispose()
        LOGGER.info("Registry runtime closed")


def get_runtime(request: Request) -> RegistryRuntime:
    return request.app.state.runtime


__all__ = ["RegistryRuntime", "get_runtime"]
