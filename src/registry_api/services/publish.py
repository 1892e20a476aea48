"""Publish pipeline: from an uploaded archive to a recorded, immutable version."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from registry_api.archive import ValidatedArchive, validate_archive
from registry_api.db.models import PackageRecord
from registry_api.domain import ClientInfo, Identity
from registry_api.errors import (
    ErrorKind,
    Failure,
    FailureKind,
    INTERNAL_ERROR_MESSAGE,
    failure_from_error,
)
from registry_api.jobs.docs import DocGenerationJob
from registry_api.jobs.queue import JobQueue
from registry_api.repo.packages import PackageRepository
from registry_api.repo.uploaders import PackageUploaderRepository
from registry_api.repo.versions import VersionRepository
from registry_api.result import Err, Ok, Result
from registry_api.services.audit import (
    ACTION_PACKAGE_PUBLISH,
    ACTION_VERSION_PUBLISH,
    RESOURCE_PACKAGE,
    RESOURCE_VERSION,
    AuditRecorder,
)
from registry_api.storage import BlobStore, package_archive_relative_path

LOGGER = logging.getLogger(__name__)


class PublishState(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    AUTHORIZED = "authorized"
    STORED = "stored"
    RECORDED = "recorded"
    ENQUEUED = "enqueued"
    RESPONDED = "responded"
    FAILED = "failed"


@dataclass(frozen=True)
class PublishReceipt:
    name: str
    version: str
    package_id: int
    version_id: int
    is_new_package: bool
    archive_url: str
    archive_sha256: str

    @property
    def message(self) -> str:
        return f"Successfully uploaded {self.name}@{self.version}"


def archive_url_for(base_url: str, name: str, version: str) -> str:
    return f"{base_url.rstrip('/')}/packages/{name}/versions/{version}.tar.gz"


@dataclass
class _PublishContext:
    identity: Identity
    client: ClientInfo
    size: int
    state: PublishState = PublishState.RECEIVED
    archive: Optional[ValidatedArchive] = None
    package: Optional[PackageRecord] = None
    blob_path: Optional[str] = None
    blob_written: bool = False

    @property
    def coordinates(self) -> str:
        if self.archive is None:
            return "<unvalidated>"
        return f"{self.archive.name}@{self.archive.version}"


class PublishOrchestrator:
    """Drive one upload through validate, authorize, store, record, audit and enqueue.

    Expected failures come back as ``Err(Failure)``; the orchestrator holds no
    locks. Concurrent publishes of the same coordinates are serialized by the
    exclusive blob create and the ``(package_id, version)`` unique constraint,
    so exactly one of them succeeds.
    """

    def __init__(
        self,
        *,
        packages: PackageRepository,
        versions: VersionRepository,
        uploaders: PackageUploaderRepository,
        blob_store: BlobStore,
        docs_store: BlobStore,
        audit: AuditRecorder,
        jobs: JobQueue,
        base_url: str,
        max_upload_bytes: int,
    ) -> None:
        self._packages = packages
        self._versions = versions
        self._uploaders = uploaders
        self._blob_store = blob_store
        self._docs_store = docs_store
        self._audit = audit
        self._jobs = jobs
        self._base_url = base_url
        self._max_upload_bytes = max_upload_bytes

    def _advance(self, ctx: _PublishContext, state: PublishState) -> None:
        LOGGER.debug(
            "Publish %s: %s -> %s (user=%s)",
            ctx.coordinates,
            ctx.state.value,
            state.value,
            ctx.identity.user_id,
        )
        ctx.state = state

    async def _fail(self, ctx: _PublishContext, failure: Failure) -> Err[Failure]:
        if failure.kind is FailureKind.INTERNAL:
            LOGGER.error(
                "Publish %s failed in state %s (user=%s)",
                ctx.coordinates,
                ctx.state.value,
                ctx.identity.user_id,
            )
        else:
            LOGGER.warning(
                "Publish %s rejected in state %s (user=%s): %s %s",
                ctx.coordinates,
                ctx.state.value,
                ctx.identity.user_id,
                failure.kind.value,
                failure.message,
            )
        if ctx.blob_written and ctx.blob_path is not None:
            await self._discard_blob(ctx.blob_path)
            ctx.blob_written = False
        ctx.state = PublishState.FAILED
        return Err(failure)

    async def _discard_blob(self, path: str) -> None:
        try:
            await self._blob_store.delete(path)
        except (OSError, ValueError):
            LOGGER.exception("Failed to remove orphaned blob %s", path)

    async def _authorize(self, ctx: _PublishContext, package: PackageRecord) -> Optional[Failure]:
        if ctx.identity.is_admin:
            return None
        allowed = await self._uploaders.can_publish(package.id, ctx.identity.user_id)
        if isinstance(allowed, Err):
            return failure_from_error(allowed.error)
        if not allowed.value:
            return Failure(
                FailureKind.FORBIDDEN,
                "You do not have permission to publish to this package",
            )
        return None

    async def publish(
        self,
        data: bytes,
        *,
        identity: Identity,
        client: ClientInfo,
    ) -> Result[PublishReceipt, Failure]:
        ctx = _PublishContext(identity=identity, client=client, size=len(data))
        LOGGER.debug("Publish received %d bytes from user=%s", ctx.size, identity.user_id)

        if not data:
            return await self._fail(ctx, Failure(FailureKind.BAD_REQUEST, "Upload body is empty."))
        if ctx.size > self._max_upload_bytes:
            return await self._fail(
                ctx,
                Failure(
                    FailureKind.BAD_REQUEST,
                    f"Upload exceeds the maximum size of {self._max_upload_bytes} bytes.",
                ),
            )

        validated = await asyncio.to_thread(validate_archive, data)
        if isinstance(validated, Err):
            return await self._fail(
                ctx,
                Failure(FailureKind.BAD_REQUEST, f"Invalid package: {validated.error.message}"),
            )
        ctx.archive = archive = validated.value
        self._advance(ctx, PublishState.VALIDATED)

        existing = await self._packages.get_by_name(archive.name)
        if isinstance(existing, Ok):
            ctx.package = existing.value
            denied = await self._authorize(ctx, ctx.package)
            if denied is not None:
                return await self._fail(ctx, denied)
        elif existing.error.kind is not ErrorKind.NOT_FOUND:
            return await self._fail(ctx, failure_from_error(existing.error))
        self._advance(ctx, PublishState.AUTHORIZED)

        sha256 = hashlib.sha256(data).hexdigest()
        ctx.blob_path = package_archive_relative_path(archive.name, archive.version)
        if ctx.package is not None:
            present = await self._versions.get(ctx.package.id, archive.version)
            if isinstance(present, Ok):
                return await self._fail(ctx, self._version_conflict(archive))
            if present.error.kind is not ErrorKind.NOT_FOUND:
                return await self._fail(ctx, failure_from_error(present.error))

        try:
            stored = await self._blob_store.put(ctx.blob_path, data, overwrite=False)
        except (OSError, ValueError):
            LOGGER.exception("Failed to store archive %s", ctx.blob_path)
            return await self._fail(ctx, Failure(FailureKind.INTERNAL, INTERNAL_ERROR_MESSAGE))
        if not stored:
            return await self._fail(ctx, self._version_conflict(archive))
        ctx.blob_written = True
        self._advance(ctx, PublishState.STORED)

        is_new_package = False
        if ctx.package is None:
            created = await self._packages.create(
                archive.name,
                description=archive.description,
                uploader_id=identity.user_id,
            )
            if isinstance(created, Ok):
                ctx.package = created.value
                is_new_package = True
            elif created.error.kind is ErrorKind.PACKAGE_EXISTS:
                # Another first publish claimed the name; treat it as an existing package.
                failure = await self._adopt_existing_package(ctx, archive.name)
                if failure is not None:
                    return await self._fail(ctx, failure)
            else:
                return await self._fail(ctx, failure_from_error(created.error))

        package = ctx.package
        assert package is not None
        archive_url = archive_url_for(self._base_url, archive.name, archive.version)
        recorded = await self._versions.create(
            package_id=package.id,
            version=archive.version,
            manifest=archive.manifest_text,
            archive_url=archive_url,
            archive_sha256=sha256,
            readme=archive.readme,
            changelog=archive.changelog,
        )
        if isinstance(recorded, Err):
            if recorded.error.kind is ErrorKind.VERSION_EXISTS:
                return await self._fail(ctx, self._version_conflict(archive))
            return await self._fail(ctx, failure_from_error(recorded.error))
        ctx.blob_written = False
        self._advance(ctx, PublishState.RECORDED)

        self._audit.record_detached(
            user_id=identity.user_id,
            action=ACTION_PACKAGE_PUBLISH if is_new_package else ACTION_VERSION_PUBLISH,
            resource_type=RESOURCE_PACKAGE if is_new_package else RESOURCE_VERSION,
            resource_id=package.id,
            client=client,
        )

        try:
            self._jobs.enqueue(
                DocGenerationJob(
                    package_name=archive.name,
                    version=archive.version,
                    blob_store=self._blob_store,
                    docs_store=self._docs_store,
                )
            )
        except Exception:  # noqa: BLE001
            LOGGER.exception("Failed to enqueue documentation job for %s", ctx.coordinates)
        self._advance(ctx, PublishState.ENQUEUED)

        receipt = PublishReceipt(
            name=archive.name,
            version=archive.version,
            package_id=package.id,
            version_id=recorded.value.id,
            is_new_package=is_new_package,
            archive_url=archive_url,
            archive_sha256=sha256,
        )
        self._advance(ctx, PublishState.RESPONDED)
        LOGGER.info(
            "Published %s (package_id=%s, new_package=%s, user=%s)",
            ctx.coordinates,
            package.id,
            is_new_package,
            identity.user_id,
        )
        return Ok(receipt)

    async def _adopt_existing_package(self, ctx: _PublishContext, name: str) -> Optional[Failure]:
        reread = await self._packages.get_by_name(name)
        if isinstance(reread, Err):
            return failure_from_error(reread.error)
        ctx.package = reread.value
        return await self._authorize(ctx, ctx.package)

    @staticmethod
    def _version_conflict(archive: ValidatedArchive) -> Failure:
        return Failure(
            FailureKind.CONFLICT,
            f"Version {archive.version} of package {archive.name} already exists",
        )


__all__ = [
    "PublishOrchestrator",
    "PublishReceipt",
    "PublishState",
    "archive_url_for",
]
