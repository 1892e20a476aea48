from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import yaml
from fastapi.responses import Response

from registry_api.db.models import PackageRecord, VersionRecord
from registry_api.domain import ClientInfo, Identity
from registry_api.errors import ErrorKind
from registry_api.http.errors import forbidden, not_found, raise_for_failure, unwrap_or_raise
from registry_api.models.package_detail import PackageDetail
from registry_api.models.publish_response import PublishResponse, SuccessMessage
from registry_api.models.upload_url_response import UploadUrlResponse
from registry_api.models.version_detail import VersionDetail
from registry_api.result import Err
from registry_api.runtime import RegistryRuntime
from registry_api.services.audit import ACTION_VERSION_RETRACT, RESOURCE_VERSION
from registry_api.storage import package_archive_relative_path

LOGGER = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_manifest(text: str) -> dict[str, Any]:
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError:
        return {}
    return document if isinstance(document, dict) else {}


def build_version_detail(record: VersionRecord) -> VersionDetail:
    return VersionDetail(
        version=record.version,
        manifest=_parse_manifest(record.manifest),
        archive_url=record.archive_url,
        archive_sha256=record.archive_sha256,
        published=as_utc(record.created_at),
        retracted=True if record.is_retracted else None,
    )


async def build_package_detail(runtime: RegistryRuntime, package: PackageRecord) -> PackageDetail:
    versions = unwrap_or_raise(await runtime.versions.list_for_package(package.id))
    latest_result = await runtime.versions.get_latest(package.id)
    latest: Optional[VersionDetail] = None
    if isinstance(latest_result, Err):
        if latest_result.error.kind is not ErrorKind.NO_VERSIONS:
            unwrap_or_raise(latest_result)
    else:
        latest = build_version_detail(latest_result.value)
    return PackageDetail(
        name=package.name,
        isDiscontinued=package.is_discontinued,
        replacedBy=package.replaced_by,
        latest=latest,
        versions=[build_version_detail(record) for record in versions],
    )


class PackagesService:
    def __init__(self, runtime: RegistryRuntime) -> None:
        self._runtime = runtime

    async def _package_or_404(self, name: str) -> PackageRecord:
        result = await self._runtime.packages.get_by_name(name)
        if isinstance(result, Err):
            if result.error.kind is ErrorKind.NOT_FOUND:
                raise not_found(f"Package not found: {name}")
            unwrap_or_raise(result)
        return result.value

    async def get_package(self, name: str) -> PackageDetail:
        package = await self._package_or_404(name)
        return await build_package_detail(self._runtime, package)

    async def get_version(self, name: str, version: str) -> VersionDetail:
        package = await self._package_or_404(name)
        result = await self._runtime.versions.get(package.id, version)
        if isinstance(result, Err):
            if result.error.kind is ErrorKind.NOT_FOUND:
                raise not_found(f"Version not found: {name}@{version}")
            unwrap_or_raise(result)
        return build_version_detail(result.value)

    async def download_archive(self, name: str, version: str) -> Response:
        try:
            data = await self._runtime.blob_store.get(package_archive_relative_path(name, version))
        except ValueError:
            data = None
        if data is None:
            raise not_found(f"Archive not found: {name}@{version}")
        return Response(
            content=data,
            media_type="application/octet-stream",
            headers={"Content-Disposition": f'attachment; filename="{name}-{version}.tar.gz"'},
        )

    def upload_url(self) -> UploadUrlResponse:
        base_url = self._runtime.settings.effective_base_url
        return UploadUrlResponse(url=f"{base_url}/api/packages/versions/newUpload", fields={})

    async def publish(self, data: bytes, *, identity: Identity, client: ClientInfo) -> PublishResponse:
        result = await self._runtime.publisher.publish(data, identity=identity, client=client)
        if isinstance(result, Err):
            raise_for_failure(result.error)
        return PublishResponse(success=SuccessMessage(message=result.value.message))

    def finish_upload(self) -> PublishResponse:
        return PublishResponse(success=SuccessMessage(message="Upload finalized"))

    async def retract_version(
        self,
        name: str,
        version: str,
        *,
        identity: Identity,
        client: ClientInfo,
    ) -> VersionDetail:
        package = await self._package_or_404(name)
        if not identity.is_admin:
            allowed = unwrap_or_raise(await self._runtime.uploaders.can_publish(package.id, identity.user_id))
            if not allowed:
                raise forbidden("You do not have permission to retract versions of this package")
        result = await self._runtime.versions.retract(package.id, version)
        if isinstance(result, Err):
            if result.error.kind is ErrorKind.NOT_FOUND:
                raise not_found(f"Version not found: {name}@{version}")
            unwrap_or_raise(result)
        LOGGER.info("Retracted %s@%s (user=%s)", name, version, identity.user_id)
        self._runtime.audit.record_detached(
            user_id=identity.user_id,
            action=ACTION_VERSION_RETRACT,
            resource_type=RESOURCE_VERSION,
            resource_id=package.id,
            client=client,
        )
        return build_version_detail(result.value)


__all__ = ["PackagesService", "as_utc", "build_package_detail", "build_version_detail"]
