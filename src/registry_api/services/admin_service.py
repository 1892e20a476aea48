from __future__ import annotations

import logging
from typing import Optional

from registry_api.db.models import UserRecord
from registry_api.domain import ClientInfo, Identity
from registry_api.errors import ErrorKind
from registry_api.http.errors import not_found, unwrap_or_raise
from registry_api.models.audit_log import AuditLogEntry, AuditLogList
from registry_api.models.package_detail import PackageDetail
from registry_api.models.package_summary import PackageList, PackageSummary
from registry_api.models.uploader import Uploader, UploaderList
from registry_api.result import Err
from registry_api.runtime import RegistryRuntime
from registry_api.services.audit import (
    ACTION_PACKAGE_DISCONTINUE,
    ACTION_UPLOADER_CHANGE,
    RESOURCE_PACKAGE,
)
from registry_api.services.packages_service import as_utc, build_package_detail

LOGGER = logging.getLogger(__name__)

DEFAULT_AUDIT_LIMIT = 100
MAX_AUDIT_LIMIT = 500


def _uploader_from_model(user: UserRecord) -> Uploader:
    return Uploader(
        id=user.id,
        email=user.email,
        displayName=user.display_name,
        isAdmin=user.is_admin,
        status=user.status,
        lastLoginAt=as_utc(user.last_login_at) if user.last_login_at else None,
    )


class AdminService:
    def __init__(self, runtime: RegistryRuntime) -> None:
        self._runtime = runtime

    async def list_packages(
        self,
        limit: int,
        offset: int,
        search: Optional[str],
    ) -> PackageList:
        rows = unwrap_or_raise(
            await self._runtime.packages.list_all(limit=limit, offset=offset, search=search)
        )
        return PackageList(
            packages=[
                PackageSummary(
                    id=row.package.id,
                    name=row.package.name,
                    description=row.package.description,
                    isDiscontinued=row.package.is_discontinued,
                    replacedBy=row.package.replaced_by,
                    isPrivate=row.package.is_private,
                    versionCount=row.version_count,
                    uploaderCount=row.uploader_count,
                    createdAt=as_utc(row.package.created_at),
                )
                for row in rows
            ]
        )

    async def update_uploaders(
        self,
        name: str,
        user_ids: list[int],
        *,
        identity: Identity,
        client: ClientInfo,
    ) -> UploaderList:
        """Make the uploader grants of ``name`` equal to ``user_ids``."""

        package_result = await self._runtime.packages.get_by_name(name)
        if isinstance(package_result, Err):
            if package_result.error.kind is ErrorKind.NOT_FOUND:
                raise not_found(f"Package not found: {name}")
            unwrap_or_raise(package_result)
        package = package_result.value

        desired = set(user_ids)
        known = unwrap_or_raise(await self._runtime.users.get_many(desired))
        missing = desired - {user.id for user in known}
        if missing:
            raise not_found(f"Unknown user id(s): {', '.join(str(user_id) for user_id in sorted(missing))}")

        current = {
            user.id for user in unwrap_or_raise(await self._runtime.uploaders.list_uploaders(package.id))
        }
        for user_id in sorted(current - desired):
            removed = await self._runtime.uploaders.remove_uploader(package.id, user_id)
            # A concurrent change may have removed the grant already.
            if isinstance(removed, Err) and removed.error.kind is not ErrorKind.NOT_FOUND:
                unwrap_or_raise(removed)
        for user_id in sorted(desired - current):
            unwrap_or_raise(await self._runtime.uploaders.add_uploader(package.id, user_id))

        LOGGER.info(
            "Uploaders of %s changed by user=%s: added=%s removed=%s",
            name,
            identity.user_id,
            sorted(desired - current),
            sorted(current - desired),
        )
        self._runtime.audit.record_detached(
            user_id=identity.user_id,
            action=ACTION_UPLOADER_CHANGE,
            resource_type=RESOURCE_PACKAGE,
            resource_id=package.id,
            client=client,
        )
        uploaders = unwrap_or_raise(await self._runtime.uploaders.list_uploaders(package.id))
        return UploaderList(
            package=package.name,
            uploaders=[_uploader_from_model(user) for user in sorted(uploaders, key=lambda u: u.id)],
        )

    async def set_discontinued(
        self,
        name: str,
        discontinued: bool,
        replaced_by: Optional[str],
        *,
        identity: Identity,
        client: ClientInfo,
    ) -> PackageDetail:
        package_result = await self._runtime.packages.get_by_name(name)
        if isinstance(package_result, Err):
            if package_result.error.kind is ErrorKind.NOT_FOUND:
                raise not_found(f"Package not found: {name}")
            unwrap_or_raise(package_result)
        package = unwrap_or_raise(
            await self._runtime.packages.set_discontinued(
                package_result.value.id,
                discontinued=discontinued,
                replaced_by=replaced_by,
            )
        )
        self._runtime.audit.record_detached(
            user_id=identity.user_id,
            action=ACTION_PACKAGE_DISCONTINUE,
            resource_type=RESOURCE_PACKAGE,
            resource_id=package.id,
            client=client,
        )
        return await build_package_detail(self._runtime, package)

    async def list_audit_logs(
        self,
        *,
        user_id: Optional[int],
        action: Optional[str],
        resource_type: Optional[str],
        resource_id: Optional[int],
        limit: Optional[int],
        offset: Optional[int],
    ) -> AuditLogList:
        page_size = min(max(limit or DEFAULT_AUDIT_LIMIT, 1), MAX_AUDIT_LIMIT)
        start = max(offset or 0, 0)
        records = unwrap_or_raise(
            await self._runtime.audit_logs.list(
                user_id=user_id,
                action=action,
                resource_type=resource_type,
                resource_id=resource_id,
                limit=page_size,
                offset=start,
            )
        )
        return AuditLogList(
            logs=[
                AuditLogEntry(
                    id=record.id,
                    userId=record.user_id,
                    action=record.action,
                    resourceType=record.resource_type,
                    resourceId=record.resource_id,
                    ipAddress=record.ip_address,
                    userAgent=record.user_agent,
                    createdAt=as_utc(record.created_at),
                )
                for record in records
            ],
            limit=page_size,
            offset=start,
        )


__all__ = ["AdminService", "DEFAULT_AUDIT_LIMIT", "MAX_AUDIT_LIMIT"]
