from __future__ import annotations

from typing import Optional

from fastapi import Request

from registry_api.apis.admin_api_base import BaseAdminApi
from registry_api.http.errors import client_info_from_request
from registry_api.models.audit_log import AuditLogList
from registry_api.models.discontinue_request import DiscontinueRequest
from registry_api.models.package_detail import PackageDetail
from registry_api.models.package_summary import PackageList
from registry_api.models.uploader import UploaderList
from registry_api.models.uploaders_update_request import UploadersUpdateRequest
from registry_api.security_api import require_identity
from registry_api.services.admin_service import AdminService


class AdminApiImpl(BaseAdminApi):
    @property
    def _service(self) -> AdminService:
        return AdminService(self.runtime)

    async def list_packages(
        self,
        limit: int,
        offset: int,
        search: Optional[str],
    ) -> PackageList:
        return await self._service.list_packages(limit, offset, search)

    async def update_package_uploaders(
        self,
        name: str,
        uploaders_update_request: UploadersUpdateRequest,
        request: Request,
    ) -> UploaderList:
        return await self._service.update_uploaders(
            name,
            list(uploaders_update_request.user_ids),
            identity=require_identity(),
            client=client_info_from_request(request),
        )

    async def set_package_discontinued(
        self,
        name: str,
        discontinue_request: DiscontinueRequest,
        request: Request,
    ) -> PackageDetail:
        return await self._service.set_discontinued(
            name,
            discontinue_request.discontinued,
            discontinue_request.replaced_by,
            identity=require_identity(),
            client=client_info_from_request(request),
        )

    async def list_audit_logs(
        self,
        user_id: Optional[int],
        action: Optional[str],
        resource_type: Optional[str],
        resource_id: Optional[int],
        limit: int,
        offset: int,
    ) -> AuditLogList:
        return await self._service.list_audit_logs(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            limit=limit,
            offset=offset,
        )
