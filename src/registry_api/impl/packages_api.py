from __future__ import annotations

from fastapi import Request
from fastapi.responses import Response

from registry_api.apis.packages_api_base import BasePackagesApi
from registry_api.http.errors import bad_request, client_info_from_request
from registry_api.models.package_detail import PackageDetail
from registry_api.models.publish_response import PublishResponse
from registry_api.models.upload_url_response import UploadUrlResponse
from registry_api.models.version_detail import VersionDetail
from registry_api.security_api import require_identity
from registry_api.services.packages_service import PackagesService


class PackagesApiImpl(BasePackagesApi):
    @property
    def _service(self) -> PackagesService:
        return PackagesService(self.runtime)

    async def get_package(self, name: str) -> PackageDetail:
        return await self._service.get_package(name)

    async def get_package_version(self, name: str, version: str) -> VersionDetail:
        return await self._service.get_version(name, version)

    async def download_package_archive(self, name: str, version: str) -> Response:
        return await self._service.download_archive(name, version)

    async def get_upload_url(self) -> UploadUrlResponse:
        require_identity()
        return self._service.upload_url()

    async def upload_package(self, request: Request) -> PublishResponse:
        identity = require_identity()
        limit = self.runtime.settings.max_upload_bytes
        message = f"Upload exceeds the maximum size of {limit} bytes."
        declared = request.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > limit:
            raise bad_request(message)
        # Chunked bodies carry no length; stop reading once the limit is passed.
        data = bytearray()
        async for chunk in request.stream():
            data.extend(chunk)
            if len(data) > limit:
                raise bad_request(message)
        return await self._service.publish(
            bytes(data),
            identity=identity,
            client=client_info_from_request(request),
        )

    async def finish_upload(self) -> PublishResponse:
        return self._service.finish_upload()

    async def retract_package_version(
        self,
        name: str,
        version: str,
        request: Request,
    ) -> VersionDetail:
        return await self._service.retract_version(
            name,
            version,
            identity=require_identity(),
            client=client_info_from_request(request),
        )
