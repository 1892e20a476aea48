# coding: utf-8

from typing import ClassVar, Dict, List, Tuple, Any  # noqa: F401

from fastapi import Request
from fastapi.responses import Response
from pydantic import StrictStr

from registry_api.models.package_detail import PackageDetail
from registry_api.models.publish_response import PublishResponse
from registry_api.models.upload_url_response import UploadUrlResponse
from registry_api.models.version_detail import VersionDetail
from registry_api.runtime import RegistryRuntime


class BasePackagesApi:
    subclasses: ClassVar[Tuple] = ()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        BasePackagesApi.subclasses = BasePackagesApi.subclasses + (cls,)

    def __init__(self, runtime: RegistryRuntime) -> None:
        self.runtime = runtime

    async def get_package(
        self,
        name: StrictStr,
    ) -> PackageDetail:
        ...


    async def get_package_version(
        self,
        name: StrictStr,
        version: StrictStr,
    ) -> VersionDetail:
        ...


    async def download_package_archive(
        self,
        name: StrictStr,
        version: StrictStr,
    ) -> Response:
        ...


    async def get_upload_url(
        self,
    ) -> UploadUrlResponse:
        ...


    async def upload_package(
        self,
        request: Request,
    ) -> PublishResponse:
        ...


    async def finish_upload(
        self,
    ) -> PublishResponse:
        ...


    async def retract_package_version(
        self,
        name: StrictStr,
        version: StrictStr,
        request: Request,
    ) -> VersionDetail:
        ...
