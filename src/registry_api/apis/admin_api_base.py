# coding: utf-8

from typing import ClassVar, Dict, List, Tuple  # noqa: F401

from fastapi import Request
from pydantic import Field, StrictInt, StrictStr
from typing import Optional
from typing_extensions import Annotated

from registry_api.models.audit_log import AuditLogList
from registry_api.models.discontinue_request import DiscontinueRequest
from registry_api.models.package_detail import PackageDetail
from registry_api.models.package_summary import PackageList
from registry_api.models.uploader import UploaderList
from registry_api.models.uploaders_update_request import UploadersUpdateRequest
from registry_api.runtime import RegistryRuntime


class BaseAdminApi:
    subclasses: ClassVar[Tuple] = ()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        BaseAdminApi.subclasses = BaseAdminApi.subclasses + (cls,)

    def __init__(self, runtime: RegistryRuntime) -> None:
        self.runtime = runtime

    async def list_packages(
        self,
        limit: Annotated[int, Field(le=500, ge=1)],
        offset: Annotated[int, Field(ge=0)],
        search: Optional[StrictStr],
    ) -> PackageList:
        ...


    async def update_package_uploaders(
        self,
        name: StrictStr,
        uploaders_update_request: UploadersUpdateRequest,
        request: Request,
    ) -> UploaderList:
        ...


    async def set_package_discontinued(
        self,
        name: StrictStr,
        discontinue_request: DiscontinueRequest,
        request: Request,
    ) -> PackageDetail:
        ...


    async def list_audit_logs(
        self,
        user_id: Optional[StrictInt],
        action: Optional[StrictStr],
        resource_type: Optional[StrictStr],
        resource_id: Optional[StrictInt],
        limit: Annotated[int, Field(le=500, ge=1)],
        offset: Annotated[int, Field(ge=0)],
    ) -> AuditLogList:
        ...
