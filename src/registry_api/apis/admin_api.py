# coding: utf-8

from typing import Dict, List  # noqa: F401
import importlib
import pkgutil

from registry_api.apis.admin_api_base import BaseAdminApi
import registry_api.impl

from fastapi import (  # noqa: F401
    APIRouter,
    Body,
    Depends,
    HTTPException,
    Path,
    Query,
    Request,
    Security,
    status,
)

from registry_api.models.extra_models import TokenModel  # noqa: F401
from pydantic import Field, StrictStr
from typing import Optional
from typing_extensions import Annotated
from registry_api.models.audit_log import AuditLogList
from registry_api.models.discontinue_request import DiscontinueRequest
from registry_api.models.error import Error
from registry_api.models.package_detail import PackageDetail
from registry_api.models.package_summary import PackageList
from registry_api.models.uploader import UploaderList
from registry_api.models.uploaders_update_request import UploadersUpdateRequest
from registry_api.runtime import RegistryRuntime, get_runtime
from registry_api.security_api import get_token_bearerAuth

router = APIRouter()

ns_pkg = registry_api.impl
for _, name, _ in pkgutil.iter_modules(ns_pkg.__path__, ns_pkg.__name__ + "."):
    importlib.import_module(name)


@router.get(
    "/api/admin/packages",
    responses={
        200: {"model": PackageList, "description": "OK"},
        401: {"model": Error, "description": "Unauthorized"},
        403: {"model": Error, "description": "Forbidden"},
    },
    tags=["Admin"],
    summary="List packages with version and uploader counts",
    response_model_by_alias=True,
)
async def list_packages(
    limit: Annotated[int, Field(le=500, ge=1)] = Query(50, description="Page size", alias="limit", ge=1, le=500),
    offset: Annotated[int, Field(ge=0)] = Query(0, description="Rows to skip", alias="offset", ge=0),
    search: Annotated[Optional[StrictStr], Field(description="Substring of the package name")] = Query(None, description="Substring of the package name", alias="search"),
    token_bearerAuth: TokenModel = Security(
        get_token_bearerAuth, scopes=["admin"]
    ),
    runtime: RegistryRuntime = Depends(get_runtime),
) -> PackageList:
    if not BaseAdminApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BaseAdminApi.subclasses[0](runtime).list_packages(limit, offset, search)


@router.put(
    "/api/admin/packages/{name}/uploaders",
    responses={
        200: {"model": UploaderList, "description": "OK"},
        401: {"model": Error, "description": "Unauthorized"},
        403: {"model": Error, "description": "Forbidden"},
        404: {"model": Error, "description": "Not Found"},
    },
    tags=["Admin"],
    summary="Replace the uploaders of a package",
    response_model_by_alias=True,
)
async def update_package_uploaders(
    request: Request,
    name: StrictStr = Path(..., description=""),
    uploaders_update_request: UploadersUpdateRequest = Body(..., description=""),
    token_bearerAuth: TokenModel = Security(
        get_token_bearerAuth, scopes=["admin"]
    ),
    runtime: RegistryRuntime = Depends(get_runtime),
) -> UploaderList:
    if not BaseAdminApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BaseAdminApi.subclasses[0](runtime).update_package_uploaders(name, uploaders_update_request, request)


@router.put(
    "/api/admin/packages/{name}/discontinued",
    responses={
        200: {"model": PackageDetail, "description": "OK"},
        401: {"model": Error, "description": "Unauthorized"},
        403: {"model": Error, "description": "Forbidden"},
        404: {"model": Error, "description": "Not Found"},
    },
    tags=["Admin"],
    summary="Mark a package discontinued or active",
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def set_package_discontinued(
    request: Request,
    name: StrictStr = Path(..., description=""),
    discontinue_request: DiscontinueRequest = Body(..., description=""),
    token_bearerAuth: TokenModel = Security(
        get_token_bearerAuth, scopes=["admin"]
    ),
    runtime: RegistryRuntime = Depends(get_runtime),
) -> PackageDetail:
    if not BaseAdminApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BaseAdminApi.subclasses[0](runtime).set_package_discontinued(name, discontinue_request, request)


@router.get(
    "/api/admin/audit-logs",
    responses={
        200: {"model": AuditLogList, "description": "OK"},
        401: {"model": Error, "description": "Unauthorized"},
        403: {"model": Error, "description": "Forbidden"},
    },
    tags=["Admin"],
    summary="Query the audit log",
    response_model_by_alias=True,
)
async def list_audit_logs(
    user_id: Annotated[Optional[int], Field(description="Filter by acting user id")] = Query(None, description="Filter by acting user id", alias="userId"),
    action: Annotated[Optional[StrictStr], Field(description="Filter by action name")] = Query(None, description="Filter by action name", alias="action"),
    resource_type: Annotated[Optional[StrictStr], Field(description="Filter by resource type")] = Query(None, description="Filter by resource type", alias="resourceType"),
    resource_id: Annotated[Optional[int], Field(description="Filter by resource id")] = Query(None, description="Filter by resource id", alias="resourceId"),
    limit: Annotated[int, Field(le=500, ge=1)] = Query(100, description="Page size", alias="limit", ge=1, le=500),
    offset: Annotated[int, Field(ge=0)] = Query(0, description="Rows to skip", alias="offset", ge=0),
    token_bearerAuth: TokenModel = Security(
        get_token_bearerAuth, scopes=["admin"]
    ),
    runtime: RegistryRuntime = Depends(get_runtime),
) -> AuditLogList:
    if not BaseAdminApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BaseAdminApi.subclasses[0](runtime).list_audit_logs(user_id, action, resource_type, resource_id, limit, offset)
