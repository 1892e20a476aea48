# coding: utf-8

from typing import Dict, List, Any  # noqa: F401
import importlib
import pkgutil

from registry_api.apis.packages_api_base import BasePackagesApi
import registry_api.impl

from fastapi import (  # noqa: F401
    APIRouter,
    Depends,
    HTTPException,
    Path,
    Request,
    Response,
    Security,
    status,
)

from registry_api.models.extra_models import TokenModel  # noqa: F401
from pydantic import StrictStr
from registry_api.models.error import Error
from registry_api.models.package_detail import PackageDetail
from registry_api.models.publish_response import PublishResponse
from registry_api.models.upload_url_response import UploadUrlResponse
from registry_api.models.version_detail import VersionDetail
from registry_api.runtime import RegistryRuntime, get_runtime
from registry_api.security_api import get_token_bearerAuth

router = APIRouter()

ns_pkg = registry_api.impl
for _, name, _ in pkgutil.iter_modules(ns_pkg.__path__, ns_pkg.__name__ + "."):
    importlib.import_module(name)


@router.get(
    "/api/packages/versions/new",
    responses={
        200: {"model": UploadUrlResponse, "description": "OK"},
        401: {"model": Error, "description": "Unauthorized"},
    },
    tags=["Packages"],
    summary="Get the upload URL for a new version",
    response_model_by_alias=True,
)
async def get_upload_url(
    token_bearerAuth: TokenModel = Security(
        get_token_bearerAuth, scopes=["publish"]
    ),
    runtime: RegistryRuntime = Depends(get_runtime),
) -> UploadUrlResponse:
    if not BasePackagesApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BasePackagesApi.subclasses[0](runtime).get_upload_url()


@router.post(
    "/api/packages/versions/newUpload",
    responses={
        200: {"model": PublishResponse, "description": "Published"},
        400: {"model": Error, "description": "Invalid package"},
        401: {"model": Error, "description": "Unauthorized"},
        403: {"model": Error, "description": "Forbidden"},
        409: {"model": Error, "description": "Conflict"},
    },
    tags=["Packages"],
    summary="Upload a package archive",
    response_model_by_alias=True,
)
async def upload_package(
    request: Request,
    token_bearerAuth: TokenModel = Security(
        get_token_bearerAuth, scopes=["publish"]
    ),
    runtime: RegistryRuntime = Depends(get_runtime),
) -> PublishResponse:
    if not BasePackagesApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BasePackagesApi.subclasses[0](runtime).upload_package(request)


@router.get(
    "/api/packages/versions/newUploadFinish",
    responses={
        200: {"model": PublishResponse, "description": "OK"},
    },
    tags=["Packages"],
    summary="Finalize an upload",
    response_model_by_alias=True,
)
async def finish_upload(
    runtime: RegistryRuntime = Depends(get_runtime),
) -> PublishResponse:
    if not BasePackagesApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BasePackagesApi.subclasses[0](runtime).finish_upload()


@router.get(
    "/api/packages/{name}",
    responses={
        200: {"model": PackageDetail, "description": "OK"},
        404: {"model": Error, "description": "Not Found"},
    },
    tags=["Packages"],
    summary="Get package with all versions",
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def get_package(
    name: StrictStr = Path(..., description=""),
    runtime: RegistryRuntime = Depends(get_runtime),
) -> PackageDetail:
    if not BasePackagesApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BasePackagesApi.subclasses[0](runtime).get_package(name)


@router.get(
    "/api/packages/{name}/versions/{version}",
    responses={
        200: {"model": VersionDetail, "description": "OK"},
        404: {"model": Error, "description": "Not Found"},
    },
    tags=["Packages"],
    summary="Get one package version",
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def get_package_version(
    name: StrictStr = Path(..., description=""),
    version: StrictStr = Path(..., description=""),
    runtime: RegistryRuntime = Depends(get_runtime),
) -> VersionDetail:
    if not BasePackagesApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BasePackagesApi.subclasses[0](runtime).get_package_version(name, version)


@router.post(
    "/api/packages/{name}/versions/{version}/retract",
    responses={
        200: {"model": VersionDetail, "description": "Retracted"},
        401: {"model": Error, "description": "Unauthorized"},
        403: {"model": Error, "description": "Forbidden"},
        404: {"model": Error, "description": "Not Found"},
    },
    tags=["Packages"],
    summary="Retract a package version",
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def retract_package_version(
    request: Request,
    name: StrictStr = Path(..., description=""),
    version: StrictStr = Path(..., description=""),
    token_bearerAuth: TokenModel = Security(
        get_token_bearerAuth, scopes=["publish"]
    ),
    runtime: RegistryRuntime = Depends(get_runtime),
) -> VersionDetail:
    if not BasePackagesApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BasePackagesApi.subclasses[0](runtime).retract_package_version(name, version, request)


@router.get(
    "/packages/{name}/versions/{version}.tar.gz",
    responses={
        200: {"content": {"application/octet-stream": {}}, "description": "Archive bytes"},
        404: {"model": Error, "description": "Not Found"},
    },
    tags=["Packages"],
    summary="Download a package archive",
    response_class=Response,
)
async def download_package_archive(
    name: StrictStr = Path(..., description=""),
    version: StrictStr = Path(..., description=""),
    runtime: RegistryRuntime = Depends(get_runtime),
) -> Response:
    if not BasePackagesApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BasePackagesApi.subclasses[0](runtime).download_package_archive(name, version)
