"""Shared error helpers for HTTP APIs."""

from __future__ import annotations

from typing import Any, NoReturn, Optional, TypeVar

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from registry_api.domain import ClientInfo
from registry_api.errors import Failure, FailureKind, RegistryError, failure_from_error
from registry_api.models.error import Error
from registry_api.result import Err, Result

T = TypeVar("T")

_STATUS_ERROR_CODES: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_409_CONFLICT: "conflict",
    status.HTTP_422_UNPROCESSABLE_ENTITY: "validation_error",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "internal_error",
}

_STATUS_BY_FAILURE: dict[FailureKind, int] = {
    FailureKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    FailureKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    FailureKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    FailureKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureKind.CONFLICT: status.HTTP_409_CONFLICT,
    FailureKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_payload(
    message: str,
    *,
    error: Optional[str] = None,
    status_code: Optional[int] = None,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    resolved_error = error or _STATUS_ERROR_CODES.get(status_code or 0, "error")
    return Error(
        error=resolved_error,
        message=message,
        details=details,
    ).model_dump(by_alias=True, exclude_none=True)


def http_error(
    status_code: int,
    message: str,
    *,
    error: Optional[str] = None,
    details: Optional[dict[str, Any]] = None,
) -> HTTPException:
    payload = error_payload(
        message,
        error=error,
        status_code=status_code,
        details=details,
    )
    return HTTPException(status_code=status_code, detail=payload)


def bad_request(message: str, *, error: Optional[str] = None) -> HTTPException:
    return http_error(status.HTTP_400_BAD_REQUEST, message, error=error)


def unauthorized(message: str, *, error: Optional[str] = None) -> HTTPException:
    exc = http_error(status.HTTP_401_UNAUTHORIZED, message, error=error)
    exc.headers = {"WWW-Authenticate": "Bearer"}
    return exc


def forbidden(message: str, *, error: Optional[str] = None) -> HTTPException:
    return http_error(status.HTTP_403_FORBIDDEN, message, error=error)


def not_found(message: str, *, error: Optional[str] = None) -> HTTPException:
    return http_error(status.HTTP_404_NOT_FOUND, message, error=error)


def conflict(message: str, *, error: Optional[str] = None) -> HTTPException:
    return http_error(status.HTTP_409_CONFLICT, message, error=error)


def internal_error(message: str, *, error: Optional[str] = None) -> HTTPException:
    return http_error(status.HTTP_500_INTERNAL_SERVER_ERROR, message, error=error)


def raise_for_failure(failure: Failure) -> NoReturn:
    status_code = _STATUS_BY_FAILURE.get(failure.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code == status.HTTP_401_UNAUTHORIZED:
        raise unauthorized(failure.message)
    raise http_error(status_code, failure.message, error=failure.kind.value)


def unwrap_or_raise(result: Result[T, Any]) -> T:
    """Return the value of ``result`` or raise the matching ``HTTPException``."""

    if isinstance(result, Err):
        error = result.error
        if isinstance(error, RegistryError):
            error = failure_from_error(error)
        raise_for_failure(error)
    return result.value


def client_info_from_request(request: Request) -> ClientInfo:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip_address = forwarded.split(",")[0].strip()
    else:
        ip_address = request.headers.get("x-real-ip") or (
            request.client.host if request.client else None
        )
    return ClientInfo(
        ip_address=ip_address or "unknown",
        user_agent=request.headers.get("user-agent"),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render ``HTTPException`` as a flat ``{"error", "message"}`` body."""

    if isinstance(exc.detail, dict) and "error" in exc.detail:
        payload = exc.detail
    else:
        payload = error_payload(str(exc.detail), status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content=payload, headers=exc.headers)


__all__ = [
    "bad_request",
    "client_info_from_request",
    "conflict",
    "error_payload",
    "forbidden",
    "http_error",
    "http_exception_handler",
    "internal_error",
    "not_found",
    "raise_for_failure",
    "unauthorized",
    "unwrap_or_raise",
]
