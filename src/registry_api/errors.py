"""Error taxonomy shared by repositories, services and the HTTP layer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """Low-level failure reported by a validator or repository."""

    MALFORMED_ARCHIVE = "malformed_archive"
    MANIFEST_MISSING = "manifest_missing"
    MANIFEST_INVALID = "manifest_invalid"
    INVALID_NAME = "invalid_name"
    INVALID_VERSION = "invalid_version"
    NOT_FOUND = "not_found"
    NO_VERSIONS = "no_versions"
    VERSION_EXISTS = "version_exists"
    PACKAGE_EXISTS = "package_exists"
    USER_EXISTS = "user_exists"
    STORAGE = "storage"


class FailureKind(str, Enum):
    """Client-facing outcome of a failed operation."""

    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal_error"


@dataclass(frozen=True)
class RegistryError:
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str

    def __str__(self) -> str:
        return self.message


_FAILURE_BY_ERROR: dict[ErrorKind, FailureKind] = {
    ErrorKind.MALFORMED_ARCHIVE: FailureKind.BAD_REQUEST,
    ErrorKind.MANIFEST_MISSING: FailureKind.BAD_REQUEST,
    ErrorKind.MANIFEST_INVALID: FailureKind.BAD_REQUEST,
    ErrorKind.INVALID_NAME: FailureKind.BAD_REQUEST,
    ErrorKind.INVALID_VERSION: FailureKind.BAD_REQUEST,
    ErrorKind.NOT_FOUND: FailureKind.NOT_FOUND,
    ErrorKind.NO_VERSIONS: FailureKind.NOT_FOUND,
    ErrorKind.VERSION_EXISTS: FailureKind.CONFLICT,
    ErrorKind.PACKAGE_EXISTS: FailureKind.CONFLICT,
    ErrorKind.USER_EXISTS: FailureKind.CONFLICT,
    ErrorKind.STORAGE: FailureKind.INTERNAL,
}

INTERNAL_ERROR_MESSAGE = "Internal server error."


def failure_from_error(error: RegistryError) -> Failure:
    """Map a repository error onto its client-facing failure.

    Storage errors never leak their message to clients.
    """

    kind = _FAILURE_BY_ERROR.get(error.kind, FailureKind.INTERNAL)
    if kind is FailureKind.INTERNAL:
        return Failure(kind, INTERNAL_ERROR_MESSAGE)
    return Failure(kind, error.message)


__all__ = [
    "ErrorKind",
    "Failure",
    "FailureKind",
    "INTERNAL_ERROR_MESSAGE",
    "RegistryError",
    "failure_from_error",
]
