from __future__ import annotations

import functools
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from registry_api.errors import ErrorKind, RegistryError
from registry_api.result import Err, Result

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def storage_guard(
    func: Callable[..., Awaitable[Result[T, RegistryError]]],
) -> Callable[..., Awaitable[Result[T, RegistryError]]]:
    """Turn unexpected database exceptions into ``STORAGE`` errors."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Result[T, RegistryError]:
        try:
            return await func(*args, **kwargs)
        except SQLAlchemyError as exc:
            LOGGER.exception("Database operation %s failed", func.__qualname__)
            return Err(RegistryError(ErrorKind.STORAGE, f"Database error: {exc}"))

    return wrapper


def not_found(message: str) -> Err[RegistryError]:
    return Err(RegistryError(ErrorKind.NOT_FOUND, message))
