"""Tagged success/failure outcomes for repository and service calls.

Expected failures travel as values instead of exceptions::

    result = await versions.get(package_id, "1.0.0")
    if isinstance(result, Err):
        ...
    version = result.value
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


class UnwrapError(RuntimeError):
    """Raised when ``unwrap`` is called on an ``Err``."""


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        raise UnwrapError(str(self.error))


Result = Union[Ok[T], Err[E]]


__all__ = ["Err", "Ok", "Result", "UnwrapError"]
