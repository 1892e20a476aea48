"""Registry database helpers."""

from .base import Base
from .session import (
    create_database_engine,
    create_schema,
    create_session_factory,
    resolve_async_database_url,
)

__all__ = [
    "Base",
    "create_database_engine",
    "create_schema",
    "create_session_factory",
    "resolve_async_database_url",
]
