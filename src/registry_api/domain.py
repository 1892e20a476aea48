"""Value objects passed between the HTTP layer and the services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Identity:
    """Authenticated caller."""

    user_id: int
    email: str
    is_admin: bool = False


@dataclass(frozen=True)
class ClientInfo:
    """Network metadata recorded alongside audit entries."""

    ip_address: str = "unknown"
    user_agent: Optional[str] = None


__all__ = ["ClientInfo", "Identity"]
