# coding: utf-8

from contextvars import ContextVar
from typing import List, Optional

from fastapi import Depends, Request, Security  # noqa: F401
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer, SecurityScopes

from registry_api.domain import Identity
from registry_api.errors import ErrorKind
from registry_api.http.errors import forbidden, internal_error, unauthorized
from registry_api.models.extra_models import TokenModel
from registry_api.repo.users import USER_STATUS_ACTIVE
from registry_api.result import Err

_SCOPES = {
    "publish": "Publish package versions",
    "admin": "Administrative access",
}

bearer_scheme = HTTPBearer(auto_error=False)
_current_identity: ContextVar[Optional[Identity]] = ContextVar("registry_current_identity", default=None)


async def get_token_bearerAuth(
    security_scopes: SecurityScopes,
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenModel:
    """
    Resolve the bearer token into the calling account.

    Routes without scopes accept anonymous callers; ``publish`` needs an
    active account and ``admin`` an active administrator.

    :return: Token information for the caller, ``sub`` empty when anonymous
    :rtype: TokenModel
    """

    token = credentials.credentials if credentials else None
    if not token:
        if security_scopes.scopes:
            raise unauthorized("Authentication required")
        _current_identity.set(None)
        return TokenModel(sub="")

    runtime = request.app.state.runtime
    result = await runtime.users.get_by_token(token)
    if isinstance(result, Err):
        if result.error.kind is ErrorKind.STORAGE:
            raise internal_error("Internal server error.")
        raise unauthorized("Invalid token")
    user = result.value
    if user.status != USER_STATUS_ACTIVE:
        raise unauthorized(f"User account is {user.status}")

    runtime.supervisor.spawn(runtime.users.record_login(user.id), name=f"record-login-{user.id}")

    roles: List[str] = ["publish"]
    if user.is_admin:
        roles.append("admin")
    if "admin" in security_scopes.scopes and not user.is_admin:
        raise forbidden("Administrator access required")

    _current_identity.set(Identity(user_id=user.id, email=user.email, is_admin=user.is_admin))
    return TokenModel(sub=str(user.id), roles=roles)


def get_current_identity() -> Optional[Identity]:
    return _current_identity.get()


def require_identity() -> Identity:
    identity = get_current_identity()
    if identity is None:
        raise unauthorized("Authentication required")
    return identity


def is_admin() -> bool:
    identity = get_current_identity()
    return bool(identity and identity.is_admin)
