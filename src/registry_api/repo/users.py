"""Repository for registry accounts."""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from registry_api.db.models import UserRecord
from registry_api.db.security import hash_token
from registry_api.errors import ErrorKind, RegistryError
from registry_api.repo.common import _now, not_found, storage_guard
from registry_api.result import Err, Ok, Result

USER_STATUS_ACTIVE = "active"
USER_STATUS_SUSPENDED = "suspended"


class UserRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @storage_guard
    async def get_by_token(self, token: str) -> Result[UserRecord, RegistryError]:
        stmt = select(UserRecord).where(UserRecord.token_hash == hash_token(token))
        async with self._session_factory() as session:
            record = (await session.execute(stmt)).scalar_one_or_none()
        if record is None:
            return not_found("No user for token")
        return Ok(record)

    @storage_guard
    async def get_by_id(self, user_id: int) -> Result[UserRecord, RegistryError]:
        async with self._session_factory() as session:
            record = await session.get(UserRecord, user_id)
        if record is None:
            return not_found(f"User not found: {user_id}")
        return Ok(record)

    @storage_guard
    async def get_by_email(self, email: str) -> Result[UserRecord, RegistryError]:
        stmt = select(UserRecord).where(UserRecord.email == email)
        async with self._session_factory() as session:
            record = (await session.execute(stmt)).scalar_one_or_none()
        if record is None:
            return not_found(f"User not found: {email}")
        return Ok(record)

    @storage_guard
    async def get_many(self, user_ids: Iterable[int]) -> Result[list[UserRecord], RegistryError]:
        ids = sorted(set(user_ids))
        if not ids:
            return Ok([])
        stmt = select(UserRecord).where(UserRecord.id.in_(ids))
        async with self._session_factory() as session:
            records = list((await session.execute(stmt)).scalars().all())
        return Ok(records)

    @storage_guard
    async def create(
        self,
        *,
        email: str,
        token: str,
        display_name: Optional[str] = None,
        is_admin: bool = False,
        status: str = USER_STATUS_ACTIVE,
    ) -> Result[UserRecord, RegistryError]:
        record = UserRecord(
            email=email,
            token_hash=hash_token(token),
            display_name=display_name,
            is_admin=is_admin,
            status=status,
            created_at=_now(),
        )
        async with self._session_factory() as session:
            session.add(record)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return Err(RegistryError(ErrorKind.USER_EXISTS, f"User already exists: {email}"))
        return Ok(record)

    @storage_guard
    async def update_token(self, user_id: int, token: str) -> Result[UserRecord, RegistryError]:
        async with self._session_factory() as session:
            record = await session.get(UserRecord, user_id)
            if record is None:
                return not_found(f"User not found: {user_id}")
            record.token_hash = hash_token(token)
            record.updated_at = _now()
            await session.commit()
        return Ok(record)

    @storage_guard
    async def record_login(self, user_id: int) -> Result[None, RegistryError]:
        async with self._session_factory() as session:
            await session.execute(
                update(UserRecord).where(UserRecord.id == user_id).values(last_login_at=_now())
            )
            await session.commit()
        return Ok(None)


__all__ = ["USER_STATUS_ACTIVE", "USER_STATUS_SUSPENDED", "UserRepository", "hash_token"]
