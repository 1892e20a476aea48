"""Repository for package uploader grants."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from registry_api.db.models import PackageUploaderRecord, UserRecord
from registry_api.errors import RegistryError
from registry_api.repo.common import not_found, storage_guard
from registry_api.result import Ok, Result


class PackageUploaderRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @storage_guard
    async def add_uploader(self, package_id: int, user_id: int) -> Result[None, RegistryError]:
        async with self._session_factory() as session:
            existing = await session.get(PackageUploaderRecord, (package_id, user_id))
            if existing is not None:
                return Ok(None)
            session.add(PackageUploaderRecord(package_id=package_id, user_id=user_id))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                # Granted concurrently; the grant is there either way.
                granted = await self.can_publish(package_id, user_id)
                if not (isinstance(granted, Ok) and granted.value):
                    raise
        return Ok(None)

    @storage_guard
    async def remove_uploader(self, package_id: int, user_id: int) -> Result[None, RegistryError]:
        async with self._session_factory() as session:
            existing = await session.get(PackageUploaderRecord, (package_id, user_id))
            if existing is None:
                return not_found(f"User {user_id} is not an uploader of package {package_id}")
            await session.delete(existing)
            await session.commit()
        return Ok(None)

    @storage_guard
    async def list_uploaders(self, package_id: int) -> Result[list[UserRecord], RegistryError]:
        stmt = (
            select(UserRecord)
            .join(PackageUploaderRecord, PackageUploaderRecord.user_id == UserRecord.id)
            .where(PackageUploaderRecord.package_id == package_id)
        )
        async with self._session_factory() as session:
            users = list((await session.execute(stmt)).scalars().all())
        return Ok(users)

    @storage_guard
    async def can_publish(self, package_id: int, user_id: int) -> Result[bool, RegistryError]:
        async with self._session_factory() as session:
            grant = await session.get(PackageUploaderRecord, (package_id, user_id))
        return Ok(grant is not None)

    @storage_guard
    async def remove_all_uploaders(self, package_id: int) -> Result[None, RegistryError]:
        async with self._session_factory() as session:
            await session.execute(
                delete(PackageUploaderRecord).where(PackageUploaderRecord.package_id == package_id)
            )
            await session.commit()
        return Ok(None)


__all__ = ["PackageUploaderRepository"]
