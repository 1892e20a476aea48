"""Repository for package records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from registry_api.db.models import PackageRecord, PackageUploaderRecord, VersionRecord
from registry_api.errors import ErrorKind, RegistryError
from registry_api.repo.common import _now, not_found, storage_guard
from registry_api.result import Err, Ok, Result


@dataclass(frozen=True)
class PackageSummaryRow:
    package: PackageRecord
    version_count: int
    uploader_count: int


class PackageRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @storage_guard
    async def get_by_name(self, name: str) -> Result[PackageRecord, RegistryError]:
        async with self._session_factory() as session:
            record = (
                await session.execute(select(PackageRecord).where(PackageRecord.name == name))
            ).scalar_one_or_none()
        if record is None:
            return not_found(f"Package not found: {name}")
        return Ok(record)

    @storage_guard
    async def get_by_id(self, package_id: int) -> Result[PackageRecord, RegistryError]:
        async with self._session_factory() as session:
            record = await session.get(PackageRecord, package_id)
        if record is None:
            return not_found(f"Package not found: {package_id}")
        return Ok(record)

    @storage_guard
    async def create(
        self,
        name: str,
        *,
        description: Optional[str] = None,
        uploader_id: Optional[int] = None,
    ) -> Result[PackageRecord, RegistryError]:
        """Insert a package and, when given, its first uploader grant.

        Both rows commit together, so a package never exists without the
        publisher that created it.
        """

        record = PackageRecord(name=name, description=description, created_at=_now())
        async with self._session_factory() as session:
            session.add(record)
            try:
                await session.flush()
                if uploader_id is not None:
                    session.add(PackageUploaderRecord(package_id=record.id, user_id=uploader_id))
                await session.commit()
            except IntegrityError:
                await session.rollback()
                # Only an existing row under this name is a duplicate.
                if isinstance(await self.get_by_name(name), Ok):
                    return Err(
                        RegistryError(ErrorKind.PACKAGE_EXISTS, f"Package already exists: {name}")
                    )
                raise
        return Ok(record)

    @storage_guard
    async def list_all(
        self,
        *,
        limit: int = 50,
        offset: int = 0,
        search: Optional[str] = None,
    ) -> Result[list[PackageSummaryRow], RegistryError]:
        version_counts = (
            select(VersionRecord.package_id, func.count(VersionRecord.id).label("total"))
            .group_by(VersionRecord.package_id)
            .subquery()
        )
        uploader_counts = (
            select(
                PackageUploaderRecord.package_id,
                func.count(PackageUploaderRecord.user_id).label("total"),
            )
            .group_by(PackageUploaderRecord.package_id)
            .subquery()
        )
        stmt = (
            select(
                PackageRecord,
                func.coalesce(version_counts.c.total, 0),
                func.coalesce(uploader_counts.c.total, 0),
            )
            .outerjoin(version_counts, version_counts.c.package_id == PackageRecord.id)
            .outerjoin(uploader_counts, uploader_counts.c.package_id == PackageRecord.id)
        )
        if search:
            stmt = stmt.where(PackageRecord.name.contains(search, autoescape=True))
        stmt = stmt.order_by(PackageRecord.name.asc()).limit(limit).offset(offset)
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).all()
        return Ok(
            [
                PackageSummaryRow(package=row[0], version_count=int(row[1]), uploader_count=int(row[2]))
                for row in rows
            ]
        )

    @storage_guard
    async def set_discontinued(
        self,
        package_id: int,
        *,
        discontinued: bool,
        replaced_by: Optional[str] = None,
    ) -> Result[PackageRecord, RegistryError]:
        async with self._session_factory() as session:
            record = await session.get(PackageRecord, package_id)
            if record is None:
                return not_found(f"Package not found: {package_id}")
            record.is_discontinued = discontinued
            record.replaced_by = replaced_by if discontinued else None
            record.updated_at = _now()
            await session.commit()
        return Ok(record)


__all__ = ["PackageRepository", "PackageSummaryRow"]
