"""Repository for immutable package versions."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from registry_api.db.models import VersionRecord
from registry_api.errors import ErrorKind, RegistryError
from registry_api.repo.common import _now, not_found, storage_guard
from registry_api.result import Err, Ok, Result
from registry_api.versioning import is_valid_version, version_sort_key


def _version_exists(package_id: int, version: str) -> Err[RegistryError]:
    return Err(
        RegistryError(
            ErrorKind.VERSION_EXISTS,
            f"Version {version} already exists for package {package_id}",
        )
    )


class VersionRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @storage_guard
    async def list_for_package(self, package_id: int) -> Result[list[VersionRecord], RegistryError]:
        """Return every version of a package, newest upload first."""

        stmt = (
            select(VersionRecord)
            .where(VersionRecord.package_id == package_id)
            .order_by(VersionRecord.created_at.desc(), VersionRecord.id.desc())
        )
        async with self._session_factory() as session:
            records = list((await session.execute(stmt)).scalars().all())
        return Ok(records)

    @storage_guard
    async def get(self, package_id: int, version: str) -> Result[VersionRecord, RegistryError]:
        stmt = select(VersionRecord).where(
            VersionRecord.package_id == package_id,
            VersionRecord.version == version,
        )
        async with self._session_factory() as session:
            record = (await session.execute(stmt)).scalar_one_or_none()
        if record is None:
            return not_found(f"Version not found: {version}")
        return Ok(record)

    async def get_latest(self, package_id: int) -> Result[VersionRecord, RegistryError]:
        """Return the highest version by semantic ordering.

        Retracted versions are skipped unless nothing else is left.
        """

        listed = await self.list_for_package(package_id)
        if isinstance(listed, Err):
            return listed
        records = listed.value
        if not records:
            return Err(RegistryError(ErrorKind.NO_VERSIONS, f"No versions for package {package_id}"))
        candidates = [record for record in records if not record.is_retracted] or records
        return Ok(max(candidates, key=lambda record: version_sort_key(record.version)))

    @storage_guard
    async def create(
        self,
        *,
        package_id: int,
        version: str,
        manifest: str,
        archive_url: str,
        archive_sha256: str,
        readme: Optional[str] = None,
        changelog: Optional[str] = None,
    ) -> Result[VersionRecord, RegistryError]:
        if not is_valid_version(version):
            return Err(RegistryError(ErrorKind.INVALID_VERSION, f"Invalid semantic version: {version}"))

        existing = await self.get(package_id, version)
        if isinstance(existing, Ok):
            return _version_exists(package_id, version)
        if existing.error.kind is not ErrorKind.NOT_FOUND:
            return existing

        record = VersionRecord(
            package_id=package_id,
            version=version,
            manifest=manifest,
            readme=readme,
            changelog=changelog,
            archive_url=archive_url,
            archive_sha256=archive_sha256,
            is_retracted=False,
            created_at=_now(),
        )
        async with self._session_factory() as session:
            session.add(record)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                # A concurrent publish of the same coordinates committed first.
                if isinstance(await self.get(package_id, version), Ok):
                    return _version_exists(package_id, version)
                raise
        return Ok(record)

    @storage_guard
    async def retract(self, package_id: int, version: str) -> Result[VersionRecord, RegistryError]:
        stmt = select(VersionRecord).where(
            VersionRecord.package_id == package_id,
            VersionRecord.version == version,
        )
        async with self._session_factory() as session:
            record = (await session.execute(stmt)).scalar_one_or_none()
            if record is None:
                return not_found(f"Version not found: {version}")
            record.is_retracted = True
            await session.commit()
        return await self.get(package_id, version)


__all__ = ["VersionRepository"]
