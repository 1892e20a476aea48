"""Repository for audit log entries."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from registry_api.db.models import AuditLogRecord
from registry_api.errors import RegistryError
from registry_api.repo.common import _now, storage_guard
from registry_api.result import Ok, Result


class AuditLogRepository:
    """Append-only store; entries are never updated or deleted."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @storage_guard
    async def create(
        self,
        *,
        user_id: Optional[int],
        action: str,
        resource_type: str,
        resource_id: Optional[int] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[AuditLogRecord, RegistryError]:
        record = AuditLogRecord(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            ip_address=ip_address,
            user_agent=user_agent,
            created_at=_now(),
        )
        async with self._session_factory() as session:
            session.add(record)
            await session.commit()
        return Ok(record)

    @storage_guard
    async def list(
        self,
        *,
        user_id: Optional[int] = None,
        action: Optional[str] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[int] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[list[AuditLogRecord], RegistryError]:
        stmt = select(AuditLogRecord)
        if user_id is not None:
            stmt = stmt.where(AuditLogRecord.user_id == user_id)
        if action:
            stmt = stmt.where(AuditLogRecord.action == action)
        if resource_type:
            stmt = stmt.where(AuditLogRecord.resource_type == resource_type)
        if resource_id is not None:
            stmt = stmt.where(AuditLogRecord.resource_id == resource_id)
        stmt = (
            stmt.order_by(AuditLogRecord.created_at.desc(), AuditLogRecord.id.desc())
            .limit(limit)
            .offset(offset)
        )
        async with self._session_factory() as session:
            records = list((await session.execute(stmt)).scalars().all())
        return Ok(records)


__all__ = ["AuditLogRepository"]
