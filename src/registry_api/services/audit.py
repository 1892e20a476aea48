"""Audit trail recording."""

from __future__ import annotations

import logging
from typing import Optional

from registry_api.domain import ClientInfo
from registry_api.repo.audit import AuditLogRepository
from registry_api.result import Err
from registry_api.tasks import TaskSupervisor

LOGGER = logging.getLogger(__name__)

ACTION_PACKAGE_PUBLISH = "package.publish"
ACTION_VERSION_PUBLISH = "package.version.publish"
ACTION_VERSION_RETRACT = "package.version.retract"
ACTION_UPLOADER_CHANGE = "admin.package.uploader_change"
ACTION_PACKAGE_DISCONTINUE = "admin.package.discontinue"

RESOURCE_PACKAGE = "package"
RESOURCE_VERSION = "version"


class AuditRecorder:
    def __init__(self, repository: AuditLogRepository, supervisor: TaskSupervisor) -> None:
        self._repository = repository
        self._supervisor = supervisor

    async def record(
        self,
        *,
        user_id: Optional[int],
        action: str,
        resource_type: str,
        resource_id: Optional[int],
        client: ClientInfo,
    ) -> bool:
        """Persist one entry; failures are logged and reported as ``False``."""

        result = await self._repository.create(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            ip_address=client.ip_address,
            user_agent=client.user_agent,
        )
        if isinstance(result, Err):
            LOGGER.error(
                "Failed to record audit entry action=%s resource=%s:%s: %s",
                action,
                resource_type,
                resource_id,
                result.error,
            )
            return False
        return True

    def record_detached(
        self,
        *,
        user_id: Optional[int],
        action: str,
        resource_type: str,
        resource_id: Optional[int],
        client: ClientInfo,
    ) -> None:
        self._supervisor.spawn(
            self.record(
                user_id=user_id,
                action=action,
                resource_type=resource_type,
                resource_id=resource_id,
                client=client,
            ),
            name=f"audit-{action}",
        )


__all__ = [
    "ACTION_PACKAGE_DISCONTINUE",
    "ACTION_PACKAGE_PUBLISH",
    "ACTION_UPLOADER_CHANGE",
    "ACTION_VERSION_PUBLISH",
    "ACTION_VERSION_RETRACT",
    "AuditRecorder",
    "RESOURCE_PACKAGE",
    "RESOURCE_VERSION",
]
