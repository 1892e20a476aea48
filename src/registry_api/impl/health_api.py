from __future__ import annotations

from registry_api import __version__
from registry_api.apis.health_api_base import BaseHealthApi
from registry_api.models.health_status import HealthStatus


class HealthApiImpl(BaseHealthApi):
    async def get_health(self) -> HealthStatus:
        return HealthStatus(status="ok", version=__version__)
