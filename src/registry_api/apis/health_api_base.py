# coding: utf-8

from typing import ClassVar, Dict, List, Tuple  # noqa: F401

from registry_api.models.health_status import HealthStatus
from registry_api.runtime import RegistryRuntime


class BaseHealthApi:
    subclasses: ClassVar[Tuple] = ()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        BaseHealthApi.subclasses = BaseHealthApi.subclasses + (cls,)

    def __init__(self, runtime: RegistryRuntime) -> None:
        self.runtime = runtime

    async def get_health(
        self,
    ) -> HealthStatus:
        ...
