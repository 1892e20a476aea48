# coding: utf-8

"""
    Artifact Registry API
"""

from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, Field, StrictInt, StrictStr
from typing import Any, ClassVar, Dict, List, Optional
from typing_extensions import Self


class AuditLogEntry(BaseModel):
    """
    One append-only audit record.
    """  # noqa: E501

    id: StrictInt
    user_id: Optional[StrictInt] = Field(default=None, alias="userId")
    action: StrictStr
    resource_type: StrictStr = Field(alias="resourceType")
    resource_id: Optional[StrictInt] = Field(default=None, alias="resourceId")
    ip_address: Optional[StrictStr] = Field(default=None, alias="ipAddress")
    user_agent: Optional[StrictStr] = Field(default=None, alias="userAgent")
    created_at: datetime = Field(alias="createdAt")
    __properties: ClassVar[list[str]] = [
        "id",
        "userId",
        "action",
        "resourceType",
        "resourceId",
        "ipAddress",
        "userAgent",
        "createdAt",
    ]

    model_config = {
        "populate_by_name": True,
        "validate_assignment": True,
        "protected_namespaces": (),
    }

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> Self:
        if obj is None:
            return None
        return cls.model_validate(obj)


class AuditLogList(BaseModel):
    logs: List[AuditLogEntry] = Field(default_factory=list)
    limit: StrictInt
    offset: StrictInt
    __properties: ClassVar[list[str]] = ["logs", "limit", "offset"]

    model_config = {
        "populate_by_name": True,
        "validate_assignment": True,
        "protected_namespaces": (),
    }

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
