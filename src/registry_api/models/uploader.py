# coding: utf-8

"""
    Artifact Registry API
"""

from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, Field, StrictBool, StrictInt, StrictStr
from typing import Any, ClassVar, Dict, List, Optional
from typing_extensions import Self


class Uploader(BaseModel):
    """
    Account holding an uploader grant.
    """  # noqa: E501

    id: StrictInt
    email: StrictStr
    display_name: Optional[StrictStr] = Field(default=None, alias="displayName")
    is_admin: StrictBool = Field(default=False, alias="isAdmin")
    status: StrictStr
    last_login_at: Optional[datetime] = Field(default=None, alias="lastLoginAt")
    __properties: ClassVar[list[str]] = ["id", "email", "displayName", "isAdmin", "status", "lastLoginAt"]

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


class UploaderList(BaseModel):
    """
    Uploaders of one package.
    """  # noqa: E501

    package: StrictStr
    uploaders: List[Uploader] = Field(default_factory=list)
    __properties: ClassVar[list[str]] = ["package", "uploaders"]

    model_config = {
        "populate_by_name": True,
        "validate_assignment": True,
        "protected_namespaces": (),
    }

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
