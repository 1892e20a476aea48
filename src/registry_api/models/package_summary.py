# coding: utf-8

"""
    Artifact Registry API
"""

from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, Field, StrictBool, StrictInt, StrictStr
from typing import Any, ClassVar, Dict, List, Optional
from typing_extensions import Self


class PackageSummary(BaseModel):
    """
    Administrative overview of a package.
    """  # noqa: E501

    id: StrictInt
    name: StrictStr
    description: Optional[StrictStr] = None
    is_discontinued: StrictBool = Field(default=False, alias="isDiscontinued")
    replaced_by: Optional[StrictStr] = Field(default=None, alias="replacedBy")
    is_private: StrictBool = Field(default=True, alias="isPrivate")
    version_count: StrictInt = Field(default=0, alias="versionCount")
    uploader_count: StrictInt = Field(default=0, alias="uploaderCount")
    created_at: datetime = Field(alias="createdAt")
    __properties: ClassVar[list[str]] = [
        "id",
        "name",
        "description",
        "isDiscontinued",
        "replacedBy",
        "isPrivate",
        "versionCount",
        "uploaderCount",
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


class PackageList(BaseModel):
    packages: List[PackageSummary] = Field(default_factory=list)
    __properties: ClassVar[list[str]] = ["packages"]

    model_config = {
        "populate_by_name": True,
        "validate_assignment": True,
        "protected_namespaces": (),
    }

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
