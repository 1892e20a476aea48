# coding: utf-8

"""
    Artifact Registry API
"""

from __future__ import annotations

from pydantic import BaseModel, Field, StrictBool, StrictStr
from typing import Any, ClassVar, Dict, List, Optional
from typing_extensions import Self

from registry_api.models.version_detail import VersionDetail


class PackageDetail(BaseModel):
    """
    A package with every published version.
    """  # noqa: E501

    name: StrictStr
    is_discontinued: StrictBool = Field(default=False, alias="isDiscontinued")
    replaced_by: Optional[StrictStr] = Field(default=None, alias="replacedBy")
    latest: Optional[VersionDetail] = None
    versions: List[VersionDetail] = Field(default_factory=list)
    __properties: ClassVar[list[str]] = ["name", "isDiscontinued", "replacedBy", "latest", "versions"]

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
