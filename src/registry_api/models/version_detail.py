# coding: utf-8

"""
    Artifact Registry API
"""

from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, Field, StrictBool, StrictStr
from typing import Any, ClassVar, Dict, Optional
from typing_extensions import Self


class VersionDetail(BaseModel):
    """
    One published version of a package.
    """  # noqa: E501

    version: StrictStr
    manifest: Dict[str, Any] = Field(default_factory=dict, description="Parsed manifest.yaml of the version.")
    archive_url: StrictStr = Field(alias="archive_url")
    archive_sha256: StrictStr = Field(alias="archive_sha256")
    published: datetime
    retracted: Optional[StrictBool] = Field(default=None, description="Present and true only for retracted versions.")
    __properties: ClassVar[list[str]] = ["version", "manifest", "archive_url", "archive_sha256", "published", "retracted"]

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
