# coding: utf-8

"""
    Artifact Registry API
"""

from __future__ import annotations

from pydantic import BaseModel, Field, StrictStr
from typing import Any, ClassVar, Dict
from typing_extensions import Self


class UploadUrlResponse(BaseModel):
    """
    Where and how to upload a new package version.
    """  # noqa: E501

    url: StrictStr
    upload_fields: Dict[str, StrictStr] = Field(default_factory=dict, alias="fields")
    __properties: ClassVar[list[str]] = ["url", "fields"]

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
