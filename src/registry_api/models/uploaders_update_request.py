# coding: utf-8

"""
    Artifact Registry API
"""

from __future__ import annotations

from pydantic import BaseModel, Field, StrictInt
from typing import Any, ClassVar, Dict, List
from typing_extensions import Self


class UploadersUpdateRequest(BaseModel):
    """
    Complete desired set of uploader user ids for a package.
    """  # noqa: E501

    user_ids: List[StrictInt] = Field(default_factory=list, alias="userIds")
    __properties: ClassVar[list[str]] = ["userIds"]

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
