# coding: utf-8

"""
    Artifact Registry API
"""

from __future__ import annotations

from pydantic import BaseModel, StrictStr
from typing import Any, ClassVar, Dict
from typing_extensions import Self


class SuccessMessage(BaseModel):
    message: StrictStr
    __properties: ClassVar[list[str]] = ["message"]

    model_config = {
        "populate_by_name": True,
        "validate_assignment": True,
        "protected_namespaces": (),
    }


class PublishResponse(BaseModel):
    """
    Acknowledgement returned after an upload or an upload finalization.
    """  # noqa: E501

    success: SuccessMessage
    __properties: ClassVar[list[str]] = ["success"]

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
