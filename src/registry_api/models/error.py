# coding: utf-8

"""
    Artifact Registry API
"""

from __future__ import annotations

from pydantic import BaseModel, Field, StrictStr
from typing import Any, ClassVar, Dict, Optional
from typing_extensions import Self


class Error(BaseModel):
    """
    Error body returned by every failing endpoint.
    """  # noqa: E501

    error: StrictStr = Field(description="Machine readable error code.")
    message: StrictStr = Field(description="Human readable error message.")
    details: Optional[Dict[str, Any]] = None
    __properties: ClassVar[list[str]] = ["error", "message", "details"]

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
