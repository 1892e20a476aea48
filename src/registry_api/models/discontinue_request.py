# coding: utf-8

"""
    Artifact Registry API
"""

from __future__ import annotations

from pydantic import BaseModel, Field, StrictBool, StrictStr
from typing import Any, ClassVar, Dict, Optional
from typing_extensions import Self


class DiscontinueRequest(BaseModel):
    """
    Mark a package as discontinued, optionally naming its replacement.
    """  # noqa: E501

    discontinued: StrictBool = True
    replaced_by: Optional[StrictStr] = Field(default=None, alias="replacedBy")
    __properties: ClassVar[list[str]] = ["discontinued", "replacedBy"]

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
