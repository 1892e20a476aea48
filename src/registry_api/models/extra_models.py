# coding: utf-8

from typing import List

from pydantic import BaseModel, Field


class TokenModel(BaseModel):
    """Authenticated principal resolved from the bearer token."""

    sub: str
    roles: List[str] = Field(default_factory=list)
