"""Pydantic request schemas."""

from typing import Any

from pydantic import BaseModel


class SetValueRequest(BaseModel):
    value: Any


class RegenerateRequest(BaseModel):
    delete_old: bool = False
