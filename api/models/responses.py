"""Pydantic response schemas."""

from typing import Any, Dict

from pydantic import BaseModel


class SessionResponse(BaseModel):
    session_id: str
    data: Dict[str, Any]


class RegenerateResponse(BaseModel):
    old_session_id: str
    session_id: str
