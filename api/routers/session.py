"""
Session endpoints: inspect and mutate the data of the current session.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_session_data, get_session_engine
from api.models.requests import RegenerateRequest, SetValueRequest
from api.models.responses import RegenerateResponse, SessionResponse
from core.engine import SessionEngine

router = APIRouter(prefix="/api/session", tags=["session"])


@router.get("", response_model=SessionResponse)
def read_session(
    data: Dict[str, Any] = Depends(get_session_data),
    engine: SessionEngine = Depends(get_session_engine),
):
    """Return the current session ID and data."""
    return SessionResponse(session_id=engine.session_id(), data=data)


@router.put("/{key}", response_model=SessionResponse)
def set_value(
    key: str,
    body: SetValueRequest,
    data: Dict[str, Any] = Depends(get_session_data),
    engine: SessionEngine = Depends(get_session_engine),
):
    """Store a value in the session under `key`."""
    data[key] = body.value
    return SessionResponse(session_id=engine.session_id(), data=data)


@router.delete("/{key}", response_model=SessionResponse)
def delete_value(
    key: str,
    data: Dict[str, Any] = Depends(get_session_data),
    engine: SessionEngine = Depends(get_session_engine),
):
    """Remove `key` from the session."""
    if key not in data:
        raise HTTPException(status_code=404, detail=f"Key '{key}' not found")
    del data[key]
    return SessionResponse(session_id=engine.session_id(), data=data)


@router.post("/regenerate", response_model=RegenerateResponse)
def regenerate(
    body: RegenerateRequest,
    data: Dict[str, Any] = Depends(get_session_data),
    engine: SessionEngine = Depends(get_session_engine),
):
    """Rotate the session ID, keeping the session data."""
    old_id = engine.session_id()
    new_id = engine.regenerate_id(delete_old=body.delete_old)
    return RegenerateResponse(old_session_id=old_id, session_id=new_id)
