"""
FastAPI dependency-injection helpers.
"""

from typing import Any, Dict

from fastapi import HTTPException

from core.engine import SessionEngine, SessionStatus, get_engine


def get_session_engine() -> SessionEngine:
    return get_engine()


def get_session_data() -> Dict[str, Any]:
    """Return the data of the session opened by the session middleware."""
    engine = get_engine()
    if engine.status() is not SessionStatus.ACTIVE:
        raise HTTPException(status_code=500, detail="No active session")
    return engine.data()
