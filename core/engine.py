"""
Session engine: the host side of the session cookie.

Owns the session lifecycle (none -> active -> none), the session name and
cookie defaults, ID resolution and persistence through a SessionStore.

The active session is ambient: it lives in a ContextVar, so any code running
inside the request (route handlers, dependencies, threadpool calls) can reach
it through `session_data()` without it being passed around, while concurrent
requests never see each other's session.
"""

from __future__ import annotations

import logging
import re
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from config.settings import Config, SessionConfig
from core.exceptions import (
    SessionAlreadyStartedError,
    SessionNotActiveError,
    SessionsDisabledError,
)
from core.store import SessionStore

logger = logging.getLogger(__name__)

# Characters and length accepted for a client supplied session ID.
VALID_SESSION_ID = re.compile(r"^[A-Za-z0-9,-]{1,128}$")

RUNTIME_OPTIONS = ("use_cookies", "use_only_cookies", "use_strict_mode")


class SessionStatus(Enum):
    DISABLED = "disabled"
    NONE = "none"
    ACTIVE = "active"


@dataclass
class ActiveSession:
    """Session opened for the current request."""

    id: str
    name: str
    data: Dict[str, Any] = field(default_factory=dict)
    options: Dict[str, bool] = field(default_factory=dict)
    active: bool = True


_current: ContextVar[Optional[ActiveSession]] = ContextVar("active_session", default=None)
_name: ContextVar[Optional[str]] = ContextVar("session_name", default=None)


class SessionEngine:
    """Starts, exposes and persists the session of the current request."""

    def __init__(self, config: SessionConfig, store: Optional[SessionStore] = None):
        self.config = config
        self.store = store or SessionStore(ttl_seconds=config.gc_maxlifetime)

    # -- status -------------------------------------------------------------

    def status(self) -> SessionStatus:
        if not self.config.enabled:
            return SessionStatus.DISABLED
        session = _current.get()
        if session is not None and session.active:
            return SessionStatus.ACTIVE
        return SessionStatus.NONE

    def _active(self) -> ActiveSession:
        session = _current.get()
        if session is None or not session.active:
            raise SessionNotActiveError()
        return session

    # -- name and cookie defaults -----------------------------------------

    @property
    def name(self) -> str:
        """Session (cookie) name for the current request."""
        return _name.get() or self.config.name

    @name.setter
    def name(self, value: str) -> None:
        if not value:
            raise ValueError("Session name must not be empty")
        _name.set(value)

    def cookie_params(self) -> Dict[str, Any]:
        """Default cookie attributes for the session cookie."""
        return {
            "lifetime": self.config.cookie_lifetime,
            "path": self.config.cookie_path,
            "domain": self.config.cookie_domain,
            "secure": self.config.cookie_secure,
            "httponly": self.config.cookie_httponly,
            "samesite": self.config.cookie_samesite,
        }

    # -- lifecycle ------------------------------------------------------------

    def start(self, session_id: str = "", **options: bool) -> ActiveSession:
        """
        Open the session for the current request.

        When `session_id` is empty a new ID is generated. A malformed ID is
        always replaced; an unknown ID is replaced in strict mode.
        `use_cookies` and `use_only_cookies` are only recorded on the session:
        the engine never writes cookies itself.
        """
        unknown = set(options) - set(RUNTIME_OPTIONS)
        if unknown:
            raise ValueError(f"Unknown session options: {sorted(unknown)}")

        status = self.status()
        if status is SessionStatus.DISABLED:
            raise SessionsDisabledError()
        if status is SessionStatus.ACTIVE:
            raise SessionAlreadyStartedError()

        runtime = {
            "use_cookies": self.config.use_cookies,
            "use_only_cookies": self.config.use_only_cookies,
            "use_strict_mode": self.config.use_strict_mode,
        }
        runtime.update(options)

        resolved = self._resolve_id(session_id, runtime["use_strict_mode"])
        data = self.store.load(resolved) or {}

        session = ActiveSession(id=resolved, name=self.name, data=data, options=runtime)
        _current.set(session)
        logger.debug("Session %s started (%s)", session.name, resolved)
        return session

    def _resolve_id(self, session_id: str, strict: bool) -> str:
        if not session_id:
            return self.store.create_id()
        if not VALID_SESSION_ID.match(session_id):
            logger.warning("Rejected malformed session ID; issuing a new one")
            return self.store.create_id()
        if strict and not self.store.exists(session_id):
            logger.info("Unknown session ID in strict mode; issuing a new one")
            return self.store.create_id()
        return session_id

    def session_id(self) -> str:
        """ID of the active session, empty string when none is active."""
        session = _current.get()
        if session is None or not session.active:
            return ""
        return session.id

    def data(self) -> Dict[str, Any]:
        return self._active().data

    def regenerate_id(self, delete_old: bool = False) -> str:
        """Give the active session a new ID, keeping its data."""
        session = self._active()
        old_id = session.id
        session.id = self.store.create_id()
        if delete_old:
            self.store.delete(old_id)
        logger.debug("Session ID regenerated (%s -> %s)", old_id, session.id)
        return session.id

    def write_close(self) -> bool:
        """Persist the active session and close it. False if none is active."""
        session = _current.get()
        if session is None or not session.active:
            return False
        self.store.save(session.id, session.data)
        session.active = False
        _current.set(None)
        logger.debug("Session %s written (%s)", session.name, session.id)
        return True

    def abort(self) -> bool:
        """Close the active session without saving it. False if none is active."""
        session = _current.get()
        if session is None or not session.active:
            return False
        session.active = False
        _current.set(None)
        return True


_engine: Optional[SessionEngine] = None


def get_engine() -> SessionEngine:
    """Process-wide engine built from the loaded configuration."""
    global _engine
    if _engine is None:
        _engine = SessionEngine(Config.load().session)
    return _engine


def set_engine(engine: Optional[SessionEngine]) -> None:
    """Replace the process-wide engine (None rebuilds it on next access)."""
    global _engine
    _engine = engine


def session_data() -> Dict[str, Any]:
    """Data of the session active for the current request."""
    return get_engine().data()
