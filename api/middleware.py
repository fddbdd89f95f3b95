"""
Session cookie middleware.

Reads the session ID from the request cookie, starts the engine session for
the duration of the request, then saves it and sets the session cookie on
the response. The middleware is the only writer of the session cookie: the
engine's own cookie handling is switched off while the session is open.
"""

import copy
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from core.engine import SessionEngine, SessionStatus, get_engine
from core.exceptions import (
    SessionAlreadyClosedError,
    SessionAlreadyStartedError,
    SessionsDisabledError,
)

logger = logging.getLogger(__name__)

# Engine options disabling its own cookie handling.
SESSION_OPTIONS = {
    "use_cookies": False,
    "use_only_cookies": True,
}


def cookie_options(engine: SessionEngine, overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge the given cookie options over the engine defaults (keys are case-insensitive)."""
    defaults = dict(engine.cookie_params())
    defaults["name"] = engine.name

    options = {key.lower(): value for key, value in defaults.items()}
    options.update({key.lower(): value for key, value in overrides.items()})
    return options


def session_id_from(request: Request, options: Mapping[str, Any]) -> str:
    """Return the session ID carried by the request cookies, empty string if none."""
    return request.cookies.get(options["name"], "")


def with_session_cookie(
    response: Response, session_id: str, options: Mapping[str, Any]
) -> Response:
    """Return a copy of the response with the session cookie added."""
    lifetime = max(int(options["lifetime"]), 0)

    expires = None
    if lifetime > 0:
        expires = datetime.now(timezone.utc) + timedelta(seconds=lifetime)

    # Own header list so the original response stays untouched
    cookied = copy.copy(response)
    cookied.raw_headers = list(response.raw_headers)
    cookied.set_cookie(
        key=options["name"],
        value=session_id,
        max_age=lifetime,
        expires=expires,
        path=options["path"],
        domain=options["domain"] or None,
        secure=bool(options["secure"]),
        httponly=bool(options["httponly"]),
        samesite=options.get("samesite") or None,
    )
    return cookied


class StartSessionMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        cookie: Optional[Mapping[str, Any]] = None,
        engine: Optional[SessionEngine] = None,
    ):
        super().__init__(app)
        self.cookie = dict(cookie or {})
        self._engine = engine

    @property
    def engine(self) -> SessionEngine:
        return self._engine or get_engine()

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        engine = self.engine
        options = cookie_options(engine, self.cookie)
        session_id = session_id_from(request, options)

        self._fail_when_disabled(engine)
        self._fail_when_started(engine)

        engine.name = options["name"]
        engine.start(session_id, **SESSION_OPTIONS)

        response = await call_next(request)

        self._fail_when_closed(engine)

        # Read the ID before closing, the engine may have rotated it
        session_id = engine.session_id()
        engine.write_close()

        return with_session_cookie(response, session_id, options)

    @staticmethod
    def _fail_when_disabled(engine: SessionEngine) -> None:
        if engine.status() is SessionStatus.DISABLED:
            logger.error("Session middleware invoked while sessions are disabled")
            raise SessionsDisabledError()

    @staticmethod
    def _fail_when_started(engine: SessionEngine) -> None:
        if engine.status() is SessionStatus.ACTIVE:
            logger.error("Session already active when the session middleware ran")
            raise SessionAlreadyStartedError()

    @staticmethod
    def _fail_when_closed(engine: SessionEngine) -> None:
        if engine.status() is not SessionStatus.ACTIVE:
            logger.error("Session closed by downstream code before it could be saved")
            raise SessionAlreadyClosedError()
