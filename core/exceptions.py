"""
Session lifecycle errors.

All of them signal a misconfigured pipeline (sessions switched off, the
session middleware registered twice, or downstream code closing the session
on its own) rather than a per-request condition, so nothing retries them.
"""

from typing import Optional


class SessionError(RuntimeError):
    """Base class for session lifecycle errors."""

    default_message = "Session error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class SessionsDisabledError(SessionError):
    default_message = "Sessions are disabled"


class SessionAlreadyStartedError(SessionError):
    default_message = (
        "A session is already active; the session middleware may be registered twice"
    )


class SessionAlreadyClosedError(SessionError):
    default_message = (
        "The session was closed before the session middleware could save it"
    )


class SessionNotActiveError(SessionError):
    default_message = "No session is active for the current request"
