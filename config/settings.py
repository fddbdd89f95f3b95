"""
Centralized configuration management for the session service.

Handles environment variables for the session engine (the host side of the
session cookie) and application settings with type safety.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional


def _env_bool(key: str, default: str) -> bool:
    return os.getenv(key, default).lower() in ("1", "true", "yes", "on")


@dataclass
class SessionConfig:
    """Session engine configuration (host defaults for the session cookie)."""

    enabled: bool = True
    name: str = "session_id"

    # Cookie defaults
    # Seconds; 0 or less sends Max-Age=0, which browsers treat as an expired cookie
    cookie_lifetime: int = 3600
    cookie_path: str = "/"
    cookie_domain: str = ""
    cookie_secure: bool = False
    cookie_httponly: bool = True
    cookie_samesite: Optional[str] = "lax"

    # Engine behaviour
    use_strict_mode: bool = True
    use_cookies: bool = True
    use_only_cookies: bool = True
    gc_maxlifetime: int = 3600  # seconds of inactivity before a session expires

    @classmethod
    def from_env(cls) -> "SessionConfig":
        """Load session config from environment variables."""
        return cls(
            enabled=_env_bool("SESSION_ENABLED", "true"),
            name=os.getenv("SESSION_NAME", "session_id"),
            cookie_lifetime=int(os.getenv("SESSION_COOKIE_LIFETIME", "3600")),
            cookie_path=os.getenv("SESSION_COOKIE_PATH", "/"),
            cookie_domain=os.getenv("SESSION_COOKIE_DOMAIN", ""),
            cookie_secure=_env_bool("SESSION_COOKIE_SECURE", "false"),
            cookie_httponly=_env_bool("SESSION_COOKIE_HTTPONLY", "true"),
            cookie_samesite=os.getenv("SESSION_COOKIE_SAMESITE", "lax") or None,
            use_strict_mode=_env_bool("SESSION_USE_STRICT_MODE", "true"),
            use_cookies=_env_bool("SESSION_USE_COOKIES", "true"),
            use_only_cookies=_env_bool("SESSION_USE_ONLY_COOKIES", "true"),
            gc_maxlifetime=int(os.getenv("SESSION_GC_MAXLIFETIME", "3600")),
        )


@dataclass
class AppConfig:
    """Application-level configuration."""

    title: str = "Session Cookie Service"
    log_level: str = "INFO"

    # Expired session sweep
    cleanup_interval: int = 300  # seconds

    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"]
    )

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load app config from environment variables."""
        origins = os.getenv("CORS_ORIGINS")
        config = cls(
            title=os.getenv("APP_TITLE", "Session Cookie Service"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cleanup_interval=int(os.getenv("SESSION_CLEANUP_INTERVAL", "300")),
        )
        if origins:
            config.cors_origins = [o.strip() for o in origins.split(",") if o.strip()]
        return config


class Config:
    """Global configuration manager."""

    _instance: Optional["Config"] = None

    def __init__(self):
        self.session = SessionConfig.from_env()
        self.app = AppConfig.from_env()

    @classmethod
    def load(cls) -> "Config":
        """Singleton pattern - load or return existing config."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached instance so the next load re-reads the environment."""
        cls._instance = None
