"""
Centralized configuration management for the tracking service.

Handles environment variables, tracking options, and application settings
with type safety and validation. A ``Config`` is built once at startup and
passed explicitly to the app factory, tracker and middleware.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


DEFAULT_SESSION_COOKIE_NAME = "_lear_session_"
DEFAULT_TRACK_REQUEST_METHODS: Tuple[str, ...] = ("GET",)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_methods(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(name)
    if not value:
        return default
    return tuple(method.strip().upper() for method in value.split(",") if method.strip())


@dataclass
class TrackingConfig:
    """Session cookie and request tracking options."""

    session_cookie_name: str = DEFAULT_SESSION_COOKIE_NAME
    track_request_methods: Tuple[str, ...] = DEFAULT_TRACK_REQUEST_METHODS
    detect_bots: bool = True
    store_backend: str = "memory"

    # Cookie transport
    cookie_max_age: int = 60 * 60 * 24 * 365  # seconds
    cookie_httponly: bool = True
    cookie_samesite: str = "lax"
    cookie_secure: bool = False

    def __post_init__(self):
        if not self.session_cookie_name:
            raise ValueError("session_cookie_name must not be empty")
        self.track_request_methods = tuple(m.upper() for m in self.track_request_methods)

    def is_trackable_method(self, method: str) -> bool:
        return method.upper() in self.track_request_methods

    @classmethod
    def from_env(cls) -> "TrackingConfig":
        """Load tracking config from environment variables."""
        return cls(
            session_cookie_name=os.getenv("TRACKING_SESSION_COOKIE", DEFAULT_SESSION_COOKIE_NAME),
            track_request_methods=_env_methods("TRACKING_REQUEST_METHODS", DEFAULT_TRACK_REQUEST_METHODS),
            detect_bots=_env_bool("TRACKING_DETECT_BOTS", True),
            store_backend=os.getenv("TRACKING_STORE", "memory"),
            cookie_max_age=int(os.getenv("TRACKING_COOKIE_MAX_AGE", str(60 * 60 * 24 * 365))),
            cookie_httponly=_env_bool("TRACKING_COOKIE_HTTPONLY", True),
            cookie_samesite=os.getenv("TRACKING_COOKIE_SAMESITE", "lax"),
            cookie_secure=_env_bool("TRACKING_COOKIE_SECURE", False),
        )


@dataclass
class AppConfig:
    """Application-level configuration."""

    title: str = "Tracking Engine"
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load app config from environment variables."""
        return cls(
            title=os.getenv("APP_TITLE", "Tracking Engine"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=_env_bool("LOG_JSON", False),
        )


class Config:
    """Global configuration manager."""

    _instance: Optional["Config"] = None

    def __init__(self, tracking: Optional[TrackingConfig] = None, app: Optional[AppConfig] = None):
        self.tracking = tracking or TrackingConfig.from_env()
        self.app = app or AppConfig.from_env()
        self.root_dir = Path(__file__).parent.parent

    @classmethod
    def load(cls) -> "Config":
        """Singleton pattern - load or return existing config."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance
