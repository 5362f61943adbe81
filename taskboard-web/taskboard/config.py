"""Taskboard client configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import FrozenSet, List, Optional


def env_str(name: str, default: str, *, strip: bool = True) -> str:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip() if strip else value


def env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    raw = raw.strip().lower()
    if raw in {"1", "true", "yes", "y", "on"}:
        return True
    if raw in {"0", "false", "no", "n", "off"}:
        return False
    return default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def env_csv(name: str, default: List[str]) -> List[str]:
    raw = os.environ.get(name)
    if raw is None:
        return list(default)
    items = [part.strip() for part in raw.split(",")]
    return [item for item in items if item] or list(default)


@dataclass(frozen=True)
class AppConfig:
    """Runtime configuration for the Taskboard web client.

    Env vars:
    - TASKBOARD_API_URL: server root; requests go to ``<url>/api``
    - TASKBOARD_API_TIMEOUT: per-request deadline in seconds
    - TASKBOARD_VERIFY_SSL
    - TASKBOARD_DASHBOARD_LIMIT: page size used by the dashboard lists
    - TASKBOARD_ELEVATED_ROLES: comma separated roles with admin rights
    - TASKBOARD_LOG_LEVEL
    """

    api_url: str
    timeout_seconds: float
    verify_ssl: bool
    dashboard_limit: int
    elevated_roles: FrozenSet[str]
    log_level: str

    DEFAULT_API_URL: str = "http://localhost:5000"
    DEFAULT_TIMEOUT_SECONDS: float = 10.0
    DEFAULT_DASHBOARD_LIMIT: int = 100
    DEFAULT_ELEVATED_ROLES: tuple = ("admin",)
    DEFAULT_LOG_LEVEL: str = "INFO"

    @property
    def api_base_url(self) -> str:
        return f"{self.api_url}/api"

    @classmethod
    def from_env(cls) -> "AppConfig":
        api_url = env_str("TASKBOARD_API_URL", cls.DEFAULT_API_URL).rstrip("/") or cls.DEFAULT_API_URL
        roles = env_csv("TASKBOARD_ELEVATED_ROLES", list(cls.DEFAULT_ELEVATED_ROLES))
        return cls(
            api_url=api_url,
            timeout_seconds=env_float("TASKBOARD_API_TIMEOUT", cls.DEFAULT_TIMEOUT_SECONDS),
            verify_ssl=env_bool("TASKBOARD_VERIFY_SSL", True),
            dashboard_limit=max(1, env_int("TASKBOARD_DASHBOARD_LIMIT", cls.DEFAULT_DASHBOARD_LIMIT)),
            elevated_roles=frozenset(r.lower() for r in roles),
            log_level=env_str("TASKBOARD_LOG_LEVEL", cls.DEFAULT_LOG_LEVEL).upper(),
        )


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the client configuration (cached)."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config() -> None:
    global _config
    _config = None


_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single stream handler to the ``taskboard`` logger.

    Repeated calls only adjust the level.
    """
    root = logging.getLogger("taskboard")
    root.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))
    if not any(getattr(h, "_taskboard", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handler._taskboard = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    return root
