"""Configuration helpers for the baby generator client."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass
class Settings:
    """Centralized environment-driven configuration.

    The polling core keeps its own fixed defaults; these knobs are read by the
    host layer and by service constructors called without explicit arguments.
    """

    api_base_url: str = field(
        default_factory=lambda: os.getenv("BABYGEN_API_BASE_URL", "https://api.maxstudio.ai").strip().rstrip("/")
    )
    api_key: Optional[str] = field(default_factory=lambda: os.getenv("BABYGEN_API_KEY"))
    poll_interval: float = field(default_factory=lambda: _env_float("BABYGEN_POLL_INTERVAL", 3.0))
    max_poll_attempts: int = field(default_factory=lambda: _env_int("BABYGEN_MAX_POLL_ATTEMPTS", 30))
    submit_timeout: float = field(default_factory=lambda: _env_float("BABYGEN_SUBMIT_TIMEOUT", 15.0))
    status_timeout: float = field(default_factory=lambda: _env_float("BABYGEN_STATUS_TIMEOUT", 10.0))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    def __post_init__(self) -> None:
        if not self.api_base_url.startswith(("http://", "https://")):
            raise RuntimeError("BABYGEN_API_BASE_URL must include http/https scheme")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached settings instance to avoid repeated environment reads."""

    return Settings()


settings = get_settings()
