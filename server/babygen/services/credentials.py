"""Credential storage abstraction supplied by the host application."""
from __future__ import annotations

import logging
from typing import Optional, Protocol

from ..config import settings

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    """Key-value holder for the generator API key."""

    def get_api_key(self) -> Optional[str]:
        ...

    def set_api_key(self, value: Optional[str]) -> None:
        ...


class InMemoryCredentialStore:
    """Process-local credential store; blank keys are treated as missing."""

    def __init__(self, api_key: Optional[str] = None) -> None:
        self._api_key: Optional[str] = None
        self.set_api_key(api_key)

    def get_api_key(self) -> Optional[str]:
        return self._api_key

    def set_api_key(self, value: Optional[str]) -> None:
        cleaned = (value or "").strip()
        self._api_key = cleaned or None
        logger.debug("API key %s", "configured" if self._api_key else "cleared")


def default_credential_store() -> InMemoryCredentialStore:
    """Build a store seeded from ``BABYGEN_API_KEY``."""

    return InMemoryCredentialStore(settings.api_key)
