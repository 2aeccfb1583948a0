"""Helpers for preparing image URLs before they are sent to the generator API."""
from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit

from ..errors import InvalidImageURLError


def strip_url_params(url: str) -> str:
    """Drop the query string and fragment from ``url``.

    Stripping an already clean URL returns it unchanged.
    """

    parts = urlsplit(url.strip())
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def normalize_image_url(url: str) -> str:
    """Return ``url`` stripped of query/fragment, rejecting non-web URLs."""

    cleaned = strip_url_params(url or "")
    parsed = urlsplit(cleaned)
    if parsed.scheme.lower() not in {"http", "https"} or not parsed.netloc:
        raise InvalidImageURLError(url)
    return cleaned
