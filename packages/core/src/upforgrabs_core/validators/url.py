from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit

ALLOWED_SCHEMES = {"http", "https"}


def is_valid_url(value: Any) -> bool:
    """Return True if value is a well-formed http:// or https:// URL.

    Malformed input (e.g. an unbalanced IPv6 host) is reported as invalid
    instead of raising.
    """
    if not isinstance(value, str) or not value:
        return False
    if any(ch.isspace() for ch in value):
        return False
    try:
        parts = urlsplit(value)
        # Accessing .port validates the port component.
        parts.port
    except ValueError:
        return False
    return parts.scheme.lower() in ALLOWED_SCHEMES and bool(parts.hostname)
