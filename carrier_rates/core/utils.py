"""
Core Utilities

Shared helpers used across the carrier integration.
"""
from datetime import datetime, timezone
from typing import Any

# Keys whose values must never reach logs or error details
SECRET_KEYS = frozenset({
    "access_token",
    "refresh_token",
    "id_token",
    "client_secret",
    "client_id",
    "password",
    "authorization",
})

REDACTED = "[REDACTED]"


def utcnow() -> datetime:
    """
    Return timezone-aware UTC datetime.

    Use this instead of datetime.utcnow() which returns naive datetime.
    """
    return datetime.now(timezone.utc)


def redact_secrets(value: Any) -> Any:
    """
    Return a copy of a decoded JSON value with credential fields masked.

    Dicts and lists are walked recursively; other values are returned as-is.
    """
    if isinstance(value, dict):
        return {
            k: (REDACTED if isinstance(k, str) and k.lower() in SECRET_KEYS else redact_secrets(v))
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [redact_secrets(v) for v in value]
    return value


def truncate(text: str, max_length: int = 500) -> str:
    """Trim upstream text bodies for logging and error details."""
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."
