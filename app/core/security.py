"""Shared-secret API key checks."""

import secrets

from app.config import settings


def api_key_required() -> bool:
    """Whether prefixed routes currently demand the ``x-api-key`` header."""
    return settings.api_key_required


def verify_api_key_value(provided: str | None) -> bool:
    """
    Compare a presented key against the configured one.

    Args:
        provided: Value of the ``x-api-key`` header, if any

    Returns:
        True if the key matches or no key is required
    """
    if not api_key_required():
        return True
    if not provided:
        return False
    expected = (settings.api_key or "").strip()
    return secrets.compare_digest(provided.strip().encode(), expected.encode())
