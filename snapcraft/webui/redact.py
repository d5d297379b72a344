"""Masking of secret values before they are shown to a browser."""

from __future__ import annotations

from collections.abc import Mapping

REDACTED = "••••••••"

_SENSITIVE_KEYS = ("password", "pass", "token", "secret", "key", "bearer")


def redact_value(key: str, value: str) -> str:
    """Mask value if key looks like it names a secret; empty values stay empty."""
    lower = key.lower()
    if any(marker in lower for marker in _SENSITIVE_KEYS):
        return "" if value == "" else REDACTED
    return value


def redact_map(values: Mapping[str, str]) -> dict[str, str]:
    """Copy of values with every secret-looking entry masked."""
    return {key: redact_value(key, value) for key, value in values.items()}