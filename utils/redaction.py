"""Helpers that keep bearer tokens and API keys out of logs and responses."""

from collections.abc import Mapping
from typing import Any

SENSITIVE_HEADERS = {"authorization", "x-api-key", "cookie"}
SENSITIVE_KEYS = {"access_token", "refresh_token", "id_token", "api_key", "authorization", "client_secret"}
REDACTED = "[REDACTED]"


def redact_sensitive_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """
    Redact auth-bearing headers before logging.
    """
    redacted: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS and value:
            redacted[key] = REDACTED
        else:
            redacted[key] = value
    return redacted


def redact_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Shallow copy of ``fields`` with sensitive values replaced."""
    cleaned: dict[str, Any] = {}
    for key, value in fields.items():
        if key.lower() in SENSITIVE_KEYS and value:
            cleaned[key] = REDACTED
        elif isinstance(value, Mapping):
            cleaned[key] = redact_fields(value)
        else:
            cleaned[key] = value
    return cleaned


def mask_token(token: str | None, visible: int = 4) -> str:
    """Show only the last few characters of a token, e.g. '****abcd'."""
    if not token:
        return ""
    if len(token) <= visible:
        return "*" * len(token)
    return "*" * 4 + token[-visible:]
