"""Helpers for safe debug logging.

Every row query carries the API key in its headers and the broker
credentials live in :class:`~fleettrack.config.TrackingConfig`. Query params
can also hold ``in.(...)`` filters with thousands of device ids. Anything
logged at DEBUG goes through :func:`redact_for_log` first.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_REDACTED = "<redacted>"

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "apikey",
        "api_key",
        "authorization",
        "password",
        "mqtt_password",
        "token",
        "access_token",
        "refresh_token",
        "cookie",
    }
)

# ``in.(...)`` filters with more values than this are summarised.
_MAX_FILTER_VALUES = 10


def summarize_filter(expression: str) -> str:
    """Shorten a long PostgREST ``in.(...)`` filter to its value count."""
    if not (expression.startswith("in.(") and expression.endswith(")")):
        return expression
    body = expression[4:-1]
    count = body.count(",") + 1 if body else 0
    if count <= _MAX_FILTER_VALUES:
        return expression
    return f"in.(<{count} values>)"


def _truncate(text: str, max_string: int) -> str:
    if len(text) <= max_string:
        return text
    return f"{text[:max_string]}…<truncated>"


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of *value* with secrets masked and long values shortened."""
    if _depth > 20:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        return _truncate(summarize_filter(value), max_string)

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        return {
            str(key): _REDACTED
            if str(key).lower() in _SENSITIVE_KEYS
            else redact_for_log(item, max_string=max_string, _depth=_depth + 1)
            for key, item in value.items()
        }

    if isinstance(value, Sequence):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]

    return repr(value)
