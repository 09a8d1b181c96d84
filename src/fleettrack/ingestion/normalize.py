"""Coercion of loosely typed row and telematics values.

Database columns and telematics bags mix strings, numbers and placeholder
values; every parser here returns ``None`` rather than raising.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any

_TRUTHY_STRINGS = frozenset({"1", "true", "on", "yes", "y", "encendido"})
_FALSY_STRINGS = frozenset({"0", "false", "off", "no", "n", "apagado"})

# Threshold to distinguish epoch seconds from milliseconds.
_MS_THRESHOLD = 1e11


def safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if value in ("", "--"):
            return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def normalize_text(value: Any) -> str | None:
    """Trim *value*; blank strings become ``None``."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_truthy(value: Any) -> bool | None:
    """Parse a loosely-encoded boolean.

    Accepts real booleans, numbers (non-zero is ``True``) and common string
    spellings. Returns ``None`` when the value carries no boolean meaning.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUTHY_STRINGS:
            return True
        if normalized in _FALSY_STRINGS:
            return False
    return None


def parse_timestamp(value: Any) -> datetime | None:
    """Convert an ISO-8601 string or epoch (seconds or ms) to a UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        numeric = safe_float(text)
        if numeric is None:
            try:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                return None
            return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
        value = numeric
    ts = safe_float(value)
    if ts is None or ts <= 0:
        return None
    if ts > _MS_THRESHOLD:
        ts /= 1000.0
    return datetime.fromtimestamp(ts, tz=UTC)


def to_epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def is_meaningful(value: Any) -> bool:
    """Return True if the value counts as "present" in a telematics bag."""
    if value is None:
        return False
    if isinstance(value, str) and value.strip() in ("", "--"):
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    if value == {}:
        return False
    return bool(value != [])
