"""Client-side signal age extrapolation.

A reconciliation pass captures ``(signal_age_sec, captured_at_ms)`` once.
Consumers add the wall-clock time elapsed since capture to show a ticking
"N minutes ago" without querying again.
"""

from __future__ import annotations

from fleettrack._constants import NO_SIGNAL_LABEL, ONLINE_LABEL


def extrapolate_signal_age(
    signal_age_sec: int | float | None,
    captured_at_ms: int | None,
    now_ms: int,
) -> int | None:
    """Return the current signal age in whole seconds.

    ``None`` when the device has no known age. A missing capture time counts
    as "captured now". Clock skew (``now_ms`` before capture) never makes the
    age go backwards past the captured value.
    """
    if signal_age_sec is None:
        return None
    captured = captured_at_ms if captured_at_ms is not None else now_ms
    elapsed_sec = max(0, (now_ms - captured) // 1000)
    return max(0, int(signal_age_sec) + elapsed_sec)


def format_signal_age_compact(seconds: int | None) -> str:
    if seconds is None:
        return NO_SIGNAL_LABEL
    if seconds < 60:
        return ONLINE_LABEL
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    if seconds < 604800:
        return f"{seconds // 86400}d"
    return f"{seconds // 604800}w"
