from __future__ import annotations

import pytest

from fleettrack.tracking.signal_age import extrapolate_signal_age, format_signal_age_compact


def test_adds_whole_seconds_elapsed_since_capture() -> None:
    assert extrapolate_signal_age(100, 1_000_000, 1_000_000 + 45_900) == 145


def test_missing_age_stays_missing() -> None:
    assert extrapolate_signal_age(None, 1_000, 90_000) is None


def test_missing_capture_time_counts_as_now() -> None:
    assert extrapolate_signal_age(12, None, 90_000) == 12


def test_clock_behind_capture_does_not_decrease_age() -> None:
    assert extrapolate_signal_age(50, 10_000, 5_000) == 50


def test_negative_age_clamps_to_zero() -> None:
    assert extrapolate_signal_age(-20, 0, 1_000) == 0


def test_age_never_decreases_as_time_passes() -> None:
    captured = 1_700_000_000_000
    ticks = [captured - 2_000, captured, captured + 999, captured + 1_000, captured + 61_500, captured + 3_600_000]
    ages = [extrapolate_signal_age(30, captured, now_ms) for now_ms in ticks]

    assert ages == sorted(ages)
    assert ages == [30, 30, 30, 31, 91, 3630]


def test_same_instant_gives_same_age() -> None:
    first = extrapolate_signal_age(30, 1_000, 61_000)
    assert extrapolate_signal_age(30, 1_000, 61_000) == first == 90


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (None, "No signal"),
        (0, "Online"),
        (59, "Online"),
        (60, "1m"),
        (3599, "59m"),
        (3600, "1h"),
        (86_399, "23h"),
        (86_400, "1d"),
        (604_799, "6d"),
        (604_800, "1w"),
    ],
)
def test_compact_format(seconds: int | None, expected: str) -> None:
    assert format_signal_age_compact(seconds) == expected
