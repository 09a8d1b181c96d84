from __future__ import annotations

import math
from datetime import UTC, datetime

import pytest

from fleettrack.ingestion.normalize import (
    is_meaningful,
    normalize_text,
    parse_timestamp,
    parse_truthy,
    safe_float,
    to_epoch_ms,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, None),
        (True, None),
        ("", None),
        ("--", None),
        (" 12.5 ", 12.5),
        (7, 7.0),
        ("abc", None),
        (math.nan, None),
        (math.inf, None),
    ],
)
def test_safe_float(raw: object, expected: float | None) -> None:
    assert safe_float(raw) == expected


def test_normalize_text_blank_is_none() -> None:
    assert normalize_text("  ") is None
    assert normalize_text(" A-12 ") == "A-12"
    assert normalize_text(42) == "42"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (True, True),
        (False, False),
        (1, True),
        (0, False),
        (2.5, True),
        ("ON", True),
        ("yes", True),
        ("encendido", True),
        ("off", False),
        ("apagado", False),
        ("maybe", None),
        (None, None),
        ([], None),
    ],
)
def test_parse_truthy(raw: object, expected: bool | None) -> None:
    assert parse_truthy(raw) is expected


def test_parse_timestamp_iso_with_z() -> None:
    assert parse_timestamp("2026-03-01T12:00:00Z") == datetime(2026, 3, 1, 12, tzinfo=UTC)


def test_parse_timestamp_naive_iso_is_utc() -> None:
    assert parse_timestamp("2026-03-01T12:00:00") == datetime(2026, 3, 1, 12, tzinfo=UTC)


def test_parse_timestamp_epoch_seconds_and_millis_agree() -> None:
    seconds = parse_timestamp(1_772_366_400)
    millis = parse_timestamp("1772366400000")
    assert seconds == millis == datetime(2026, 3, 1, 12, tzinfo=UTC)


def test_parse_timestamp_garbage_is_none() -> None:
    assert parse_timestamp("not a date") is None
    assert parse_timestamp("") is None
    assert parse_timestamp(0) is None


def test_to_epoch_ms() -> None:
    assert to_epoch_ms(datetime(2026, 3, 1, 12, tzinfo=UTC)) == 1_772_366_400_000


def test_is_meaningful() -> None:
    assert is_meaningful(0)
    assert is_meaningful(False)
    assert not is_meaningful(None)
    assert not is_meaningful(" -- ")
    assert not is_meaningful({})
    assert not is_meaningful([])
    assert not is_meaningful(math.nan)
