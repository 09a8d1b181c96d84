from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from fleettrack.models.dispatch import ExecutionSubstatus
from fleettrack.models.tracking import SignalStatus, SourceDeviceType, TrackingUnit
from fleettrack.tracking.filters import TrackingTab, filter_units, matches_search, summarize


def _unit(id: str, **fields: Any) -> TrackingUnit:
    return TrackingUnit(
        id=id,
        source_device_type=fields.pop("source_device_type", SourceDeviceType.VEHICLE),
        device_id=fields.pop("device_id", f"dev-{id}"),
        sort_timestamp=datetime(2026, 1, 1, tzinfo=UTC),
        **fields,
    )


@pytest.fixture
def units() -> list[TrackingUnit]:
    return [
        _unit(
            "fs1",
            unit="CAM-101",
            unit_plate="KLMN-12",
            driver="Ana Pérez",
            carrier="Frío Sur",
            signal_status=SignalStatus.ONLINE,
            has_active_trip=True,
            execution_substatus=ExecutionSubstatus.IN_TRANSIT,
        ),
        _unit(
            "fs1",
            source_device_type=SourceDeviceType.TRAILER,
            trailer="SR-7",
            location="Ruta 68, Casablanca",
            signal_status=SignalStatus.OFFLINE,
            has_temperature_error=True,
            has_active_trip=True,
            execution_substatus=ExecutionSubstatus.IN_TRANSIT,
        ),
        _unit("fs2", signal_status=SignalStatus.STALE, execution_substatus=ExecutionSubstatus.DELIVERED),
        _unit("x", signal_status=SignalStatus.OFFLINE, execution_substatus=ExecutionSubstatus.AT_DESTINATION,
              has_active_trip=True),
    ]


@pytest.mark.parametrize(
    ("tab", "expected"),
    [
        (TrackingTab.ALL, 4),
        (TrackingTab.ACTIVE_TRIP, 3),
        (TrackingTab.IN_TRANSIT, 2),
        (TrackingTab.AT_DESTINATION, 1),
        (TrackingTab.DELIVERED, 1),
        (TrackingTab.TEMPERATURE_ALERT, 1),
        (TrackingTab.OFFLINE, 2),
    ],
)
def test_tab_filters(units: list[TrackingUnit], tab: TrackingTab, expected: int) -> None:
    assert len(filter_units(units, tab)) == expected


def test_tab_accepts_string_value(units: list[TrackingUnit]) -> None:
    assert len(filter_units(units, "offline")) == 2


def test_empty_search_returns_tab_subset_unchanged(units: list[TrackingUnit]) -> None:
    assert filter_units(units, TrackingTab.OFFLINE, "  ") == filter_units(units, TrackingTab.OFFLINE)


@pytest.mark.parametrize("query", ["cam-1", "klmn", "ana", "FRÍO", "sr-7", "casablanca"])
def test_search_matches_codes_plates_driver_carrier_location(units: list[TrackingUnit], query: str) -> None:
    assert filter_units(units, search=query)


def test_search_without_match(units: list[TrackingUnit]) -> None:
    assert filter_units(units, search="zzz") == []


def test_search_ignores_placeholders() -> None:
    assert not matches_search(_unit("a"), "x")
    assert matches_search(_unit("a"), None)


def test_placeholder_dash_is_not_searchable(units: list[TrackingUnit]) -> None:
    assert not matches_search(_unit("a"), "-")
    found = filter_units(units, search="-")
    assert [(u.id, u.source_device_type) for u in found] == [
        ("fs1", SourceDeviceType.VEHICLE),
        ("fs1", SourceDeviceType.TRAILER),
    ]


def test_summarize_counts_devices(units: list[TrackingUnit]) -> None:
    counts = summarize(units)
    assert counts.total == 4
    assert counts.active_trips == 3
    assert counts.in_transit == 2
    assert counts.at_destination == 1
    assert counts.delivered == 1
    assert counts.temperature_alerts == 1
    assert counts.offline == 2
