"""Tab filtering, free-text search and summary counters over a snapshot."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from enum import StrEnum

from fleettrack._constants import EMPTY_LABEL
from fleettrack.models.dispatch import ExecutionSubstatus
from fleettrack.models.tracking import SignalStatus, TrackingCounts, TrackingUnit


class TrackingTab(StrEnum):
    ALL = "all"
    ACTIVE_TRIP = "active_trip"
    IN_TRANSIT = "in_transit"
    AT_DESTINATION = "at_destination"
    DELIVERED = "delivered"
    TEMPERATURE_ALERT = "temperature_alert"
    OFFLINE = "offline"


_TAB_PREDICATES: dict[TrackingTab, Callable[[TrackingUnit], bool]] = {
    TrackingTab.ALL: lambda unit: True,
    TrackingTab.ACTIVE_TRIP: lambda unit: unit.has_active_trip,
    TrackingTab.IN_TRANSIT: lambda unit: unit.execution_substatus == ExecutionSubstatus.IN_TRANSIT,
    TrackingTab.AT_DESTINATION: lambda unit: unit.execution_substatus == ExecutionSubstatus.AT_DESTINATION,
    TrackingTab.DELIVERED: lambda unit: unit.execution_substatus == ExecutionSubstatus.DELIVERED,
    TrackingTab.TEMPERATURE_ALERT: lambda unit: unit.has_temperature_error,
    TrackingTab.OFFLINE: lambda unit: unit.signal_status == SignalStatus.OFFLINE,
}


def _search_fields(unit: TrackingUnit) -> tuple[str | None, ...]:
    return (
        unit.unit,
        unit.unit_plate,
        unit.trailer,
        unit.trailer_plate,
        unit.driver,
        unit.location,
        unit.carrier,
    )


def matches_search(unit: TrackingUnit, query: str | None) -> bool:
    """Case-insensitive substring match over codes, plates, driver, location and carrier.

    Placeholder labels for missing values never match.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return True
    return any(needle in value.lower() for value in _search_fields(unit) if value and value != EMPTY_LABEL)


def filter_units(
    units: Iterable[TrackingUnit],
    tab: TrackingTab | str = TrackingTab.ALL,
    search: str | None = None,
) -> list[TrackingUnit]:
    predicate = _TAB_PREDICATES[TrackingTab(tab)]
    return [unit for unit in units if predicate(unit) and matches_search(unit, search)]


def summarize(units: Iterable[TrackingUnit]) -> TrackingCounts:
    """Count units per tab. ``total`` counts devices, not trucks."""
    units = list(units)

    def count(tab: TrackingTab) -> int:
        predicate = _TAB_PREDICATES[tab]
        return sum(1 for unit in units if predicate(unit))

    return TrackingCounts(
        total=len(units),
        active_trips=count(TrackingTab.ACTIVE_TRIP),
        in_transit=count(TrackingTab.IN_TRANSIT),
        at_destination=count(TrackingTab.AT_DESTINATION),
        delivered=count(TrackingTab.DELIVERED),
        temperature_alerts=count(TrackingTab.TEMPERATURE_ALERT),
        offline=count(TrackingTab.OFFLINE),
    )
