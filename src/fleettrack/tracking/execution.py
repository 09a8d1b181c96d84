"""Delivery-execution phase per fleet set."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime

from fleettrack.models.dispatch import ExecutionStatus, ExecutionSubstatus

_OLDEST = datetime.min.replace(tzinfo=UTC)


def latest_execution_by_fleet_set(rows: Iterable[ExecutionStatus]) -> dict[str, ExecutionSubstatus]:
    """Keep the most recently updated substatus per fleet set.

    Rows without ``updated_at`` lose against any dated row; among equals the
    first row seen wins, matching a query ordered by ``updated_at desc``.
    """
    latest: dict[str, ExecutionStatus] = {}
    for row in rows:
        current = latest.get(row.fleet_set_id)
        if current is None or (row.updated_at or _OLDEST) > (current.updated_at or _OLDEST):
            latest[row.fleet_set_id] = row
    return {fleet_set_id: row.substatus for fleet_set_id, row in latest.items()}


def resolve_trip(
    fleet_set_id: str | None,
    executions: Mapping[str, ExecutionSubstatus],
) -> tuple[bool, ExecutionSubstatus | None]:
    """Return ``(has_active_trip, substatus)`` for a unit's fleet set.

    A delivered order still reports its substatus but no longer counts as an
    active trip.
    """
    if fleet_set_id is None:
        return False, None
    substatus = executions.get(fleet_set_id)
    if substatus is None:
        return False, None
    return substatus != ExecutionSubstatus.DELIVERED, substatus
