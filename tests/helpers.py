"""Row builders and an in-memory data source shared by the tests."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from fleettrack.models.asset import FleetSet, Tractor, Trailer
from fleettrack.models.capability import DeviceCapability
from fleettrack.models.directory import Carrier, Driver
from fleettrack.models.dispatch import ExecutionStatus
from fleettrack.models.live_state import LiveStateSnapshot

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)


_AUTO_DEVICE: Any = object()
"""Default device id marker: resolves to ``f"dev-{id}"``."""


def _device_for(id: str, device_id: Any) -> str | None:
    return f"dev-{id}" if device_id is _AUTO_DEVICE else device_id


def ago(seconds: float) -> datetime:
    return NOW - timedelta(seconds=seconds)


def tractor(id: str = "v1", device_id: str | None = _AUTO_DEVICE, **extra: Any) -> Tractor:
    row = {"id": id, "org_id": "org-1", "unit_code": f"U-{id}", "connection_device_id": _device_for(id, device_id)}
    row.update(extra)
    return Tractor.model_validate(row)


def trailer(id: str = "t1", device_id: str | None = _AUTO_DEVICE, **extra: Any) -> Trailer:
    row = {"id": id, "org_id": "org-1", "code": f"T-{id}", "connection_device_id": _device_for(id, device_id)}
    row.update(extra)
    return Trailer.model_validate(row)


def fleet_set(id: str = "fs1", tractor_id: str | None = "v1", trailer_id: str | None = "t1", **extra: Any) -> FleetSet:
    row = {
        "id": id,
        "org_id": "org-1",
        "vehicle_id": tractor_id,
        "trailer_id": trailer_id,
        "is_active": True,
        "ends_at": None,
    }
    row.update(extra)
    return FleetSet.model_validate(row)


def live_state(device_id: str = "dev-v1", *, age_s: float | None = 30, **extra: Any) -> LiveStateSnapshot:
    row: dict[str, Any] = {"org_id": "org-1", "connection_device_id": device_id}
    if age_s is not None:
        row["message_ts"] = ago(age_s).isoformat()
    row.update(extra)
    return LiveStateSnapshot.model_validate(row)


@dataclass
class FakeSource:
    """In-memory :class:`~fleettrack.source.TrackingDataSource`."""

    tractor_rows: list[Tractor] = field(default_factory=list)
    trailer_rows: list[Trailer] = field(default_factory=list)
    fleet_set_rows: list[FleetSet] = field(default_factory=list)
    live_state_rows: list[LiveStateSnapshot] = field(default_factory=list)
    capability_rows: list[DeviceCapability] = field(default_factory=list)
    execution_rows: list[ExecutionStatus] = field(default_factory=list)
    carrier_rows: list[Carrier] = field(default_factory=list)
    driver_rows: list[Driver] = field(default_factory=list)
    fail: dict[str, Exception] = field(default_factory=dict)
    calls: list[tuple[str, Any]] = field(default_factory=list)

    def _record(self, name: str, arg: Any = None) -> None:
        self.calls.append((name, arg))
        if name in self.fail:
            raise self.fail[name]

    def called(self, name: str) -> bool:
        return any(call == name for call, _ in self.calls)

    async def tractors(self, org_id: str) -> list[Tractor]:
        self._record("tractors", org_id)
        return list(self.tractor_rows)

    async def trailers(self, org_id: str) -> list[Trailer]:
        self._record("trailers", org_id)
        return list(self.trailer_rows)

    async def active_fleet_sets(self, org_id: str) -> list[FleetSet]:
        self._record("active_fleet_sets", org_id)
        return list(self.fleet_set_rows)

    async def live_states(self, org_id: str, device_ids: Collection[str]) -> dict[str, LiveStateSnapshot]:
        self._record("live_states", sorted(device_ids))
        return {row.device_id: row for row in self.live_state_rows if row.device_id in device_ids}

    async def capabilities(self, device_ids: Collection[str]) -> list[DeviceCapability]:
        self._record("capabilities", sorted(device_ids))
        return [row for row in self.capability_rows if row.device_id in device_ids]

    async def execution_statuses(self, org_id: str, fleet_set_ids: Collection[str]) -> list[ExecutionStatus]:
        self._record("execution_statuses", sorted(fleet_set_ids))
        return [row for row in self.execution_rows if row.fleet_set_id in fleet_set_ids]

    async def carriers(self, carrier_ids: Collection[str]) -> list[Carrier]:
        self._record("carriers", sorted(carrier_ids))
        return [row for row in self.carrier_rows if row.id in carrier_ids]

    async def drivers(self, org_id: str, driver_ids: Collection[str]) -> list[Driver]:
        self._record("drivers", sorted(driver_ids))
        return [row for row in self.driver_rows if row.id in driver_ids]
