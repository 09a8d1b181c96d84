"""Data source seam between the pipeline and the row API."""

from __future__ import annotations

from collections.abc import Collection
from typing import Protocol

from fleettrack._api import assets, capabilities, directory, dispatch, live_state
from fleettrack._transport import Transport
from fleettrack.models.asset import FleetSet, Tractor, Trailer
from fleettrack.models.capability import DeviceCapability
from fleettrack.models.directory import Carrier, Driver
from fleettrack.models.dispatch import ExecutionStatus
from fleettrack.models.live_state import LiveStateSnapshot


class TrackingDataSource(Protocol):
    """Read-only queries one reconciliation pass needs.

    Implementations must not cache: every pass refetches from scratch.
    """

    async def tractors(self, org_id: str) -> list[Tractor]: ...

    async def trailers(self, org_id: str) -> list[Trailer]: ...

    async def active_fleet_sets(self, org_id: str) -> list[FleetSet]: ...

    async def live_states(self, org_id: str, device_ids: Collection[str]) -> dict[str, LiveStateSnapshot]: ...

    async def capabilities(self, device_ids: Collection[str]) -> list[DeviceCapability]: ...

    async def execution_statuses(self, org_id: str, fleet_set_ids: Collection[str]) -> list[ExecutionStatus]: ...

    async def carriers(self, carrier_ids: Collection[str]) -> list[Carrier]: ...

    async def drivers(self, org_id: str, driver_ids: Collection[str]) -> list[Driver]: ...


class RestDataSource:
    """:class:`TrackingDataSource` backed by the PostgREST row API."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def tractors(self, org_id: str) -> list[Tractor]:
        return await assets.fetch_tractors(self._transport, org_id)

    async def trailers(self, org_id: str) -> list[Trailer]:
        return await assets.fetch_trailers(self._transport, org_id)

    async def active_fleet_sets(self, org_id: str) -> list[FleetSet]:
        return await assets.fetch_active_fleet_sets(self._transport, org_id)

    async def live_states(self, org_id: str, device_ids: Collection[str]) -> dict[str, LiveStateSnapshot]:
        return await live_state.fetch_live_states(self._transport, org_id, device_ids)

    async def capabilities(self, device_ids: Collection[str]) -> list[DeviceCapability]:
        return await capabilities.fetch_capabilities(self._transport, device_ids)

    async def execution_statuses(self, org_id: str, fleet_set_ids: Collection[str]) -> list[ExecutionStatus]:
        return await dispatch.fetch_execution_statuses(self._transport, org_id, fleet_set_ids)

    async def carriers(self, carrier_ids: Collection[str]) -> list[Carrier]:
        return await directory.fetch_carriers(self._transport, carrier_ids)

    async def drivers(self, org_id: str, driver_ids: Collection[str]) -> list[Driver]:
        return await directory.fetch_drivers(self._transport, org_id, driver_ids)
