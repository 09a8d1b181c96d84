"""Tractor, trailer and open fleet set queries.

Any failure here propagates: a pass without the asset list cannot produce a
meaningful snapshot.
"""

from __future__ import annotations

from fleettrack._api._common import eq, select
from fleettrack._constants import FLEET_SETS_TABLE, TRACTORS_TABLE, TRAILERS_TABLE
from fleettrack._transport import Transport
from fleettrack.models.asset import FleetSet, Tractor, Trailer

_TRACTOR_COLUMNS = (
    "id",
    "org_id",
    "carrier_id",
    "unit_code",
    "plate",
    "vehicle_type",
    "supports_multi_zone",
    "connection_device_id",
)
_TRAILER_COLUMNS = ("id", "org_id", "carrier_id", "code", "plate", "supports_multi_zone", "connection_device_id")
_FLEET_SET_COLUMNS = (
    "id",
    "org_id",
    "carrier_id",
    "driver_id",
    "vehicle_id",
    "trailer_id",
    "starts_at",
    "ends_at",
    "is_active",
    "updated_at",
)


async def fetch_tractors(transport: Transport, org_id: str) -> list[Tractor]:
    return await select(transport, TRACTORS_TABLE, Tractor, columns=_TRACTOR_COLUMNS, filters={"org_id": eq(org_id)})


async def fetch_trailers(transport: Transport, org_id: str) -> list[Trailer]:
    return await select(transport, TRAILERS_TABLE, Trailer, columns=_TRAILER_COLUMNS, filters={"org_id": eq(org_id)})


async def fetch_active_fleet_sets(transport: Transport, org_id: str) -> list[FleetSet]:
    """Fleet sets with ``is_active = true`` and no end date."""
    return await select(
        transport,
        FLEET_SETS_TABLE,
        FleetSet,
        columns=_FLEET_SET_COLUMNS,
        filters={"org_id": eq(org_id), "is_active": "eq.true", "ends_at": "is.null"},
    )
