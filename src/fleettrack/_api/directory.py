"""Carrier and driver lookups."""

from __future__ import annotations

from collections.abc import Collection

from fleettrack._api._common import eq, in_list, select
from fleettrack._constants import CARRIERS_TABLE, DRIVERS_TABLE
from fleettrack._transport import Transport
from fleettrack.models.directory import Carrier, Driver


async def fetch_carriers(transport: Transport, carrier_ids: Collection[str]) -> list[Carrier]:
    if not carrier_ids:
        return []
    return await select(
        transport,
        CARRIERS_TABLE,
        Carrier,
        columns=("id", "commercial_name"),
        filters={"id": in_list(sorted(carrier_ids))},
    )


async def fetch_drivers(transport: Transport, org_id: str, driver_ids: Collection[str]) -> list[Driver]:
    if not driver_ids:
        return []
    return await select(
        transport,
        DRIVERS_TABLE,
        Driver,
        columns=("id", "name", "phone_number", "email", "license_number"),
        filters={"org_id": eq(org_id), "id": in_list(sorted(driver_ids))},
    )
