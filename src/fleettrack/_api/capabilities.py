"""Device capability rows (CAN bus, temperature probes)."""

from __future__ import annotations

from collections.abc import Collection

from fleettrack._api._common import in_list, select
from fleettrack._constants import CAPABILITIES_TABLE
from fleettrack._transport import Transport
from fleettrack.models.capability import DeviceCapability


async def fetch_capabilities(transport: Transport, device_ids: Collection[str]) -> list[DeviceCapability]:
    if not device_ids:
        return []
    return await select(
        transport,
        CAPABILITIES_TABLE,
        DeviceCapability,
        columns=("id", "has_can", "temp_mode"),
        filters={"id": in_list(sorted(device_ids))},
    )
