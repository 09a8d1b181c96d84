"""Latest live-state snapshot per device."""

from __future__ import annotations

import logging
from collections.abc import Collection

from fleettrack._api._common import eq, in_list, select
from fleettrack._constants import LIVE_STATE_TABLE
from fleettrack._transport import Transport
from fleettrack.models.live_state import LiveStateSnapshot

_logger = logging.getLogger(__name__)


async def fetch_live_states(
    transport: Transport,
    org_id: str,
    device_ids: Collection[str],
) -> dict[str, LiveStateSnapshot]:
    """Return snapshots keyed by device id.

    Devices without a row are simply absent. An empty *device_ids* performs
    no request.
    """
    if not device_ids:
        return {}
    rows = await select(
        transport,
        LIVE_STATE_TABLE,
        LiveStateSnapshot,
        columns=("*",),
        filters={"org_id": eq(org_id), "connection_device_id": in_list(sorted(device_ids))},
    )
    snapshots = {row.device_id: row for row in rows}
    _logger.debug("Live state org=%s requested=%d found=%d", org_id, len(device_ids), len(snapshots))
    return snapshots
