"""Open dispatch orders in the execution stage."""

from __future__ import annotations

from collections.abc import Collection

from fleettrack._api._common import eq, in_list, select
from fleettrack._constants import DISPATCH_ORDERS_TABLE, EXECUTION_STAGE
from fleettrack._transport import Transport
from fleettrack.models.dispatch import ExecutionStatus, ExecutionSubstatus


async def fetch_execution_statuses(
    transport: Transport,
    org_id: str,
    fleet_set_ids: Collection[str],
) -> list[ExecutionStatus]:
    """Execution-stage orders for *fleet_set_ids*, newest first."""
    if not fleet_set_ids:
        return []
    return await select(
        transport,
        DISPATCH_ORDERS_TABLE,
        ExecutionStatus,
        columns=("fleet_set_id", "substatus", "updated_at"),
        filters={
            "org_id": eq(org_id),
            "stage": eq(EXECUTION_STAGE),
            "fleet_set_id": in_list(sorted(fleet_set_ids)),
            "substatus": in_list(ExecutionSubstatus),
        },
        order="updated_at.desc",
    )
