"""One full reconciliation pass.

A pass refetches everything from scratch; there is no incremental path.
Fetches run concurrently wherever they do not depend on each other:

1. tractors, trailers and open fleet sets
2. live state and capabilities for the resulting device ids
3. (reconcile, no I/O)
4. execution statuses for the reconciled fleet sets, carriers and drivers
5. (classify and sort, no I/O)

Assets and live state are required: their failure fails the pass. The other
lookups only enrich units, so a query error there is logged and the pass
continues with defaults. Anything that is not a query error still propagates.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TypeVar

from fleettrack.exceptions import FleetTrackError
from fleettrack.models.tracking import TrackingUnit
from fleettrack.source import TrackingDataSource
from fleettrack.tracking.assignments import AssetIndex
from fleettrack.tracking.capabilities import index_capabilities
from fleettrack.tracking.execution import latest_execution_by_fleet_set
from fleettrack.tracking.reconciler import Directory, build_unit, fleet_set_ids, reconcile, sort_units

_logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(UTC)


async def _optional(what: str, org_id: str, fetch: Awaitable[list[T]]) -> list[T]:
    try:
        return await fetch
    except FleetTrackError:
        _logger.warning("Fetching %s failed for org=%s; continuing without it", what, org_id, exc_info=True)
        return []


class TrackingPipeline:
    """Run reconciliation passes against a :class:`TrackingDataSource`."""

    def __init__(
        self,
        source: TrackingDataSource,
        *,
        clock: Callable[[], datetime] = _utcnow,
        strict_fleet_sets: bool = False,
    ) -> None:
        self._source = source
        self._clock = clock
        self._strict_fleet_sets = strict_fleet_sets

    async def run(self, org_id: str) -> list[TrackingUnit]:
        """Fetch, reconcile and classify every tracked device of *org_id*.

        Raises the first failure of a required fetch (never an
        ``ExceptionGroup``).
        """
        try:
            return await self._run(org_id)
        except BaseExceptionGroup as group:
            raise group.exceptions[0] from None

    async def _run(self, org_id: str) -> list[TrackingUnit]:
        source = self._source

        async with asyncio.TaskGroup() as tg:
            tractors = tg.create_task(source.tractors(org_id))
            trailers = tg.create_task(source.trailers(org_id))
            fleet_sets = tg.create_task(source.active_fleet_sets(org_id))
        index = AssetIndex.build(
            tractors.result(),
            trailers.result(),
            fleet_sets.result(),
            strict=self._strict_fleet_sets,
        )
        device_ids = index.device_ids()

        async with asyncio.TaskGroup() as tg:
            live_states = tg.create_task(source.live_states(org_id, device_ids))
            capabilities = tg.create_task(_optional("capabilities", org_id, source.capabilities(device_ids)))

        contexts = reconcile(index, live_states.result(), index_capabilities(capabilities.result()))
        now = self._clock()

        async with asyncio.TaskGroup() as tg:
            executions = tg.create_task(
                _optional("execution statuses", org_id, source.execution_statuses(org_id, fleet_set_ids(contexts)))
            )
            carriers = tg.create_task(_optional("carriers", org_id, source.carriers(index.carrier_ids())))
            drivers = tg.create_task(_optional("drivers", org_id, source.drivers(org_id, index.driver_ids())))

        directory = Directory.build(carriers.result(), drivers.result())
        substatuses = latest_execution_by_fleet_set(executions.result())
        units = sort_units(build_unit(context, directory, substatuses, now) for context in contexts)
        _logger.debug("Pass built org=%s devices=%d units=%d", org_id, len(device_ids), len(units))
        return units
