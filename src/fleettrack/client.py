"""High-level async client for live fleet tracking."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import aiohttp

from fleettrack._mqtt import MqttChangeFeed
from fleettrack._transport import RestTransport
from fleettrack.config import TrackingConfig
from fleettrack.exceptions import FleetTrackError, FleetTrackTransportError, ReconciliationError
from fleettrack.models.tracking import TrackingCounts, TrackingUnit
from fleettrack.notifier import ChangeEvent, ChangeNotifier
from fleettrack.pipeline import TrackingPipeline
from fleettrack.source import RestDataSource, TrackingDataSource
from fleettrack.state.store import TrackingSnapshot, TrackingStore
from fleettrack.tracking.filters import TrackingTab, filter_units, summarize

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class FleetTrackClient:
    """Async client that keeps a reconciled snapshot of an organization's fleet.

    Usage::

        async with FleetTrackClient(TrackingConfig.from_env()) as client:
            snapshot = await client.refresh(org_id)
            for unit in client.units(tab=TrackingTab.OFFLINE):
                ...

    Await :meth:`watch` to re-run the pass whenever the live-state, fleet-set
    or dispatch-order tables change.
    """

    def __init__(
        self,
        config: TrackingConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        source: TrackingDataSource | None = None,
        store: TrackingStore | None = None,
        clock: Callable[[], datetime] = _utcnow,
        on_snapshot: Callable[[TrackingSnapshot], None] | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._clock = clock
        self._store = store if store is not None else TrackingStore(clock=clock)
        self._notifier = ChangeNotifier()
        self._on_snapshot = on_snapshot
        self._loop: asyncio.AbstractEventLoop | None = None
        self._feed: MqttChangeFeed | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._background: set[asyncio.Task[Any]] = set()
        self._pipeline: TrackingPipeline | None = None
        if source is not None:
            self._pipeline = self._make_pipeline(source)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FleetTrackClient:
        self._loop = asyncio.get_running_loop()
        if self._pipeline is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            transport = RestTransport(self._config, self._http_session)
            self._pipeline = self._make_pipeline(RestDataSource(transport))
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.unwatch()
        for task in list(self._background):
            task.cancel()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._loop = None

    def _make_pipeline(self, source: TrackingDataSource) -> TrackingPipeline:
        return TrackingPipeline(source, clock=self._clock, strict_fleet_sets=self._config.strict_fleet_sets)

    def _require_pipeline(self) -> TrackingPipeline:
        if self._pipeline is None:
            raise FleetTrackError("Client not initialized. Use 'async with FleetTrackClient(...) as client:'")
        return self._pipeline

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    @property
    def store(self) -> TrackingStore:
        return self._store

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    @property
    def snapshot(self) -> TrackingSnapshot:
        return self._store.snapshot()

    async def refresh(self, org_id: str, *, force: bool = False) -> TrackingSnapshot:
        """Run a reconciliation pass for *org_id* and publish its result.

        Without *force* the pass is skipped when the store already holds a
        completed snapshot for *org_id*. A pass that finishes after a newer
        one has published is discarded; the newer snapshot is returned.

        Raises
        ------
        ReconciliationError
            If a required fetch failed. The previous units stay visible.
        """
        if not force and self._store.is_loaded(org_id):
            _logger.debug("Snapshot for org=%s already loaded; skipping pass", org_id)
            return self._store.snapshot()

        pipeline = self._require_pipeline()
        sequence = self._store.next_sequence()
        _logger.debug("Pass start org=%s sequence=%d force=%s", org_id, sequence, force)
        try:
            units = await pipeline.run(org_id)
        except Exception as exc:
            self._store.mark_failed(org_id, sequence)
            _logger.warning("Pass failed org=%s sequence=%d: %s", org_id, sequence, exc)
            raise ReconciliationError(
                f"Reconciliation failed for org {org_id}: {exc}",
                org_id=org_id,
                sequence=sequence,
            ) from exc

        if self._store.publish(org_id, units, sequence) and self._on_snapshot is not None:
            try:
                self._on_snapshot(self._store.snapshot())
            except Exception:
                _logger.warning("on_snapshot callback failed", exc_info=True)
        return self._store.snapshot()

    # ------------------------------------------------------------------
    # Snapshot queries
    # ------------------------------------------------------------------

    def units(self, tab: TrackingTab | str = TrackingTab.ALL, search: str | None = None) -> list[TrackingUnit]:
        return filter_units(self._store.snapshot().units, tab=tab, search=search)

    def counts(self) -> TrackingCounts:
        return summarize(self._store.snapshot().units)

    def get_unit(self, unit_id: str) -> TrackingUnit | None:
        """Find a unit by fleet set id or by ``"{sourceDeviceType}:{deviceId}"``.

        A paired fleet set has two units; the first in snapshot order wins.
        """
        for unit in self._store.snapshot().units:
            if unit.fleet_set_id == unit_id or unit.synthetic_id == unit_id:
                return unit
        return None

    # ------------------------------------------------------------------
    # Change watching
    # ------------------------------------------------------------------

    async def watch(self, org_id: str) -> None:
        """Re-run a forced pass on every change signal for *org_id*.

        Starts the MQTT feed when ``mqtt_enabled`` is set; in-process signals
        can always be sent through :attr:`notifier`. Replaces any previous
        watch.

        Raises
        ------
        FleetTrackTransportError
            If the MQTT broker cannot be reached. Nothing stays subscribed.
        """
        loop = self._loop or asyncio.get_running_loop()
        await self.unwatch()
        unsubscribe = self._notifier.subscribe(org_id, self._schedule_refresh)
        if self._config.mqtt_enabled:
            feed = MqttChangeFeed(self._config, loop=loop, on_event=self._notifier.emit)
            try:
                # connect() resolves, dials and handshakes synchronously.
                await loop.run_in_executor(None, feed.start, org_id)
            except Exception as exc:
                unsubscribe()
                raise FleetTrackTransportError(
                    f"MQTT change feed failed to start: {exc}",
                    endpoint=self._config.mqtt_host or "",
                ) from exc
            self._feed = feed
        self._unsubscribe = unsubscribe
        _logger.debug("Watching org=%s mqtt=%s", org_id, self._feed is not None)

    async def unwatch(self) -> None:
        unsubscribe = self._unsubscribe
        self._unsubscribe = None
        if unsubscribe is not None:
            unsubscribe()
        feed = self._feed
        self._feed = None
        if feed is None:
            return
        loop = self._loop or asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, feed.stop)
        except Exception:
            _logger.debug("MQTT change feed stop failed", exc_info=True)

    def _schedule_refresh(self, event: ChangeEvent) -> None:
        task = asyncio.ensure_future(self.refresh(event.org_id, force=True))
        self._background.add(task)
        task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Task[Any]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None and not isinstance(exc, ReconciliationError):
            _logger.warning("Background refresh failed", exc_info=exc)
