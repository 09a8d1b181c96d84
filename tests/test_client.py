from __future__ import annotations

import asyncio
import threading
from typing import Any

import pytest

import fleettrack.client as client_module
from fleettrack.client import FleetTrackClient
from fleettrack.config import TrackingConfig
from fleettrack.exceptions import FleetTrackError, FleetTrackTransportError, ReconciliationError
from fleettrack.models.asset import Tractor
from fleettrack.notifier import ChangeEvent, ChangeSource
from fleettrack.state.store import TrackingSnapshot
from fleettrack.tracking.filters import TrackingTab
from helpers import NOW, FakeSource, fleet_set, live_state, tractor, trailer


class GatedSource(FakeSource):
    """Blocks the first ``tractors`` call until ``gate`` is set."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.gate = asyncio.Event()
        self.first_started = asyncio.Event()
        self._first = True

    async def tractors(self, org_id: str) -> list[Tractor]:
        rows = await super().tractors(org_id)
        if self._first:
            self._first = False
            self.first_started.set()
            await self.gate.wait()
        return rows


@pytest.fixture
def config() -> TrackingConfig:
    return TrackingConfig(base_url="https://example.test", api_key="anon-key")


@pytest.fixture
def source() -> FakeSource:
    return FakeSource(
        tractor_rows=[tractor("v1"), tractor("v2")],
        trailer_rows=[trailer("t1")],
        fleet_set_rows=[fleet_set("fs1", "v1", "t1")],
        live_state_rows=[live_state("dev-v1"), live_state("dev-t1", age_s=5000)],
    )


def _count(source: FakeSource, name: str) -> int:
    return sum(1 for call, _ in source.calls if call == name)


@pytest.mark.asyncio
async def test_refresh_publishes_snapshot(config: TrackingConfig, source: FakeSource) -> None:
    async with FleetTrackClient(config, source=source, clock=lambda: NOW) as client:
        snapshot = await client.refresh("org-1")

    assert snapshot.loaded
    assert snapshot.org_id == "org-1"
    assert snapshot.sequence == 1
    assert len(snapshot.units) == 3
    assert client.counts().total == 3
    assert client.counts().offline == 2


@pytest.mark.asyncio
async def test_refresh_skips_when_loaded_unless_forced(config: TrackingConfig, source: FakeSource) -> None:
    async with FleetTrackClient(config, source=source, clock=lambda: NOW) as client:
        await client.refresh("org-1")
        await client.refresh("org-1")
        assert _count(source, "tractors") == 1

        await client.refresh("org-1", force=True)
        assert _count(source, "tractors") == 2

        await client.refresh("org-2")
        assert _count(source, "tractors") == 3
        assert client.snapshot.org_id == "org-2"


@pytest.mark.asyncio
async def test_failed_pass_keeps_previous_units(config: TrackingConfig, source: FakeSource) -> None:
    async with FleetTrackClient(config, source=source, clock=lambda: NOW) as client:
        await client.refresh("org-1")
        source.fail["active_fleet_sets"] = FleetTrackTransportError("down", status_code=502)

        with pytest.raises(ReconciliationError) as excinfo:
            await client.refresh("org-1", force=True)

        assert excinfo.value.org_id == "org-1"
        assert excinfo.value.sequence == 2
        assert isinstance(excinfo.value.__cause__, FleetTrackTransportError)
        assert len(client.snapshot.units) == 3
        assert not client.store.is_loaded("org-1")

        # The next non-forced refresh retries.
        del source.fail["active_fleet_sets"]
        snapshot = await client.refresh("org-1")
        assert snapshot.loaded
        assert snapshot.sequence == 3


@pytest.mark.asyncio
async def test_pass_finishing_late_does_not_overwrite_newer(config: TrackingConfig) -> None:
    source = GatedSource(tractor_rows=[tractor("old")])
    published: list[int] = []
    client = FleetTrackClient(
        config,
        source=source,
        clock=lambda: NOW,
        on_snapshot=lambda snapshot: published.append(snapshot.sequence),
    )
    async with client:
        slow = asyncio.create_task(client.refresh("org-1", force=True))
        await source.first_started.wait()

        source.tractor_rows = [tractor("new")]
        fast = await client.refresh("org-1", force=True)
        assert fast.sequence == 2

        source.gate.set()
        result = await slow

    assert result.sequence == 2
    assert [u.tractor_id for u in client.snapshot.units] == ["new"]
    assert published == [2]


@pytest.mark.asyncio
async def test_get_unit_by_fleet_set_or_synthetic_id(config: TrackingConfig, source: FakeSource) -> None:
    async with FleetTrackClient(config, source=source, clock=lambda: NOW) as client:
        await client.refresh("org-1")

        assert client.get_unit("fs1") is not None
        unit = client.get_unit("VEHICLE:dev-v2")
        assert unit is not None and unit.tractor_id == "v2"
        trailer_unit = client.get_unit("TRAILER:dev-t1")
        assert trailer_unit is not None and trailer_unit.fleet_set_id == "fs1"
        assert client.get_unit("nope") is None


@pytest.mark.asyncio
async def test_units_filters(config: TrackingConfig, source: FakeSource) -> None:
    async with FleetTrackClient(config, source=source, clock=lambda: NOW) as client:
        await client.refresh("org-1")
        assert len(client.units(tab=TrackingTab.OFFLINE)) == 2
        assert [u.device_id for u in client.units(search="u-v2")] == ["dev-v2"]


@pytest.mark.asyncio
async def test_change_event_triggers_forced_refresh(config: TrackingConfig, source: FakeSource) -> None:
    snapshots: list[TrackingSnapshot] = []
    async with FleetTrackClient(config, source=source, clock=lambda: NOW, on_snapshot=snapshots.append) as client:
        await client.refresh("org-1")
        await client.watch("org-1")

        client.notifier.emit(ChangeEvent(org_id="org-1", source=ChangeSource.FLEET_SETS))
        client.notifier.emit(ChangeEvent(org_id="org-2", source=ChangeSource.FLEET_SETS))
        await asyncio.gather(*client._background)

        assert _count(source, "tractors") == 2
        assert [s.sequence for s in snapshots] == [1, 2]

        await client.unwatch()
        client.notifier.emit(ChangeEvent(org_id="org-1", source=ChangeSource.LIVE_STATE))
        assert not client._background
        assert _count(source, "tractors") == 2


@pytest.mark.asyncio
async def test_background_refresh_failure_is_contained(config: TrackingConfig, source: FakeSource) -> None:
    async with FleetTrackClient(config, source=source, clock=lambda: NOW) as client:
        await client.watch("org-1")
        source.fail["tractors"] = FleetTrackTransportError("down")
        client.notifier.emit(ChangeEvent(org_id="org-1", source=ChangeSource.DISPATCH_ORDERS))
        results = await asyncio.gather(*client._background, return_exceptions=True)

    assert len(results) == 1 and isinstance(results[0], ReconciliationError)


@pytest.mark.asyncio
async def test_refresh_requires_context(config: TrackingConfig) -> None:
    client = FleetTrackClient(config)
    with pytest.raises(FleetTrackError, match="not initialized"):
        await client.refresh("org-1")


class _RecordingFeed:
    """Stand-in for :class:`MqttChangeFeed` that records the calling thread."""

    instances: list[_RecordingFeed] = []
    fail_start: Exception | None = None

    def __init__(self, config: TrackingConfig, *, loop: asyncio.AbstractEventLoop, on_event: Any) -> None:
        self.on_event = on_event
        self.start_thread: int | None = None
        self.stop_thread: int | None = None
        _RecordingFeed.instances.append(self)

    def start(self, org_id: str) -> None:
        self.start_thread = threading.get_ident()
        if _RecordingFeed.fail_start is not None:
            raise _RecordingFeed.fail_start

    def stop(self) -> None:
        self.stop_thread = threading.get_ident()


@pytest.fixture
def recording_feed(monkeypatch: pytest.MonkeyPatch) -> type[_RecordingFeed]:
    _RecordingFeed.instances = []
    _RecordingFeed.fail_start = None
    monkeypatch.setattr(client_module, "MqttChangeFeed", _RecordingFeed)
    return _RecordingFeed


@pytest.fixture
def mqtt_config() -> TrackingConfig:
    return TrackingConfig(
        base_url="https://example.test",
        api_key="anon-key",
        mqtt_enabled=True,
        mqtt_host="broker.example.test",
    )


@pytest.mark.asyncio
async def test_mqtt_feed_starts_and_stops_off_the_event_loop(
    mqtt_config: TrackingConfig,
    source: FakeSource,
    recording_feed: type[_RecordingFeed],
) -> None:
    loop_thread = threading.get_ident()
    async with FleetTrackClient(mqtt_config, source=source, clock=lambda: NOW) as client:
        await client.watch("org-1")
        (feed,) = recording_feed.instances
        assert feed.start_thread is not None and feed.start_thread != loop_thread
        assert client.notifier.has_subscribers("org-1")

    assert feed.stop_thread is not None and feed.stop_thread != loop_thread
    assert not client.notifier.has_subscribers("org-1")


@pytest.mark.asyncio
async def test_failed_feed_start_leaves_nothing_subscribed(
    mqtt_config: TrackingConfig,
    source: FakeSource,
    recording_feed: type[_RecordingFeed],
) -> None:
    recording_feed.fail_start = ConnectionRefusedError("broker down")
    async with FleetTrackClient(mqtt_config, source=source, clock=lambda: NOW) as client:
        with pytest.raises(FleetTrackTransportError, match="broker down") as excinfo:
            await client.watch("org-1")

        assert isinstance(excinfo.value.__cause__, ConnectionRefusedError)
        assert not client.notifier.has_subscribers("org-1")
        client.notifier.emit(ChangeEvent(org_id="org-1", source=ChangeSource.LIVE_STATE))
        assert not client._background
