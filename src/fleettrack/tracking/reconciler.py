"""Join assets, open fleet sets, live state and capabilities into units.

Every tracked tractor yields one ``VEHICLE`` unit and every tracked trailer
one ``TRAILER`` unit. A fully paired fleet set therefore appears twice, once
per device: tractor and trailer telemetry fail independently and operators
need to see both.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime

from fleettrack._constants import EMPTY_LABEL
from fleettrack.ingestion.normalize import to_epoch_ms
from fleettrack.ingestion.telematics import TelematicsReader
from fleettrack.models.asset import FleetSet, Tractor, Trailer
from fleettrack.models.capability import DeviceCapability
from fleettrack.models.directory import Carrier, Driver
from fleettrack.models.dispatch import ExecutionSubstatus
from fleettrack.models.live_state import LiveStateSnapshot
from fleettrack.models.tracking import Coordinates, SourceDeviceType, TrackingUnit
from fleettrack.tracking.assignments import AssetIndex
from fleettrack.tracking.capabilities import resolve_capability
from fleettrack.tracking.classify import (
    classify_device_health,
    classify_motion,
    classify_signal,
    compute_signal_age,
    display_speed_kph,
    format_speed,
)
from fleettrack.tracking.execution import resolve_trip
from fleettrack.tracking.temperature import resolve_reefer_details, resolve_reefer_display, resolve_temperature

_logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


@dataclass(frozen=True)
class UnitContext:
    """Everything known about one device before classification."""

    source_device_type: SourceDeviceType
    device_id: str
    tractor: Tractor | None
    trailer: Trailer | None
    fleet_set: FleetSet | None
    snapshot: LiveStateSnapshot | None
    capability: DeviceCapability

    @property
    def source_asset(self) -> Tractor | Trailer:
        asset = self.tractor if self.source_device_type == SourceDeviceType.VEHICLE else self.trailer
        if asset is None:
            raise ValueError(f"{self.source_device_type} context {self.device_id} has no source asset")
        return asset

    @property
    def unit_id(self) -> str:
        if self.fleet_set is not None:
            return self.fleet_set.id
        return f"{self.source_device_type}:{self.device_id}"


@dataclass(frozen=True)
class Directory:
    """Carrier and driver lookups for one pass."""

    carriers: dict[str, Carrier] = field(default_factory=dict)
    drivers: dict[str, Driver] = field(default_factory=dict)

    @classmethod
    def build(cls, carriers: Iterable[Carrier] = (), drivers: Iterable[Driver] = ()) -> Directory:
        return cls(
            carriers={c.id: c for c in carriers},
            drivers={d.id: d for d in drivers},
        )

    def carrier_name(self, carrier_id: str | None) -> str | None:
        if carrier_id is None:
            return None
        carrier = self.carriers.get(carrier_id)
        return carrier.commercial_name if carrier is not None else None


def reconcile(
    index: AssetIndex,
    live_states: Mapping[str, LiveStateSnapshot],
    capabilities: Mapping[str, DeviceCapability],
) -> list[UnitContext]:
    """Build one context per tracked device: tractors first, then trailers."""
    contexts: list[UnitContext] = []

    for tractor in index.tracked_tractors:
        if tractor.device_id is None:
            continue
        fleet_set = index.fleet_set_for_tractor(tractor.id)
        trailer = None
        if fleet_set is not None and fleet_set.trailer_id is not None:
            trailer = index.trailers.get(fleet_set.trailer_id)
        contexts.append(
            UnitContext(
                source_device_type=SourceDeviceType.VEHICLE,
                device_id=tractor.device_id,
                tractor=tractor,
                trailer=trailer,
                fleet_set=fleet_set,
                snapshot=live_states.get(tractor.device_id),
                capability=resolve_capability(capabilities, tractor.device_id),
            )
        )

    for trailer in index.tracked_trailers:
        if trailer.device_id is None:
            continue
        fleet_set = index.fleet_set_for_trailer(trailer.id)
        tractor = None
        if fleet_set is not None and fleet_set.tractor_id is not None:
            tractor = index.tractors.get(fleet_set.tractor_id)
        contexts.append(
            UnitContext(
                source_device_type=SourceDeviceType.TRAILER,
                device_id=trailer.device_id,
                tractor=tractor,
                trailer=trailer,
                fleet_set=fleet_set,
                snapshot=live_states.get(trailer.device_id),
                capability=resolve_capability(capabilities, trailer.device_id),
            )
        )

    _logger.debug("Reconciled %d device contexts", len(contexts))
    return contexts


def fleet_set_ids(contexts: Iterable[UnitContext]) -> list[str]:
    """Unique fleet set ids among *contexts*, in first-seen order."""
    return list(dict.fromkeys(c.fleet_set.id for c in contexts if c.fleet_set is not None))


def format_location(snapshot: LiveStateSnapshot | None) -> str:
    """Address text, else ``"lat, lng"`` with five decimals, else ``"-"``."""
    if snapshot is None:
        return EMPTY_LABEL
    if snapshot.address_text:
        return snapshot.address_text
    coordinates = snapshot.coordinates
    if coordinates is None:
        return EMPTY_LABEL
    return f"{coordinates[0]:.5f}, {coordinates[1]:.5f}"


def _is_hybrid(context: UnitContext) -> bool:
    # The paired trailer decides; a trailer source is its own pair.
    if context.trailer is not None:
        return context.trailer.supports_multi_zone
    return context.source_asset.supports_multi_zone


def _carrier(context: UnitContext, directory: Directory) -> tuple[str | None, str]:
    fleet_carrier = context.fleet_set.carrier_id if context.fleet_set is not None else None
    asset_carrier = context.source_asset.carrier_id
    name = directory.carrier_name(fleet_carrier) or directory.carrier_name(asset_carrier)
    return fleet_carrier or asset_carrier, name or EMPTY_LABEL


def _sort_timestamp(context: UnitContext) -> datetime:
    if context.fleet_set is not None and context.fleet_set.updated_at is not None:
        return context.fleet_set.updated_at
    if context.snapshot is not None and context.snapshot.updated_at is not None:
        return context.snapshot.updated_at
    return _EPOCH


def build_unit(
    context: UnitContext,
    directory: Directory,
    executions: Mapping[str, ExecutionSubstatus],
    now: datetime,
) -> TrackingUnit:
    """Classify one context into a display-ready :class:`TrackingUnit`.

    *now* is captured once per pass so every unit of a snapshot shares the
    same signal-age baseline.
    """
    snapshot = context.snapshot
    fleet_set = context.fleet_set
    reader = TelematicsReader(snapshot.telematics if snapshot is not None else None)
    has_known_message = snapshot is not None and snapshot.has_known_message

    signal_age = None
    if snapshot is not None:
        signal_age = compute_signal_age(snapshot.message_ts, snapshot.signal_age_sec, now)
    signal_status = classify_signal(signal_age, has_known_message=has_known_message)
    status = classify_motion(snapshot, signal_status, reader)
    speed_kph = snapshot.speed_kph if snapshot is not None else None

    capability = context.capability
    temperature = resolve_temperature(snapshot, capability.temp_mode, reader)
    reefer = resolve_reefer_display(reader)

    carrier_id, carrier_name = _carrier(context, directory)
    driver_id = fleet_set.driver_id if fleet_set is not None else None
    driver = directory.drivers.get(driver_id) if driver_id is not None else None

    has_active_trip, substatus = resolve_trip(fleet_set.id if fleet_set is not None else None, executions)

    tractor = context.tractor
    trailer = context.trailer
    if tractor is not None:
        tractor_id: str | None = tractor.id
    else:
        tractor_id = fleet_set.tractor_id if fleet_set is not None else None
    if trailer is not None:
        trailer_id: str | None = trailer.id
    else:
        trailer_id = fleet_set.trailer_id if fleet_set is not None else None

    coordinates = snapshot.coordinates if snapshot is not None else None

    return TrackingUnit(
        id=context.unit_id,
        fleet_set_id=fleet_set.id if fleet_set is not None else None,
        source_device_type=context.source_device_type,
        device_id=context.device_id,
        tractor_id=tractor_id,
        trailer_id=trailer_id,
        unit=(tractor.label if tractor is not None else None) or EMPTY_LABEL,
        unit_plate=tractor.plate if tractor is not None else None,
        trailer=(trailer.label if trailer is not None else None) or EMPTY_LABEL,
        trailer_plate=trailer.plate if trailer is not None else None,
        is_hybrid_trailer=_is_hybrid(context),
        driver_id=driver_id,
        driver=(driver.name if driver is not None else None) or EMPTY_LABEL,
        driver_phone=driver.phone_number if driver is not None else None,
        driver_email=driver.email if driver is not None else None,
        driver_license_number=driver.license_number if driver is not None else None,
        carrier_id=carrier_id,
        carrier=carrier_name,
        location=format_location(snapshot),
        coordinates=Coordinates(lat=coordinates[0], lng=coordinates[1]) if coordinates is not None else None,
        status=status,
        speed_kph=display_speed_kph(speed_kph),
        speed=format_speed(speed_kph, has_known_message=has_known_message),
        signal_status=signal_status,
        device_health=classify_device_health(
            reader,
            has_known_message=has_known_message,
            signal_status=signal_status,
        ),
        has_known_message=has_known_message,
        message_ts=snapshot.message_ts if snapshot is not None else None,
        signal_age_sec=signal_age,
        signal_age_captured_at_ms=to_epoch_ms(now) if signal_age is not None else None,
        has_can=capability.has_can,
        temp_mode=capability.temp_mode,
        temperature=temperature.display,
        has_temperature_error=temperature.has_error,
        temperature_channel_1=temperature.channel_1.display if temperature.channel_1 is not None else None,
        temperature_channel_2=temperature.channel_2.display if temperature.channel_2 is not None else None,
        has_temperature_channel_1_error=temperature.channel_1 is not None and temperature.channel_1.has_error,
        has_temperature_channel_2_error=temperature.channel_2 is not None and temperature.channel_2.has_error,
        reefer_mode=reefer.mode,
        reefer_setpoint=reefer.setpoint,
        reefer_details=resolve_reefer_details(reader, has_can=capability.has_can),
        has_active_trip=has_active_trip,
        execution_substatus=substatus,
        sort_timestamp=_sort_timestamp(context),
        telematics=dict(snapshot.telematics) if snapshot is not None else {},
    )


def sort_units(units: Iterable[TrackingUnit]) -> list[TrackingUnit]:
    """Most recently reassigned first, then most recently reporting first.

    Stable: ties keep reconciliation order (tractors before trailers).
    """

    def key(unit: TrackingUnit) -> tuple[datetime, datetime]:
        return unit.sort_timestamp, unit.message_ts or _EPOCH

    return sorted(units, key=key, reverse=True)
