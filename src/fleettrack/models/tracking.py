"""The reconciled, UI-ready tracking unit.

A :class:`TrackingUnit` describes one telemetry-emitting device (a tractor's
or a trailer's) together with its resolved operational context. A fully
paired fleet set therefore yields two units, one per device, sharing the same
carrier and driver but carrying their own signal and temperature data.

Units serialise with camelCase keys (``model_dump(by_alias=True)``) for UI
consumers.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fleettrack.models.capability import TempMode
from fleettrack.models.dispatch import ExecutionSubstatus
from fleettrack.tracking.signal_age import extrapolate_signal_age


class SourceDeviceType(StrEnum):
    VEHICLE = "VEHICLE"
    TRAILER = "TRAILER"


class SignalStatus(StrEnum):
    """Connectivity freshness derived from signal age."""

    ONLINE = "ONLINE"
    STALE = "STALE"
    OFFLINE = "OFFLINE"


class UnitStatus(StrEnum):
    """Motion state; connectivity problems take precedence over motion."""

    DRIVING = "DRIVING"
    IDLE = "IDLE"
    STOPPED = "STOPPED"
    STALE = "STALE"
    OFFLINE = "OFFLINE"


class DeviceHealth(StrEnum):
    OK = "OK"
    WARN = "WARN"
    ERROR = "ERROR"


class _UnitModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class Coordinates(_UnitModel):
    lat: float
    lng: float


class ReeferDetails(_UnitModel):
    """Extended reefer readings, reported by CAN-equipped devices only."""

    fuel_level_pct: float | None = None
    battery_voltage: float | None = None
    return_air_c: float | None = None
    discharge_air_c: float | None = None
    operation_status: str | None = None


class TrackingUnit(_UnitModel):
    """One reconciled device record.

    ``id`` is the fleet set id when the device's asset is assigned, otherwise
    the synthetic ``"{source_device_type}:{device_id}"``. Because both devices
    of a paired fleet set share the fleet set id, ``(id, source_device_type)``
    is the unique key within a snapshot.
    """

    id: str
    fleet_set_id: str | None = None
    source_device_type: SourceDeviceType
    device_id: str

    # --- Assets & context ---
    tractor_id: str | None = None
    trailer_id: str | None = None
    unit: str = "-"
    """Tractor label (unit code or plate)."""
    unit_plate: str | None = None
    trailer: str = "-"
    """Trailer label (code or plate)."""
    trailer_plate: str | None = None
    is_hybrid_trailer: bool = False
    driver_id: str | None = None
    driver: str = "-"
    driver_phone: str | None = None
    driver_email: str | None = None
    driver_license_number: str | None = None
    carrier_id: str | None = None
    carrier: str = "-"

    # --- Position & motion ---
    location: str = "-"
    coordinates: Coordinates | None = None
    status: UnitStatus = UnitStatus.OFFLINE
    speed_kph: int | None = None
    speed: str = "-"
    """Display speed; ``"No signal"`` when the device never reported."""

    # --- Connectivity ---
    signal_status: SignalStatus = SignalStatus.OFFLINE
    device_health: DeviceHealth = DeviceHealth.WARN
    has_known_message: bool = False
    message_ts: datetime | None = None
    signal_age_sec: int | None = None
    signal_age_captured_at_ms: int | None = None

    # --- Capability & temperature ---
    has_can: bool = False
    temp_mode: TempMode = TempMode.NONE
    temperature: str = "-"
    has_temperature_error: bool = False
    temperature_channel_1: str | None = None
    temperature_channel_2: str | None = None
    has_temperature_channel_1_error: bool = False
    has_temperature_channel_2_error: bool = False
    reefer_mode: str = "-"
    reefer_setpoint: str = "-"
    reefer_details: ReeferDetails | None = None
    """Detail-view readings; ``None`` without CAN."""

    # --- Dispatch ---
    has_active_trip: bool = False
    execution_substatus: ExecutionSubstatus | None = None

    sort_timestamp: datetime
    """Fleet set ``updated_at``, else live-state ``updated_at``, else epoch."""
    telematics: dict[str, Any] = Field(default_factory=dict)
    """Raw telematics bag, passed through for detail views."""

    @property
    def synthetic_id(self) -> str:
        return f"{self.source_device_type}:{self.device_id}"

    def current_signal_age(self, now_ms: int) -> int | None:
        """Signal age extrapolated to *now_ms* without refetching."""
        return extrapolate_signal_age(self.signal_age_sec, self.signal_age_captured_at_ms, now_ms)


class TrackingCounts(_UnitModel):
    """Summary counters for tab badges.

    ``total`` counts devices, not physical trucks: a fully paired fleet set
    contributes two units.
    """

    total: int = 0
    active_trips: int = 0
    in_transit: int = 0
    at_destination: int = 0
    delivered: int = 0
    temperature_alerts: int = 0
    offline: int = 0
