"""Data models for fleet tracking rows and reconciled units."""

from fleettrack.models._base import FleetBaseModel
from fleettrack.models.asset import FleetSet, Tractor, Trailer
from fleettrack.models.capability import DeviceCapability, TempMode
from fleettrack.models.directory import Carrier, Driver
from fleettrack.models.dispatch import ExecutionStatus, ExecutionSubstatus
from fleettrack.models.live_state import LiveStateSnapshot
from fleettrack.models.tracking import (
    Coordinates,
    DeviceHealth,
    ReeferDetails,
    SignalStatus,
    SourceDeviceType,
    TrackingCounts,
    TrackingUnit,
    UnitStatus,
)

__all__ = [
    "Carrier",
    "Coordinates",
    "DeviceCapability",
    "DeviceHealth",
    "Driver",
    "ExecutionStatus",
    "ExecutionSubstatus",
    "FleetBaseModel",
    "FleetSet",
    "LiveStateSnapshot",
    "ReeferDetails",
    "SignalStatus",
    "SourceDeviceType",
    "TempMode",
    "TrackingCounts",
    "TrackingUnit",
    "Tractor",
    "Trailer",
    "UnitStatus",
]
