"""fleettrack - Async live fleet tracking reconciliation engine."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fleettrack")
except PackageNotFoundError:
    __version__ = "0+local"
from fleettrack.client import FleetTrackClient
from fleettrack.config import TrackingConfig
from fleettrack.exceptions import (
    FleetSetConflictError,
    FleetTrackApiError,
    FleetTrackConfigError,
    FleetTrackError,
    FleetTrackTransportError,
    ReconciliationError,
)
from fleettrack.models import (
    Coordinates,
    DeviceCapability,
    DeviceHealth,
    ExecutionSubstatus,
    LiveStateSnapshot,
    SignalStatus,
    SourceDeviceType,
    TempMode,
    TrackingCounts,
    TrackingUnit,
    UnitStatus,
)
from fleettrack.notifier import ChangeEvent, ChangeNotifier, ChangeSource
from fleettrack.pipeline import TrackingPipeline
from fleettrack.source import RestDataSource, TrackingDataSource
from fleettrack.state import TrackingSnapshot, TrackingStore
from fleettrack.tracking.filters import TrackingTab
from fleettrack.tracking.signal_age import extrapolate_signal_age, format_signal_age_compact

__all__ = [
    "__version__",
    "ChangeEvent",
    "ChangeNotifier",
    "ChangeSource",
    "Coordinates",
    "DeviceCapability",
    "DeviceHealth",
    "ExecutionSubstatus",
    "FleetSetConflictError",
    "FleetTrackApiError",
    "FleetTrackClient",
    "FleetTrackConfigError",
    "FleetTrackError",
    "FleetTrackTransportError",
    "LiveStateSnapshot",
    "ReconciliationError",
    "RestDataSource",
    "SignalStatus",
    "SourceDeviceType",
    "TempMode",
    "TrackingConfig",
    "TrackingCounts",
    "TrackingDataSource",
    "TrackingPipeline",
    "TrackingSnapshot",
    "TrackingStore",
    "TrackingTab",
    "TrackingUnit",
    "UnitStatus",
    "extrapolate_signal_age",
    "format_signal_age_compact",
]
