"""Signal freshness, motion and device-health classification.

Thresholds are fixed (see :mod:`fleettrack._constants`) and deliberately not
configurable: every consumer must agree on what "online" means.
"""

from __future__ import annotations

import math
from datetime import datetime

from fleettrack._constants import MOVING_SPEED_KPH, NO_SIGNAL_LABEL, ONLINE_MAX_AGE_S, STALE_MAX_AGE_S
from fleettrack.ingestion.telematics import TelematicsField, TelematicsReader
from fleettrack.models.live_state import LiveStateSnapshot
from fleettrack.models.tracking import DeviceHealth, SignalStatus, UnitStatus


def compute_signal_age(
    message_ts: datetime | None,
    reported_age_sec: float | None,
    now: datetime,
) -> int | None:
    """Seconds since the device last reported.

    Derived from ``message_ts`` when known, else the server-reported age,
    else ``None`` ("never seen").
    """
    if message_ts is not None:
        delta_ms = (now - message_ts).total_seconds() * 1000
        return max(0, math.floor(delta_ms / 1000))
    if reported_age_sec is not None:
        return max(0, math.floor(reported_age_sec))
    return None


def classify_signal(signal_age_sec: int | None, *, has_known_message: bool = True) -> SignalStatus:
    if not has_known_message or signal_age_sec is None:
        return SignalStatus.OFFLINE
    if signal_age_sec <= ONLINE_MAX_AGE_S:
        return SignalStatus.ONLINE
    if signal_age_sec <= STALE_MAX_AGE_S:
        return SignalStatus.STALE
    return SignalStatus.OFFLINE


def resolve_ignition(snapshot: LiveStateSnapshot | None, reader: TelematicsReader) -> bool | None:
    """Ignition from telematics, falling back to the structured column."""
    ignition = reader.flag(TelematicsField.IGNITION)
    if ignition is not None:
        return ignition
    return snapshot.ignition if snapshot is not None else None


def classify_motion(
    snapshot: LiveStateSnapshot | None,
    signal_status: SignalStatus,
    reader: TelematicsReader,
) -> UnitStatus:
    """Motion state; first matching rule wins.

    1. never reported → OFFLINE
    2. signal OFFLINE → OFFLINE
    3. signal STALE → STALE
    4. ``is_moving`` or speed above 2 km/h → DRIVING
    5. ignition on → IDLE
    6. otherwise → STOPPED
    """
    if snapshot is None or not snapshot.has_known_message:
        return UnitStatus.OFFLINE
    if signal_status == SignalStatus.OFFLINE:
        return UnitStatus.OFFLINE
    if signal_status == SignalStatus.STALE:
        return UnitStatus.STALE
    if snapshot.is_moving is True or (snapshot.speed_kph or 0.0) > MOVING_SPEED_KPH:
        return UnitStatus.DRIVING
    if resolve_ignition(snapshot, reader) is True:
        return UnitStatus.IDLE
    return UnitStatus.STOPPED


def display_speed_kph(speed_kph: float | None) -> int | None:
    if speed_kph is None:
        return None
    return max(0, math.floor(speed_kph))


def format_speed(speed_kph: float | None, *, has_known_message: bool) -> str:
    """``"N km/h"``, or ``"No signal"`` for a device that never reported.

    A reporting device without a speed reading shows ``0 km/h``.
    """
    if not has_known_message:
        return NO_SIGNAL_LABEL
    return f"{display_speed_kph(speed_kph) or 0} km/h"


def classify_device_health(
    reader: TelematicsReader,
    *,
    has_known_message: bool,
    signal_status: SignalStatus,
) -> DeviceHealth:
    if reader.match(TelematicsField.DEVICE_ERROR) is not None:
        return DeviceHealth.ERROR
    if not has_known_message or signal_status != SignalStatus.ONLINE:
        return DeviceHealth.WARN
    return DeviceHealth.OK
