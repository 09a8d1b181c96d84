"""Temperature resolution for single and dual probe devices.

Out-of-range readings and silent probes are reported as per-channel error
flags, never raised: a failed probe is a routine condition on a reefer fleet.
"""

from __future__ import annotations

from dataclasses import dataclass

from fleettrack._constants import EMPTY_LABEL, SENSOR_ERROR_LABEL, SENSOR_OK_CODES, TEMP_MAX_C, TEMP_MIN_C
from fleettrack.ingestion.normalize import normalize_text, safe_float
from fleettrack.ingestion.telematics import TelematicsField, TelematicsReader
from fleettrack.models.capability import TempMode
from fleettrack.models.live_state import LiveStateSnapshot
from fleettrack.models.tracking import ReeferDetails


@dataclass(frozen=True)
class ChannelReading:
    display: str
    has_error: bool
    value_c: float | None = None


@dataclass(frozen=True)
class TemperatureReading:
    """Display-ready temperature for one unit.

    ``channel_1``/``channel_2`` are populated for probe-equipped devices only
    (``channel_2`` for ``MULTI`` only).
    """

    display: str
    has_error: bool
    channel_1: ChannelReading | None = None
    channel_2: ChannelReading | None = None


_NOT_APPLICABLE = TemperatureReading(display=EMPTY_LABEL, has_error=False)


@dataclass(frozen=True)
class _ChannelSource:
    columns: tuple[str, ...]
    value_field: TelematicsField
    error_field: TelematicsField


_CHANNEL_1 = _ChannelSource(
    columns=("temp_1_c", "temperature_c"),
    value_field=TelematicsField.TEMP_1,
    error_field=TelematicsField.TEMP_1_ERROR,
)
_CHANNEL_2 = _ChannelSource(
    columns=("temp_2_c",),
    value_field=TelematicsField.TEMP_2,
    error_field=TelematicsField.TEMP_2_ERROR,
)


def is_plausible(value_c: float) -> bool:
    return TEMP_MIN_C <= value_c <= TEMP_MAX_C


def format_celsius(value_c: float) -> str:
    return f"{value_c:.1f}°C"


def is_error_code(code: object) -> bool:
    """Whether a sensor error code signals a fault (anything but an OK code)."""
    text = normalize_text(code)
    if text is None:
        return False
    return text.lower() not in SENSOR_OK_CODES


def resolve_channel(value: float | None, error_code: object = None) -> ChannelReading:
    """Resolve one probe from its value and (optional) sensor error code.

    * value inside −60…130 °C → formatted value, no error
    * value outside the range → ``"--"``, error
    * no value, fault code → ``"--"``, error
    * no value, no code at all → ``"--"``, error (silent probe)
    * no value, explicit OK code → ``"--"``, no error
    """
    if value is not None:
        if not is_plausible(value):
            return ChannelReading(display=SENSOR_ERROR_LABEL, has_error=True, value_c=value)
        return ChannelReading(display=format_celsius(value), has_error=False, value_c=value)
    if normalize_text(error_code) is None:
        return ChannelReading(display=SENSOR_ERROR_LABEL, has_error=True)
    return ChannelReading(display=SENSOR_ERROR_LABEL, has_error=is_error_code(error_code))


def _read_channel(snapshot: LiveStateSnapshot, reader: TelematicsReader, source: _ChannelSource) -> ChannelReading:
    value: float | None = None
    for column in source.columns:
        value = safe_float(getattr(snapshot, column))
        if value is not None:
            break
    if value is None:
        value = reader.number(source.value_field)
    return resolve_channel(value, reader.raw(source.error_field))


def resolve_temperature(
    snapshot: LiveStateSnapshot | None,
    temp_mode: TempMode,
    reader: TelematicsReader | None = None,
) -> TemperatureReading:
    """Resolve display temperature for a unit.

    Devices without probes and devices that never reported show ``"-"``
    without an error, regardless of any cached reading.
    """
    if temp_mode == TempMode.NONE:
        return _NOT_APPLICABLE
    if snapshot is None or not snapshot.has_known_message:
        return _NOT_APPLICABLE
    if reader is None:
        reader = TelematicsReader(snapshot.telematics)

    channel_1 = _read_channel(snapshot, reader, _CHANNEL_1)
    if temp_mode == TempMode.SINGLE:
        return TemperatureReading(display=channel_1.display, has_error=channel_1.has_error, channel_1=channel_1)

    channel_2 = _read_channel(snapshot, reader, _CHANNEL_2)
    return TemperatureReading(
        display=f"{channel_1.display} | {channel_2.display}",
        has_error=channel_1.has_error or channel_2.has_error,
        channel_1=channel_1,
        channel_2=channel_2,
    )


@dataclass(frozen=True)
class ReeferDisplay:
    mode: str
    setpoint: str


def resolve_reefer_display(reader: TelematicsReader) -> ReeferDisplay:
    """Reefer mode and setpoint strings, ``"-"`` when not reported."""
    mode = reader.text(TelematicsField.REEFER_MODE) or EMPTY_LABEL
    setpoint_value = reader.number(TelematicsField.REEFER_SETPOINT)
    if setpoint_value is not None:
        setpoint = f"{setpoint_value:g}°C"
    else:
        setpoint = reader.text(TelematicsField.REEFER_SETPOINT) or EMPTY_LABEL
    return ReeferDisplay(mode=mode, setpoint=setpoint)


def resolve_reefer_details(reader: TelematicsReader, *, has_can: bool) -> ReeferDetails | None:
    if not has_can:
        return None
    return ReeferDetails(
        fuel_level_pct=reader.number(TelematicsField.FUEL_LEVEL),
        battery_voltage=reader.number(TelematicsField.BATTERY_VOLTAGE),
        return_air_c=reader.number(TelematicsField.RETURN_AIR),
        discharge_air_c=reader.number(TelematicsField.DISCHARGE_AIR),
        operation_status=reader.text(TelematicsField.REEFER_STATUS),
    )
