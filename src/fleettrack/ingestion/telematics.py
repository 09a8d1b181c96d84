"""Typed access to the open telematics key/value bag.

Each device vendor reports the same quantity under different keys. The
:data:`TELEMATICS_ALIASES` table maps a logical :class:`TelematicsField` to the
ordered list of source keys that may carry it; supporting a new vendor means
extending the table, not the code.

Lookup contract: keys are tried in table order and the first key holding a
meaningful value (not ``None``, blank, ``"--"`` or NaN) wins. A key is first
looked up literally (``"engine.ignition.status"`` as a flat key) and then as a
dotted path into nested objects.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum
from typing import Any

from fleettrack.ingestion.normalize import is_meaningful, normalize_text, parse_truthy, safe_float


class TelematicsField(StrEnum):
    IGNITION = "ignition"
    TEMP_1 = "temp_1"
    TEMP_2 = "temp_2"
    TEMP_1_ERROR = "temp_1_error"
    TEMP_2_ERROR = "temp_2_error"
    REEFER_MODE = "reefer_mode"
    REEFER_SETPOINT = "reefer_setpoint"
    REEFER_STATUS = "reefer_status"
    RETURN_AIR = "return_air"
    DISCHARGE_AIR = "discharge_air"
    FUEL_LEVEL = "fuel_level"
    BATTERY_VOLTAGE = "battery_voltage"
    DEVICE_ERROR = "device_error"


TELEMATICS_ALIASES: dict[TelematicsField, tuple[str, ...]] = {
    TelematicsField.IGNITION: (
        "engine.ignition.status",
        "ignition",
        "can.engine.ignition.status",
    ),
    TelematicsField.TEMP_1: (
        "temp_1_c",
        "temp1",
        "temperature_1",
        "temp_ch1",
        "reefer.temp_1",
        "temperature.channel_1",
    ),
    TelematicsField.TEMP_2: (
        "temp_2_c",
        "temp2",
        "temperature_2",
        "temp_ch2",
        "reefer.temp_2",
        "temperature.channel_2",
    ),
    TelematicsField.TEMP_1_ERROR: (
        "temp_1_error",
        "temp1_error",
        "temp_1_error_code",
        "sensor_1_error_code",
        "temp_sensor_error",
        "temperature.channel_1.error",
    ),
    TelematicsField.TEMP_2_ERROR: (
        "temp_2_error",
        "temp2_error",
        "temp_2_error_code",
        "sensor_2_error_code",
        "temperature.channel_2.error",
    ),
    TelematicsField.REEFER_MODE: (
        "reefer_mode",
        "reefer.mode",
        "operation_mode",
        "mode",
    ),
    TelematicsField.REEFER_SETPOINT: (
        "setpoint",
        "reefer_setpoint",
        "set_point",
        "reefer.setpoint",
        "temperature.setpoint",
    ),
    TelematicsField.REEFER_STATUS: (
        "reefer_status",
        "operation_status",
        "reefer_state",
        "state",
    ),
    TelematicsField.RETURN_AIR: (
        "return_air",
        "return_air_temp",
        "temperature.return_air",
        "reefer.return_air",
    ),
    TelematicsField.DISCHARGE_AIR: (
        "discharge_air",
        "discharge_air_temp",
        "temperature.discharge_air",
        "reefer.discharge_air",
    ),
    TelematicsField.FUEL_LEVEL: (
        "fuel_level",
        "fuel.level",
        "reefer_fuel_level",
        "can_fuel_pct",
        "can.fuel.level",
    ),
    TelematicsField.BATTERY_VOLTAGE: (
        "battery",
        "battery_voltage",
        "voltage.battery",
        "can_battery_voltage",
        "can.battery.voltage",
    ),
    TelematicsField.DEVICE_ERROR: (
        "error_code",
        "reefer_error_code",
        "alarm_code",
    ),
}


def _lookup(bag: Mapping[str, Any], key: str) -> Any:
    if key in bag:
        return bag[key]
    if "." not in key:
        return None
    node: Any = bag
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return None
        node = node[part]
    return node


def read_value(bag: Mapping[str, Any] | None, keys: Sequence[str]) -> tuple[str, Any] | None:
    """Return ``(key, value)`` for the first key in *keys* with a meaningful value."""
    if not bag:
        return None
    for key in keys:
        value = _lookup(bag, key)
        if is_meaningful(value):
            return key, value
    return None


class TelematicsReader:
    """Resolve logical fields from one device's telematics bag."""

    def __init__(
        self,
        bag: Mapping[str, Any] | None,
        aliases: Mapping[TelematicsField, Sequence[str]] = TELEMATICS_ALIASES,
    ) -> None:
        self._bag: Mapping[str, Any] = bag if isinstance(bag, Mapping) else {}
        self._aliases = aliases

    def match(self, field: TelematicsField) -> tuple[str, Any] | None:
        return read_value(self._bag, self._aliases.get(field, ()))

    def raw(self, field: TelematicsField) -> Any:
        found = self.match(field)
        return found[1] if found is not None else None

    def number(self, field: TelematicsField) -> float | None:
        return safe_float(self.raw(field))

    def text(self, field: TelematicsField) -> str | None:
        return normalize_text(self.raw(field))

    def flag(self, field: TelematicsField) -> bool | None:
        return parse_truthy(self.raw(field))
