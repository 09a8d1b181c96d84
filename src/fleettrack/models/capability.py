"""Static device capability model."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, ClassVar

from pydantic import field_validator

from fleettrack.models._base import FleetBaseModel, Flag, RowId


class TempMode(StrEnum):
    """Temperature probes wired to a device."""

    NONE = "NONE"
    SINGLE = "SINGLE"
    MULTI = "MULTI"


class DeviceCapability(FleetBaseModel):
    """What a telemetry device can report (``connection_device`` table)."""

    _KEY_ALIASES: ClassVar[dict[str, str]] = {"id": "device_id"}

    device_id: RowId
    has_can: Flag = False
    temp_mode: TempMode = TempMode.NONE

    @field_validator("temp_mode", mode="before")
    @classmethod
    def _normalize_temp_mode(cls, value: Any) -> TempMode:
        if isinstance(value, str):
            normalized = value.strip().upper()
            if normalized in (TempMode.SINGLE, TempMode.MULTI):
                return TempMode(normalized)
        return TempMode.NONE

    @classmethod
    def default(cls, device_id: str) -> DeviceCapability:
        """Minimal capability for devices without a capability row."""
        return cls(device_id=device_id, raw={})
