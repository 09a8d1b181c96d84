"""Latest telemetry snapshot per device."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field, field_validator

from fleettrack.models._base import (
    FleetBaseModel,
    OptionalBool,
    OptionalFloat,
    OptionalRowId,
    OptionalText,
    RowId,
    Timestamp,
)


class LiveStateSnapshot(FleetBaseModel):
    """One row of the live-state table, keyed by ``(org_id, device_id)``.

    ``message_ts`` is when the device last reported; ``None`` means the
    device has never reported. ``signal_age_sec`` is computed server-side and
    is only used when ``message_ts`` is missing.
    """

    _KEY_ALIASES: ClassVar[dict[str, str]] = {"connection_device_id": "device_id"}

    org_id: OptionalRowId = None
    device_id: RowId
    message_ts: Timestamp = None
    server_ts: Timestamp = None
    updated_at: Timestamp = None
    lat: OptionalFloat = None
    lng: OptionalFloat = None
    speed_kph: OptionalFloat = None
    heading: OptionalFloat = None
    ignition: OptionalBool = None
    is_online: OptionalBool = None
    signal_age_sec: OptionalFloat = None
    is_moving: OptionalBool = None
    address_text: OptionalText = None
    temperature_c: OptionalFloat = None
    temp_1_c: OptionalFloat = None
    temp_2_c: OptionalFloat = None
    telematics: dict[str, Any] = Field(default_factory=dict)

    @field_validator("telematics", mode="before")
    @classmethod
    def _coerce_telematics(cls, value: Any) -> dict[str, Any]:
        # Non-object bags (arrays, scalars) carry nothing addressable.
        return value if isinstance(value, dict) else {}

    @property
    def has_known_message(self) -> bool:
        return self.message_ts is not None

    @property
    def coordinates(self) -> tuple[float, float] | None:
        if self.lat is None or self.lng is None:
            return None
        return self.lat, self.lng
