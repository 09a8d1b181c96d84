"""Tractor, trailer and fleet set (assignment) row models."""

from __future__ import annotations

from typing import ClassVar

from fleettrack.models._base import FleetBaseModel, Flag, OptionalRowId, OptionalText, RowId, Timestamp


class Tractor(FleetBaseModel):
    """A powered unit (``vehicles`` table).

    Tractors without a ``device_id`` are never tracked.
    """

    _KEY_ALIASES: ClassVar[dict[str, str]] = {"connection_device_id": "device_id"}

    id: RowId
    org_id: OptionalRowId = None
    carrier_id: OptionalRowId = None
    unit_code: OptionalText = None
    plate: OptionalText = None
    vehicle_type: OptionalText = None
    supports_multi_zone: Flag = False
    device_id: OptionalRowId = None

    @property
    def label(self) -> str | None:
        """Human-readable code: unit code, then plate."""
        return self.unit_code or self.plate

    @property
    def is_tracked(self) -> bool:
        return self.device_id is not None


class Trailer(FleetBaseModel):
    """A towed unit (``trailers`` table), possibly a multi-zone reefer."""

    _KEY_ALIASES: ClassVar[dict[str, str]] = {"connection_device_id": "device_id"}

    id: RowId
    org_id: OptionalRowId = None
    carrier_id: OptionalRowId = None
    code: OptionalText = None
    plate: OptionalText = None
    supports_multi_zone: Flag = False
    device_id: OptionalRowId = None

    @property
    def label(self) -> str | None:
        """Human-readable code: trailer code, then plate."""
        return self.code or self.plate

    @property
    def is_tracked(self) -> bool:
        return self.device_id is not None


class FleetSet(FleetBaseModel):
    """A time-bounded pairing of tractor, trailer and driver under a carrier."""

    _KEY_ALIASES: ClassVar[dict[str, str]] = {"vehicle_id": "tractor_id"}

    id: RowId
    org_id: OptionalRowId = None
    carrier_id: OptionalRowId = None
    driver_id: OptionalRowId = None
    tractor_id: OptionalRowId = None
    trailer_id: OptionalRowId = None
    starts_at: Timestamp = None
    ends_at: Timestamp = None
    is_active: Flag = True
    updated_at: Timestamp = None

    @property
    def is_open(self) -> bool:
        """Active and without an end date."""
        return self.is_active and self.ends_at is None
