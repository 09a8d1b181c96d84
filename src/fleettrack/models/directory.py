"""Carrier and driver lookup rows."""

from __future__ import annotations

from fleettrack.models._base import FleetBaseModel, OptionalText, RowId


class Carrier(FleetBaseModel):
    id: RowId
    commercial_name: OptionalText = None


class Driver(FleetBaseModel):
    id: RowId
    name: OptionalText = None
    phone_number: OptionalText = None
    email: OptionalText = None
    license_number: OptionalText = None
