"""Dispatch execution status model."""

from __future__ import annotations

from enum import StrEnum

from fleettrack.models._base import FleetBaseModel, RowId, Timestamp


class ExecutionSubstatus(StrEnum):
    """Phase of an in-progress delivery."""

    IN_TRANSIT = "IN_TRANSIT"
    AT_DESTINATION = "AT_DESTINATION"
    DELIVERED = "DELIVERED"


class ExecutionStatus(FleetBaseModel):
    """Substatus of an open dispatch order attached to a fleet set."""

    fleet_set_id: RowId
    substatus: ExecutionSubstatus
    updated_at: Timestamp = None
