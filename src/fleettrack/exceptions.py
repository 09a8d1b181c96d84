"""Custom exception hierarchy for fleettrack."""

from __future__ import annotations


class FleetTrackError(Exception):
    """Base exception for all fleettrack errors."""


class FleetTrackConfigError(FleetTrackError):
    """Invalid or missing configuration."""


class FleetTrackTransportError(FleetTrackError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class FleetTrackApiError(FleetTrackError):
    """The data API returned a structured error body."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class FleetSetConflictError(FleetTrackError):
    """More than one active fleet set references the same tractor or trailer.

    Only raised when ``TrackingConfig.strict_fleet_sets`` is enabled.
    """

    def __init__(self, message: str, *, asset_id: str, fleet_set_ids: tuple[str, ...]) -> None:
        self.asset_id = asset_id
        self.fleet_set_ids = fleet_set_ids
        super().__init__(message)


class ReconciliationError(FleetTrackError):
    """A reconciliation pass failed; the previous snapshot stays visible."""

    def __init__(self, message: str, *, org_id: str, sequence: int) -> None:
        self.org_id = org_id
        self.sequence = sequence
        super().__init__(message)
