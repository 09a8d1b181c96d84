"""Snapshot cache for reconciled tracking units."""

from fleettrack.state.store import TrackingSnapshot, TrackingStore

__all__ = ["TrackingSnapshot", "TrackingStore"]
