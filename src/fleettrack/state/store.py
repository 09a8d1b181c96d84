"""Sequenced in-memory snapshot store.

The store is the only shared mutable state of a client. It never mutates a
snapshot: each accepted pass swaps in a new immutable one, so readers always
see an internally consistent unit list.

Overlapping passes are ordered by the sequence number issued when each pass
*starts*; a pass that finishes after a newer one has already published is
discarded.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict

from fleettrack.models.tracking import TrackingUnit

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TrackingSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    org_id: str | None = None
    units: tuple[TrackingUnit, ...] = ()
    sequence: int = 0
    loaded: bool = False
    completed_at: datetime | None = None


class TrackingStore:
    """Holds the latest snapshot for the organization currently tracked."""

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._counter = itertools.count(1)
        self._snapshot = TrackingSnapshot()

    def next_sequence(self) -> int:
        """Issue the sequence number for a pass that is about to start."""
        return next(self._counter)

    def snapshot(self) -> TrackingSnapshot:
        return self._snapshot

    def is_loaded(self, org_id: str) -> bool:
        """Whether a completed pass for *org_id* is currently visible."""
        return self._snapshot.loaded and self._snapshot.org_id == org_id

    def publish(self, org_id: str, units: Iterable[TrackingUnit], sequence: int) -> bool:
        """Swap in the result of pass *sequence*.

        Returns ``False`` (and keeps the current snapshot) when a pass with a
        higher sequence has already published. Re-publishing the same
        sequence replaces it.
        """
        current = self._snapshot
        if sequence < current.sequence:
            _logger.debug(
                "Discarding superseded pass org=%s sequence=%d (current=%d)",
                org_id,
                sequence,
                current.sequence,
            )
            return False
        self._snapshot = TrackingSnapshot(
            org_id=org_id,
            units=tuple(units),
            sequence=sequence,
            loaded=True,
            completed_at=self._clock(),
        )
        _logger.debug("Published org=%s sequence=%d units=%d", org_id, sequence, len(self._snapshot.units))
        return True

    def mark_failed(self, org_id: str, sequence: int) -> None:
        """Record that pass *sequence* failed.

        The previous units stay visible but the org is no longer "loaded", so
        the next non-forced refresh retries. A failure older than the visible
        snapshot changes nothing.
        """
        current = self._snapshot
        if sequence < current.sequence or current.org_id not in (None, org_id):
            return
        self._snapshot = current.model_copy(update={"loaded": False})

    def clear(self) -> None:
        self._snapshot = TrackingSnapshot()
