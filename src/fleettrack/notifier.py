"""In-process "something changed" signal channel.

Events carry no data beyond which table changed for which organization; a
subscriber reacts by re-running a full reconciliation pass.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from fleettrack._constants import DISPATCH_ORDERS_TABLE, FLEET_SETS_TABLE, LIVE_STATE_TABLE

_logger = logging.getLogger(__name__)


class ChangeSource(StrEnum):
    """Tables whose changes invalidate a snapshot."""

    LIVE_STATE = LIVE_STATE_TABLE
    FLEET_SETS = FLEET_SETS_TABLE
    DISPATCH_ORDERS = DISPATCH_ORDERS_TABLE


@dataclass(frozen=True)
class ChangeEvent:
    org_id: str
    source: ChangeSource


ChangeCallback = Callable[[ChangeEvent], None]


class ChangeNotifier:
    """Fan out change events to per-organization subscribers."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[ChangeCallback]] = {}

    def subscribe(self, org_id: str, callback: ChangeCallback) -> Callable[[], None]:
        """Register *callback* for *org_id*; returns an idempotent unsubscribe."""
        self._subscribers.setdefault(org_id, []).append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(org_id)
            if callbacks is None or callback not in callbacks:
                return
            callbacks.remove(callback)
            if not callbacks:
                del self._subscribers[org_id]

        return unsubscribe

    def has_subscribers(self, org_id: str) -> bool:
        return bool(self._subscribers.get(org_id))

    def emit(self, event: ChangeEvent) -> None:
        callbacks = list(self._subscribers.get(event.org_id, ()))
        _logger.debug("Change event org=%s source=%s subscribers=%d", event.org_id, event.source, len(callbacks))
        for callback in callbacks:
            try:
                callback(event)
            except Exception:
                _logger.warning("Change callback failed org=%s source=%s", event.org_id, event.source, exc_info=True)
