"""Asset and active-assignment index for one organization."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from fleettrack.exceptions import FleetSetConflictError
from fleettrack.models.asset import FleetSet, Tractor, Trailer

_logger = logging.getLogger(__name__)


def _index_fleet_sets(
    fleet_sets: Iterable[FleetSet],
    kind: str,
    key: str,
    *,
    strict: bool,
) -> dict[str, FleetSet]:
    """Map asset id → open fleet set for one side (tractor or trailer).

    At most one open fleet set should reference an asset. When that does not
    hold, the later row wins and a warning names both fleet sets, unless
    *strict* is set, in which case :class:`FleetSetConflictError` is raised.
    """
    index: dict[str, FleetSet] = {}
    for fleet_set in fleet_sets:
        asset_id = getattr(fleet_set, key)
        if asset_id is None:
            continue
        previous = index.get(asset_id)
        if previous is not None and previous.id != fleet_set.id:
            if strict:
                raise FleetSetConflictError(
                    f"{kind} {asset_id} is referenced by more than one active fleet set",
                    asset_id=asset_id,
                    fleet_set_ids=(previous.id, fleet_set.id),
                )
            _logger.warning(
                "%s %s is referenced by active fleet sets %s and %s; using %s",
                kind,
                asset_id,
                previous.id,
                fleet_set.id,
                fleet_set.id,
            )
        index[asset_id] = fleet_set
    return index


@dataclass(frozen=True)
class AssetIndex:
    """Lookups built from one fetch of tractors, trailers and open fleet sets.

    ``tractors``/``trailers`` hold every asset by id so the counterpart of a
    fleet set can be resolved even when it has no device; only the
    ``tracked_*`` sequences produce units.
    """

    tractors: dict[str, Tractor] = field(default_factory=dict)
    trailers: dict[str, Trailer] = field(default_factory=dict)
    by_tractor: dict[str, FleetSet] = field(default_factory=dict)
    by_trailer: dict[str, FleetSet] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        tractors: Iterable[Tractor],
        trailers: Iterable[Trailer],
        fleet_sets: Iterable[FleetSet],
        *,
        strict: bool = False,
    ) -> AssetIndex:
        open_sets = [fs for fs in fleet_sets if fs.is_open]
        return cls(
            tractors={t.id: t for t in tractors},
            trailers={t.id: t for t in trailers},
            by_tractor=_index_fleet_sets(open_sets, "tractor", "tractor_id", strict=strict),
            by_trailer=_index_fleet_sets(open_sets, "trailer", "trailer_id", strict=strict),
        )

    @property
    def tracked_tractors(self) -> list[Tractor]:
        return [t for t in self.tractors.values() if t.is_tracked]

    @property
    def tracked_trailers(self) -> list[Trailer]:
        return [t for t in self.trailers.values() if t.is_tracked]

    def fleet_set_for_tractor(self, tractor_id: str) -> FleetSet | None:
        return self.by_tractor.get(tractor_id)

    def fleet_set_for_trailer(self, trailer_id: str) -> FleetSet | None:
        return self.by_trailer.get(trailer_id)

    def device_ids(self) -> list[str]:
        """Sorted unique device ids of every tracked asset."""
        ids = {t.device_id for t in self.tracked_tractors if t.device_id}
        ids.update(t.device_id for t in self.tracked_trailers if t.device_id)
        return sorted(ids)

    def carrier_ids(self) -> list[str]:
        """Carrier ids referenced by assets or open fleet sets."""
        ids: set[str] = set()
        ids.update(t.carrier_id for t in self.tractors.values() if t.carrier_id)
        ids.update(t.carrier_id for t in self.trailers.values() if t.carrier_id)
        for fleet_set in (*self.by_tractor.values(), *self.by_trailer.values()):
            if fleet_set.carrier_id:
                ids.add(fleet_set.carrier_id)
        return sorted(ids)

    def driver_ids(self) -> list[str]:
        ids = {
            fs.driver_id
            for fs in (*self.by_tractor.values(), *self.by_trailer.values())
            if fs.driver_id
        }
        return sorted(ids)
