"""Fail-open capability lookup."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from fleettrack.models.capability import DeviceCapability


def index_capabilities(rows: Iterable[DeviceCapability]) -> dict[str, DeviceCapability]:
    return {row.device_id: row for row in rows}


def resolve_capability(capabilities: Mapping[str, DeviceCapability], device_id: str) -> DeviceCapability:
    """Return the device's capability, or the minimal default (no CAN, no probes).

    A unit with unknown capability still renders; it just shows no
    temperature.
    """
    found = capabilities.get(device_id)
    if found is not None:
        return found
    return DeviceCapability.default(device_id)
