#!/usr/bin/env python3
"""Run a reconciliation pass and print the tracked units.

Usage
-----
Set environment variables and run::

    export FLEETTRACK_BASE_URL="https://example.supabase.co"
    export FLEETTRACK_API_KEY="..."
    python scripts/dump_units.py --org 42

Options::

    --org ID             Organization to reconcile (required)
    --json               Output as machine-readable JSON (camelCase keys)
    --search TEXT        Filter by unit, trailer, driver, location or carrier
    --tab TAB            Restrict to one tab (all, offline, temperature_alert, ...)
    --watch SECONDS      Keep watching for changes and reprint on every pass
    --output FILE        Write output to FILE instead of stdout
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from fleettrack import (  # noqa: E402
    FleetTrackClient,
    FleetTrackError,
    TrackingConfig,
    TrackingSnapshot,
    TrackingTab,
    TrackingUnit,
    format_signal_age_compact,
)

_COLUMNS = (
    ("ID", 24),
    ("SOURCE", 8),
    ("UNIT", 10),
    ("TRAILER", 10),
    ("DRIVER", 18),
    ("STATUS", 8),
    ("SIGNAL", 9),
    ("SPEED", 10),
    ("TEMP", 20),
    ("TRIP", 15),
)


def _cell(value: Any, width: int) -> str:
    text = "-" if value is None else str(value)
    if len(text) > width:
        text = text[: width - 1] + "…"
    return text.ljust(width)


def _row(unit: TrackingUnit, now_ms: int) -> list[Any]:
    age = format_signal_age_compact(unit.current_signal_age(now_ms))
    return [
        unit.id,
        unit.source_device_type,
        unit.unit,
        unit.trailer,
        unit.driver,
        unit.status,
        age,
        unit.speed,
        unit.temperature + (" !" if unit.has_temperature_error else ""),
        unit.execution_substatus,
    ]


def _render_table(snapshot: TrackingSnapshot, units: list[TrackingUnit]) -> str:
    now_ms = int(time.time() * 1000)
    lines = [
        f"org={snapshot.org_id} sequence={snapshot.sequence} completed_at={snapshot.completed_at} units={len(units)}",
        " ".join(_cell(title, width) for title, width in _COLUMNS),
    ]
    for unit in units:
        cells = _row(unit, now_ms)
        lines.append(" ".join(_cell(value, width) for value, (_, width) in zip(cells, _COLUMNS, strict=True)))
    return "\n".join(lines)


def _render_json(client: FleetTrackClient, units: list[TrackingUnit]) -> str:
    snapshot = client.snapshot
    payload = {
        "orgId": snapshot.org_id,
        "sequence": snapshot.sequence,
        "completedAt": snapshot.completed_at,
        "counts": client.counts().model_dump(by_alias=True),
        "units": [unit.model_dump(mode="json", by_alias=True) for unit in units],
    }
    return json.dumps(payload, indent=2, default=str, ensure_ascii=False)


def _emit(text: str, output: str | None) -> None:
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        print(f"Written to {output}", file=sys.stderr)
    else:
        print(text)


async def main() -> int:
    parser = argparse.ArgumentParser(description="Reconcile and print live tracking units for one organization.")
    parser.add_argument("--org", required=True, help="Organization id")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--search", help="Case-insensitive search text")
    parser.add_argument(
        "--tab",
        default=TrackingTab.ALL.value,
        choices=[tab.value for tab in TrackingTab],
        help="Only show units of this tab",
    )
    parser.add_argument("--watch", type=float, metavar="SECONDS", help="Watch for changes for SECONDS")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        config = TrackingConfig.from_env()
    except FleetTrackError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    def render(client: FleetTrackClient) -> None:
        units = client.units(tab=args.tab, search=args.search)
        if args.json_mode:
            _emit(_render_json(client, units), args.output)
        else:
            _emit(_render_table(client.snapshot, units), args.output)

    client = FleetTrackClient(config, on_snapshot=lambda _snapshot: render(client))
    async with client:
        try:
            await client.refresh(args.org, force=True)
        except FleetTrackError as exc:
            print(f"Reconciliation failed: {exc}", file=sys.stderr)
            return 1

        if args.watch:
            try:
                await client.watch(args.org)
            except FleetTrackError as exc:
                print(f"Watch failed: {exc}", file=sys.stderr)
                return 1
            try:
                await asyncio.sleep(args.watch)
            finally:
                await client.unwatch()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
