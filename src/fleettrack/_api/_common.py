"""Shared helpers for the per-table query modules.

This module centralizes the repeated patterns:
- building PostgREST filter expressions
- fetching a table and validating each row into a model

It is internal to fleettrack and may change at any time.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TypeVar

from pydantic import ValidationError

from fleettrack._transport import Transport
from fleettrack.models._base import FleetBaseModel

_logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=FleetBaseModel)


def eq(value: object) -> str:
    return f"eq.{value}"


def in_list(values: Iterable[object]) -> str:
    """``in.(…)`` filter with every value double-quoted."""
    quoted = ",".join('"' + str(v).replace('"', '\\"') + '"' for v in values)
    return f"in.({quoted})"


def validate_rows(model: type[ModelT], rows: Iterable[Mapping[str, object]], *, table: str) -> list[ModelT]:
    """Validate *rows* into *model*, skipping rows that do not fit.

    One malformed row must not hide the rest of the fleet, so failures are
    logged and dropped instead of raised.
    """
    parsed: list[ModelT] = []
    for row in rows:
        try:
            parsed.append(model.model_validate(dict(row)))
        except ValidationError as exc:
            _logger.warning(
                "Skipping invalid %s row id=%s: %s",
                table,
                row.get("id"),
                exc.errors(include_url=False),
            )
    return parsed


async def select(
    transport: Transport,
    table: str,
    model: type[ModelT],
    *,
    columns: Iterable[str],
    filters: Mapping[str, str],
    order: str | None = None,
) -> list[ModelT]:
    """Fetch *table* rows matching *filters* and validate them into *model*."""
    params: dict[str, str] = {"select": ",".join(columns), **filters}
    if order:
        params["order"] = order
    rows = await transport.get_rows(table, params)
    parsed = validate_rows(model, rows, table=table)
    _logger.debug("Fetched %s rows=%d valid=%d", table, len(rows), len(parsed))
    return parsed
