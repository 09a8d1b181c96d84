"""Base model for rows read from the data API.

Every row model inherits from :class:`FleetBaseModel` which provides:

* A ``model_validator(mode="before")`` that strips sentinel values
  (``""``, ``"--"``, NaN) so the field default is used, and renames
  legacy column names listed in ``_KEY_ALIASES``.
* A ``raw`` dict that captures the original row.

Identifier columns are a mix of UUID strings and integer keys depending on
the table; :data:`RowId` coerces both to ``str`` so lookups never depend on
the column type.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from fleettrack.ingestion.normalize import normalize_text, parse_timestamp, parse_truthy, safe_float

_SENTINELS = frozenset({"", "--", "NaN", "nan"})


def _coerce_id(value: Any) -> Any:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return normalize_text(value)


def _coerce_optional_float(value: Any) -> float | None:
    return safe_float(value)


def _coerce_optional_bool(value: Any) -> bool | None:
    return parse_truthy(value)


def _coerce_bool(value: Any) -> bool:
    return bool(parse_truthy(value))


RowId = Annotated[str, BeforeValidator(_coerce_id)]
"""Identifier column coerced to a trimmed string."""

OptionalRowId = Annotated[str | None, BeforeValidator(_coerce_id)]

Timestamp = Annotated[datetime | None, BeforeValidator(parse_timestamp)]
"""ISO-8601 or epoch (seconds or ms) coerced to a UTC datetime."""

OptionalFloat = Annotated[float | None, BeforeValidator(_coerce_optional_float)]

OptionalBool = Annotated[bool | None, BeforeValidator(_coerce_optional_bool)]

Flag = Annotated[bool, BeforeValidator(_coerce_bool)]
"""Boolean column where ``null`` means ``False``."""

OptionalText = Annotated[str | None, BeforeValidator(normalize_text)]


class FleetBaseModel(BaseModel):
    """Base for row models.

    Handles:
    * sentinel values (``""``, ``"--"``, NaN) → dropped so the field
      default is used instead
    * legacy column names via ``_KEY_ALIASES``
    * stashing the original row in ``raw``
    """

    _KEY_ALIASES: ClassVar[dict[str, str]] = {}

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict, repr=False)
    """Original row dict."""

    @staticmethod
    def _clean_dict(values: dict[str, Any], aliases: dict[str, str] | None = None) -> dict[str, Any]:
        working = dict(values)
        if aliases:
            for old_key, new_key in aliases.items():
                if old_key in working and new_key not in working:
                    working[new_key] = working.pop(old_key)

        cleaned: dict[str, Any] = {}
        for key, value in working.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_row_values(cls, values: Any) -> Any:
        """Strip sentinel values, apply key aliases, and stash the raw row."""
        if not isinstance(values, dict):
            return values
        original = dict(values)

        aliases: dict[str, str] = getattr(cls, "_KEY_ALIASES", {})
        cleaned = FleetBaseModel._clean_dict(original, aliases)

        # Keep an explicitly passed raw (kwargs construction) untouched.
        if "raw" not in values:
            cleaned["raw"] = original
        return cleaned
