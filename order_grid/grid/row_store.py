from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from ..models.columns import COLUMN_BY_KEY, FieldValueError, column_for
from ..models.row import Grid, Row, RowDefaults, RowIdFactory
from ..models.selection import Selection
from .derived import DERIVED_INPUTS, recompute_row

"""Row store operations.

Every function here is pure: it takes the current Grid (a tuple of frozen
Rows) and returns a new candidate Grid. Nothing is committed here; the
dispatcher hands the result to the history manager.

Values are validated through the column descriptors before any row is
replaced, so a rejected edit never leaves a partially-updated row behind.
"""

__all__ = [
    "GridError",
    "RowNotFoundError",
    "LastRowError",
    "FieldValueError",
    "new_row",
    "find_row",
    "row_index",
    "set_field",
    "set_fields",
    "add_row",
    "delete_row",
    "bulk_update",
    "sort_rows",
]

logger = logging.getLogger(__name__)


class GridError(Exception):
    """Base exception for structural grid errors."""


class RowNotFoundError(GridError):
    pass


class LastRowError(GridError):
    """Raised when deleting the only remaining row."""


def new_row(ids: RowIdFactory, defaults: RowDefaults | None = None, **values: Any) -> Row:
    """Create a Row with default field values and a fresh id."""
    d = defaults or RowDefaults()
    fields: dict[str, Any] = {
        "payment_type": d.payment_type,
        "carrying_basis": d.carrying_basis,
    }
    fields.update(values)
    return recompute_row(Row(id=ids.next_id(), **fields))


def row_index(grid: Grid, row_id: str) -> int:
    for i, r in enumerate(grid):
        if r.id == row_id:
            return i
    raise RowNotFoundError(f"row not found: {row_id}")


def find_row(grid: Grid, row_id: str) -> Row | None:
    for r in grid:
        if r.id == row_id:
            return r
    return None


def _coerce_fields(
    values: Mapping[str, Any], *, internal: bool, strict_numeric_text: bool
) -> dict[str, Any]:
    """Validate all values first (all-or-nothing) and map keys to attributes."""
    changes: dict[str, Any] = {}
    for key, value in values.items():
        col = column_for(key)
        if not col.writable and not internal:
            raise FieldValueError(f"{key}: field is not writable")
        if internal and value is None and key in ("estimatedPrice", "priceConfidence"):
            changes[col.attribute] = None
            continue
        changes[col.attribute] = col.coerce(value, strict_numeric_text=strict_numeric_text)
    return changes


def set_fields(
    grid: Grid,
    row_id: str,
    values: Mapping[str, Any],
    *,
    revision: int,
    internal: bool = False,
    strict_numeric_text: bool = False,
) -> Grid:
    """Replace one row with a copy carrying all new values.

    total_price is recomputed as part of the same replacement when quantity or
    unit price changes. internal=True additionally allows the estimation-only
    fields (estimatedPrice / priceConfidence).
    """
    idx = row_index(grid, row_id)
    changes = _coerce_fields(values, internal=internal, strict_numeric_text=strict_numeric_text)
    row = dataclasses.replace(grid[idx], revision=revision, **changes)
    if DERIVED_INPUTS.intersection(values):
        row = recompute_row(row)
    return grid[:idx] + (row,) + grid[idx + 1:]


def set_field(
    grid: Grid,
    row_id: str,
    field_key: str,
    value: Any,
    *,
    revision: int,
    strict_numeric_text: bool = False,
) -> Grid:
    return set_fields(
        grid, row_id, {field_key: value}, revision=revision, strict_numeric_text=strict_numeric_text
    )


def add_row(grid: Grid, row: Row, after_id: str | None = None) -> Grid:
    """Insert row immediately after after_id, or at the end."""
    if after_id is None:
        return grid + (row,)
    idx = row_index(grid, after_id)
    return grid[: idx + 1] + (row,) + grid[idx + 1:]


def delete_row(grid: Grid, row_id: str) -> Grid:
    idx = row_index(grid, row_id)
    if len(grid) <= 1:
        raise LastRowError("Cannot delete the last row")
    return grid[:idx] + grid[idx + 1:]


def bulk_update(
    grid: Grid,
    selection: Selection,
    field_key: str,
    value: Any,
    *,
    revision: int,
    strict_numeric_text: bool = False,
) -> Grid:
    """Apply one field value to every distinct row present in selection.

    Rows that no longer exist are skipped. The value is validated once up
    front so a bad value fails before any row changes.
    """
    col = column_for(field_key)
    if not col.writable:
        raise FieldValueError(f"{field_key}: field is not writable")
    col.coerce(value, strict_numeric_text=strict_numeric_text)
    out = grid
    for rid in selection.row_ids():
        if find_row(out, rid) is None:
            logger.debug("bulk_update: skip missing row %s", rid)
            continue
        out = set_field(
            out, rid, field_key, value, revision=revision, strict_numeric_text=strict_numeric_text
        )
    return out


def sort_rows(grid: Grid, field_key: str, descending: bool = False) -> Grid:
    """Stable sort by a numeric or currency column."""
    col = COLUMN_BY_KEY.get(field_key)
    if col is None or not (col.is_numeric or field_key == "totalPrice"):
        raise FieldValueError(f"{field_key}: only numeric columns are sortable")

    def key(r: Row) -> Decimal:
        v = getattr(r, col.attribute)
        return Decimal(v) if v is not None else Decimal("0")

    return tuple(sorted(grid, key=key, reverse=descending))
