from __future__ import annotations

import dataclasses
from decimal import Decimal

from ..models.results import GridTotals
from ..models.row import Grid, Row

"""Derived field engine.

Pure functions: total_price is always quantity * unit_price immediately after
any change to either input. Snapshots restored by undo/redo are already
consistent and are never re-derived.
"""

__all__ = [
    "DERIVED_INPUTS",
    "recompute_row",
    "recompute_grid",
    "compute_totals",
]

# Field keys whose change requires recomputing total_price.
DERIVED_INPUTS = frozenset({"quantity", "unitPrice"})


def recompute_row(row: Row) -> Row:
    total = Decimal(row.quantity) * row.unit_price
    if total == row.total_price:
        return row
    return dataclasses.replace(row, total_price=total)


def recompute_grid(grid: Grid) -> Grid:
    return tuple(recompute_row(r) for r in grid)


def compute_totals(grid: Grid) -> GridTotals:
    quantity = 0
    value = Decimal("0")
    weight = Decimal("0")
    cbm = Decimal("0")
    for r in grid:
        quantity += r.quantity
        value += r.total_price
        weight += r.quantity * r.unit_weight
        cbm += r.quantity * r.unit_cbm
    return GridTotals(
        item_count=len(grid),
        quantity=quantity,
        total_value=value,
        total_weight=weight,
        total_cbm=cbm,
    )
