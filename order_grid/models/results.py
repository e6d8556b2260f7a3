from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from .row import Grid

"""Result models returned by grid operations.

GridTotals feeds the footer / SUMMARY line, ValidationIssue is the inline
per-row validation report, ImportResult and SaveResult describe the outcome
of the two whole-grid operations.
"""

__all__ = [
    "GridTotals",
    "ValidationIssue",
    "ImportResult",
    "SaveResult",
]


@dataclass(frozen=True)
class GridTotals:
    """Footer aggregates over all rows."""
    item_count: int
    quantity: int
    total_value: Decimal  # sum of total_price
    total_weight: Decimal  # sum of quantity * unit_weight (kg)
    total_cbm: Decimal  # sum of quantity * unit_cbm


@dataclass(frozen=True)
class ValidationIssue:
    """One inline validation problem on a row (blocks save, never raised)."""
    row_id: str
    row_number: int  # 1-based display position
    field_key: str
    message: str

    def __str__(self) -> str:
        return f"Item {self.row_number}: {self.message}"


@dataclass(frozen=True)
class ImportResult:
    """Outcome of parsing CSV text into rows."""
    rows: Grid
    total_lines: int  # data lines seen by the parser
    dropped_rows: int  # rows without item code and description
    skipped_cells: int  # cells that failed typed parsing (default kept)
    warnings: list[str] = field(default_factory=list)

    @property
    def imported_rows(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class SaveResult:
    ok: bool
    saved_rows: int = 0
    issues: list[ValidationIssue] = field(default_factory=list)
    error: str | None = None
