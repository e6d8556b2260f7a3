from __future__ import annotations

from ..models.results import ValidationIssue
from ..models.row import Grid, Row

"""Inline row validation.

Issues are collected, never raised: they are shown per row and block save.
"""

__all__ = [
    "validate_row",
    "validate_grid",
]


def validate_row(row: Row, position: int) -> list[ValidationIssue]:
    """Validate one row; position is the 0-based grid index."""
    issues: list[ValidationIssue] = []

    def add(key: str, message: str) -> None:
        issues.append(ValidationIssue(row.id, position + 1, key, message))

    if not row.item_code.strip():
        add("itemCode", "Item code is required")
    if not row.description.strip():
        add("description", "Description is required")
    if isinstance(row.quantity, bool) or not isinstance(row.quantity, int) or row.quantity < 1:
        add("quantity", "Quantity must be a positive integer")
    if row.unit_price < 0:
        add("unitPrice", "Unit price must be at least 0")
    if row.unit_weight < 0:
        add("unitWeight", "Unit weight must be at least 0")
    if row.unit_cbm < 0:
        add("unitCbm", "Unit CBM must be at least 0")
    if row.price_confidence is not None and not 0 <= row.price_confidence <= 100:
        add("priceConfidence", "Price confidence must be between 0 and 100")
    return issues


def validate_grid(grid: Grid) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for i, row in enumerate(grid):
        issues.extend(validate_row(row, i))
    return issues
