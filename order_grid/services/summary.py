from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from ..models.notice_record import NoticeRecord
from ..models.results import GridTotals, ValidationIssue

"""SUMMARY line rendering for the CLI.

Format (fixed key order):
SUMMARY rows={n} quantity={q} total_value={v} weight_kg={w} cbm={c} issues={i} notices={k}
"""

__all__ = [
    "format_number",
    "render_summary_line",
]


def format_number(value: Decimal | int) -> str:
    """Integers without a fraction, decimals without trailing zeros or exponent."""
    d = Decimal(value)
    if d == d.to_integral_value():
        return str(int(d))
    return format(d.normalize(), "f")


def render_summary_line(
    totals: GridTotals,
    issues: Sequence[ValidationIssue] = (),
    notices: Sequence[NoticeRecord] = (),
) -> str:
    """Render a SUMMARY line from grid totals.

    Examples:
        >>> from decimal import Decimal
        >>> t = GridTotals(item_count=2, quantity=7, total_value=Decimal("100.50"),
        ...                total_weight=Decimal("3.0"), total_cbm=Decimal("0.25"))
        >>> render_summary_line(t)
        'SUMMARY rows=2 quantity=7 total_value=100.5 weight_kg=3 cbm=0.25 issues=0 notices=0'
    """
    return (
        f"SUMMARY rows={totals.item_count} "
        f"quantity={totals.quantity} "
        f"total_value={format_number(totals.total_value)} "
        f"weight_kg={format_number(totals.total_weight)} "
        f"cbm={format_number(totals.total_cbm)} "
        f"issues={len(issues)} "
        f"notices={len(notices)}"
    )
