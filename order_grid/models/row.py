from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

"""Row model for the order-entry grid.

A Row is one order line item. Rows are frozen: every edit produces a new Row
(via dataclasses.replace) so history snapshots can share them safely.
A Grid is simply an ordered tuple of Rows.
"""

__all__ = [
    "PaymentType",
    "CarryingBasis",
    "Row",
    "Grid",
    "RowDefaults",
    "RowIdFactory",
]


class PaymentType(Enum):
    """Incoterm payment types offered by the payment selector."""
    FOB = "FOB"
    CIF = "CIF"
    EXW = "EXW"
    DDP = "DDP"
    CPT = "CPT"
    DAP = "DAP"
    FCA = "FCA"
    CFR = "CFR"


class CarryingBasis(Enum):
    """Transport mode for a line item."""
    SEA = "SEA"
    AIR = "AIR"
    ROAD = "ROAD"
    RAIL = "RAIL"
    EXPRESS = "EXPRESS"
    MULTIMODAL = "MULTIMODAL"


@dataclass(frozen=True)
class Row:
    """One order line item.

    total_price is derived (quantity * unit_price) and is only ever written by
    the derived field engine. estimated_price / price_confidence are only
    written by the price-estimation merge. revision is the stamp of the last
    mutation that touched this row (used to fence async estimations).
    """
    id: str
    item_code: str = ""
    description: str = ""
    quantity: int = 1
    unit_price: Decimal = Decimal("0")
    total_price: Decimal = Decimal("0")
    supplier: str = ""
    payment_type: PaymentType = PaymentType.FOB
    carrying_basis: CarryingBasis = CarryingBasis.SEA
    unit_weight: Decimal = Decimal("0")  # kg
    unit_cbm: Decimal = Decimal("0")
    hs_code: str = ""
    image_refs: tuple[str, ...] = field(default_factory=tuple)
    notes: str = ""
    estimated_price: Decimal | None = None
    price_confidence: int | None = None
    revision: int = 0


Grid = tuple[Row, ...]


@dataclass(frozen=True)
class RowDefaults:
    """Per-session defaults applied to newly created rows."""
    payment_type: PaymentType = PaymentType.FOB
    carrying_basis: CarryingBasis = CarryingBasis.SEA


class RowIdFactory:
    """Monotonic source of row ids and mutation revisions.

    Ids are never derived from position and never reused within a session,
    even after the row is deleted or an undo brings an older snapshot back.
    """

    def __init__(self, prefix: str = "row") -> None:
        self.prefix = prefix
        self._ids = itertools.count(1)
        self._revisions = itertools.count(1)

    def next_id(self) -> str:
        return f"{self.prefix}-{next(self._ids)}"

    def next_revision(self) -> int:
        return next(self._revisions)
