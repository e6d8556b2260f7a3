from __future__ import annotations

import dataclasses
from decimal import Decimal

import pytest

from order_grid.grid.row_store import new_row
from order_grid.models.row import CarryingBasis, PaymentType, Row, RowDefaults, RowIdFactory


def test_row_defaults():
    """A new row carries the documented defaults."""
    row = new_row(RowIdFactory())

    assert row.item_code == ""
    assert row.description == ""
    assert row.quantity == 1
    assert row.unit_price == Decimal("0")
    assert row.total_price == Decimal("0")
    assert row.payment_type is PaymentType.FOB
    assert row.carrying_basis is CarryingBasis.SEA
    assert row.unit_weight == 0
    assert row.unit_cbm == 0
    assert row.image_refs == ()
    assert row.estimated_price is None
    assert row.price_confidence is None


def test_row_defaults_from_config():
    row = new_row(RowIdFactory(), RowDefaults(PaymentType.DDP, CarryingBasis.RAIL))
    assert row.payment_type is PaymentType.DDP
    assert row.carrying_basis is CarryingBasis.RAIL


def test_new_row_overlay_values_override_defaults():
    row = new_row(
        RowIdFactory(),
        RowDefaults(PaymentType.DDP, CarryingBasis.RAIL),
        payment_type=PaymentType.CIF,
        quantity=4,
        unit_price=Decimal("2.5"),
    )
    assert row.payment_type is PaymentType.CIF
    assert row.carrying_basis is CarryingBasis.RAIL
    assert row.total_price == Decimal("10.0")


def test_row_is_immutable():
    row = Row(id="row-1")
    with pytest.raises(dataclasses.FrozenInstanceError):
        row.quantity = 3  # type: ignore[misc]


def test_row_ids_are_unique_and_never_reused():
    ids = RowIdFactory()
    seen = {ids.next_id() for _ in range(100)}
    assert len(seen) == 100
    assert "row-1" in seen


def test_revisions_are_monotonic():
    ids = RowIdFactory()
    revs = [ids.next_revision() for _ in range(5)]
    assert revs == sorted(revs)
    assert len(set(revs)) == 5
