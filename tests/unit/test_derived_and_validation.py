from __future__ import annotations

import dataclasses
import random
from decimal import Decimal

from order_grid.grid.derived import compute_totals, recompute_grid, recompute_row
from order_grid.grid.row_store import new_row, set_field, set_fields
from order_grid.grid.validation import validate_grid
from order_grid.models.row import Row, RowIdFactory


def test_recompute_row_fixes_stale_total():
    row = Row(id="row-1", quantity=3, unit_price=Decimal("1.5"), total_price=Decimal("99"))
    assert recompute_row(row).total_price == Decimal("4.5")


def test_recompute_row_returns_same_object_when_consistent():
    row = Row(id="row-1", quantity=2, unit_price=Decimal("3"), total_price=Decimal("6"))
    assert recompute_row(row) is row


def test_recompute_grid_after_random_edits_keeps_invariant():
    """total == quantity * unit price after every edit of either input."""
    rng = random.Random(1234)
    ids = RowIdFactory()
    grid = tuple(new_row(ids) for _ in range(4))
    for rev in range(1, 200):
        target = rng.choice(grid).id
        if rng.random() < 0.5:
            grid = set_field(grid, target, "quantity", rng.randint(0, 500), revision=rev)
        else:
            price = Decimal(rng.randint(0, 100000)) / 100
            grid = set_field(grid, target, "unitPrice", price, revision=rev)
        for r in grid:
            assert r.total_price == r.quantity * r.unit_price
    assert recompute_grid(grid) == grid


def test_compute_totals():
    ids = RowIdFactory()
    a, b = new_row(ids), new_row(ids)
    grid = (a, b)
    grid = set_fields(grid, a.id, {"quantity": 2, "unitPrice": "10", "unitWeight": "1.5", "unitCbm": "0.1"}, revision=1)
    grid = set_fields(grid, b.id, {"quantity": 3, "unitPrice": "4", "unitWeight": "2", "unitCbm": "0.2"}, revision=2)

    t = compute_totals(grid)
    assert t.item_count == 2
    assert t.quantity == 5
    assert t.total_value == Decimal("32")
    assert t.total_weight == Decimal("9.0")
    assert t.total_cbm == Decimal("0.8")


def test_validate_default_row_reports_required_fields():
    grid = (new_row(RowIdFactory()),)
    issues = validate_grid(grid)
    keys = {i.field_key for i in issues}
    assert keys == {"itemCode", "description"}
    assert str(issues[0]).startswith("Item 1: ")


def test_validate_zero_quantity():
    ids = RowIdFactory()
    grid = (new_row(ids, item_code="A", description="B", quantity=0),)
    issues = validate_grid(grid)
    assert [i.field_key for i in issues] == ["quantity"]
    assert issues[0].row_number == 1


def test_validate_valid_row_has_no_issues():
    ids = RowIdFactory()
    grid = (new_row(ids, item_code="A", description="B", quantity=2),)
    assert validate_grid(grid) == []


def test_validate_catches_out_of_range_values_built_directly():
    row = dataclasses.replace(
        Row(id="row-9", item_code="A", description="B"),
        unit_price=Decimal("-1"),
        price_confidence=150,
    )
    keys = [i.field_key for i in validate_grid((new_row(RowIdFactory(), item_code="x", description="y"), row))]
    assert keys == ["unitPrice", "priceConfidence"]
