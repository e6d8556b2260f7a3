from __future__ import annotations

from order_grid.csvio.codec import export_csv
from order_grid.grid.row_store import new_row
from order_grid.models.columns import COLUMNS

"""CSV ヘッダ契約テスト
export のヘッダ行は列ラベルを固定順で並べたもの。import はこのラベルで列を引く。
"""

EXPECTED_HEADER = [
    "Item Code",
    "Description",
    "Quantity",
    "Unit Price",
    "Total Price",
    "Supplier",
    "Payment",
    "Carrying Basis",
    "Unit Weight (kg)",
    "Unit CBM",
    "HS Code",
    "Image",
    "Notes",
]


def test_column_labels_order():
    assert [c.label for c in COLUMNS] == EXPECTED_HEADER


def test_export_header_line(ids):
    header = export_csv((new_row(ids),)).splitlines()[0]
    assert header.split(",") == EXPECTED_HEADER


def test_field_keys_are_unique():
    keys = [c.key for c in COLUMNS]
    assert len(keys) == len(set(keys))
