from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from ..clients.api import ExternalServiceError, row_to_payload
from ..models.row import Row

"""PostgreSQL save collaborator.

Alternative to the HTTP save endpoint: the full ordered row collection is
inserted in one transaction with psycopg2.extras.execute_values. There is no
partial-row save: either every row lands or the transaction is rolled back
and the save is reported as failed (the grid's history is never touched).
"""

try:  # pragma: no cover - optional until psycopg2 present at runtime
    import psycopg2
    from psycopg2.extras import execute_values
except Exception:  # pragma: no cover
    psycopg2 = None  # type: ignore
    execute_values = None  # type: ignore

__all__ = [
    "BatchInsertError",
    "InsertResult",
    "ORDER_ITEM_COLUMNS",
    "batch_insert",
    "rows_to_records",
    "PostgresOrderSaver",
]

# (DB column, payload key) in insert order; position keeps grid order.
ORDER_ITEM_COLUMNS: tuple[tuple[str, str], ...] = (
    ("row_id", "id"),
    ("item_code", "itemCode"),
    ("description", "description"),
    ("quantity", "quantity"),
    ("unit_price", "unitPrice"),
    ("total_price", "totalPrice"),
    ("supplier", "supplier"),
    ("payment_type", "paymentType"),
    ("carrying_basis", "carryingBasis"),
    ("unit_weight", "unitWeight"),
    ("unit_cbm", "unitCbm"),
    ("hs_code", "hsCode"),
    ("image_refs", "imageRefs"),
    ("notes", "notes"),
    ("estimated_price", "estimatedPrice"),
    ("price_confidence", "priceConfidence"),
)


class BatchInsertError(Exception):
    pass


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int
    elapsed_seconds: float = 0.0


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    page_size: int = 1000,
) -> InsertResult:
    """Perform batched INSERT using psycopg2.extras.execute_values.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: 対象テーブル名 (サニタイズ済み想定)
    columns: 挿入列
    rows: 行シーケンス
    page_size: execute_values の page_size (性能調整)
    """
    if execute_values is None:
        raise BatchInsertError("psycopg2 not available")

    rows_list = list(rows)
    if not rows_list:
        return InsertResult(inserted_rows=0)

    cols_sql = ",".join(f'"{c}"' for c in columns)
    sql = f"INSERT INTO {table} ({cols_sql}) VALUES %s"
    start = time.time()
    try:
        execute_values(cursor, sql, rows_list, page_size=page_size)
    except Exception as e:  # pragma: no cover - covered when real DB tests added
        raise BatchInsertError(str(e)) from e
    return InsertResult(inserted_rows=len(rows_list), elapsed_seconds=time.time() - start)


def rows_to_records(rows: Sequence[Row], order_ref: str) -> list[tuple[Any, ...]]:
    """Flatten rows to insert tuples: (order_ref, position, *ORDER_ITEM_COLUMNS)."""
    records = []
    for position, row in enumerate(rows):
        payload = row_to_payload(row)
        records.append((order_ref, position) + tuple(payload[key] for _, key in ORDER_ITEM_COLUMNS))
    return records


class PostgresOrderSaver:
    """Save the full grid into an order items table in one transaction."""

    def __init__(self, connection: Any, table: str = "order_items", order_ref: str | None = None) -> None:
        if not table.replace("_", "").isalnum():
            raise ValueError(f"invalid table name: {table!r}")
        self.connection = connection
        self.table = table
        self.order_ref = order_ref or f"order-{int(time.time())}"

    def save(self, rows: Sequence[Row]) -> int:
        columns = ["order_ref", "position"] + [c for c, _ in ORDER_ITEM_COLUMNS]
        records = rows_to_records(rows, self.order_ref)
        cur = self.connection.cursor()
        try:
            result = batch_insert(cur, self.table, columns, records)
            self.connection.commit()
        except BatchInsertError as e:
            self.connection.rollback()
            raise ExternalServiceError(f"database save failed: {e}") from e
        finally:
            cur.close()
        return result.inserted_rows
