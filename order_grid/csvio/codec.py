from __future__ import annotations

import io
import logging
from pathlib import Path

import pandas as pd

from ..grid.row_store import new_row
from ..models.columns import (
    COLUMN_BY_LABEL,
    COLUMNS,
    ColumnDescriptor,
    FieldValueError,
    ValueType,
    get_value,
)
from ..models.results import ImportResult
from ..models.row import Grid, RowDefaults, RowIdFactory

"""CSV codec for the order grid.

Export: header line of column labels, one line per row with each column's raw
value. Import: header labels are mapped back to field keys (unknown labels
ignored); every data line becomes a default row overlaid with the parsed
cells. Best-effort by design: malformed lines and unparsable cells are
skipped individually, never fail the whole import.

pandas does the tokenizing (quoting of embedded delimiters on export,
bad-line skipping on import); typed parsing goes through the column
descriptors.
"""

__all__ = [
    "EXPORT_FILENAME",
    "export_csv",
    "import_csv",
    "write_csv_file",
    "read_csv_file",
]

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "order-items.csv"


def export_csv(grid: Grid) -> str:
    labels = [c.label for c in COLUMNS]
    records = [[c.format(get_value(r, c.key)) for c in COLUMNS] for r in grid]
    df = pd.DataFrame(records, columns=labels)
    return df.to_csv(index=False, lineterminator="\n")


def _empty_result(warnings: list[str]) -> ImportResult:
    return ImportResult(rows=(), total_lines=0, dropped_rows=0, skipped_cells=0, warnings=warnings)


def import_csv(
    text: str,
    ids: RowIdFactory,
    defaults: RowDefaults | None = None,
    *,
    strict_numeric_text: bool = False,
) -> ImportResult:
    """Parse CSV text into fresh rows (new ids, derived totals recomputed)."""
    warnings: list[str] = []
    if not text or not text.strip():
        return _empty_result(["empty input"])

    bad_lines: list[list[str]] = []

    def on_bad_line(fields: list[str]) -> None:
        bad_lines.append(fields)
        return None  # skip

    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            on_bad_lines=on_bad_line,
            engine="python",
        )
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        logger.warning("csv import: unreadable input: %s", e)
        return _empty_result([f"unreadable input: {e}"])

    for fields in bad_lines:
        warnings.append(f"malformed line skipped ({len(fields)} fields)")

    # label -> descriptor (totalPrice is derived: never read back)
    mapped: list[tuple[str, ColumnDescriptor]] = []
    for label in df.columns:
        col = COLUMN_BY_LABEL.get(str(label).strip())
        if col is None:
            logger.debug("csv import: ignore unknown column %r", label)
            continue
        if col.value_type is ValueType.DERIVED:
            continue
        mapped.append((label, col))

    rows = []
    dropped = 0
    skipped_cells = 0
    for line_no, record in enumerate(df.itertuples(index=False, name=None), start=2):
        cells = dict(zip(df.columns, record, strict=False))
        values = {}
        for label, col in mapped:
            raw = cells.get(label)
            if not isinstance(raw, str) or raw == "":
                continue  # 空セルは既定値のまま
            if col.value_type is not ValueType.TEXT and raw.strip() == "":
                continue
            try:
                values[col.attribute] = col.parse_text(raw, strict_numeric_text=strict_numeric_text)
            except FieldValueError as e:
                skipped_cells += 1
                warnings.append(f"line {line_no}: {e}")
        if not values.get("item_code") and not values.get("description"):
            dropped += 1
            continue
        rows.append(new_row(ids, defaults, **values))

    logger.info(
        "csv import: lines=%d imported=%d dropped=%d malformed=%d skipped_cells=%d",
        len(df), len(rows), dropped, len(bad_lines), skipped_cells,
    )
    return ImportResult(
        rows=tuple(rows),
        total_lines=len(df) + len(bad_lines),
        dropped_rows=dropped,
        skipped_cells=skipped_cells,
        warnings=warnings,
    )


def write_csv_file(path: Path, grid: Grid, filename: str = EXPORT_FILENAME) -> Path:
    """Write export_csv output; a directory path gets filename appended."""
    if path.is_dir():
        path = path / filename
    path.write_text(export_csv(grid), encoding="utf-8")
    return path


def read_csv_file(path: Path) -> str:
    # utf-8-sig: Excel 保存の BOM を除去
    return path.read_text(encoding="utf-8-sig")
