"""Grid engine: row store, derived fields, history, clipboard and validation."""

from .clipboard import copy_selection, paste_selection
from .derived import compute_totals, recompute_grid, recompute_row
from .history import HistoryManager
from .row_store import (
    GridError,
    LastRowError,
    RowNotFoundError,
    add_row,
    bulk_update,
    delete_row,
    find_row,
    new_row,
    set_field,
    set_fields,
    sort_rows,
)
from .validation import validate_grid, validate_row

__all__ = [
    "GridError",
    "LastRowError",
    "RowNotFoundError",
    "HistoryManager",
    "new_row",
    "find_row",
    "set_field",
    "set_fields",
    "add_row",
    "delete_row",
    "bulk_update",
    "sort_rows",
    "recompute_row",
    "recompute_grid",
    "compute_totals",
    "copy_selection",
    "paste_selection",
    "validate_row",
    "validate_grid",
]
