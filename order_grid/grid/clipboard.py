from __future__ import annotations

import logging

from ..models.columns import COLUMN_BY_KEY, get_value
from ..models.row import Grid
from ..models.selection import ClipboardBuffer, ClipboardEntry, Selection
from .row_store import find_row, set_field

"""Selection-driven copy / paste.

Paste is field-homogeneous: target i receives clipboard[i mod len] only when
the entry's field key equals the target's field key; mismatched pairs are
skipped. A smaller clipboard cycles over a larger selection.
"""

__all__ = [
    "copy_selection",
    "paste_selection",
]

logger = logging.getLogger(__name__)


def copy_selection(grid: Grid, selection: Selection) -> ClipboardBuffer | None:
    """Capture (field_key, value) pairs in selection order.

    Returns None for an empty selection. The buffer always has one entry per
    coordinate; a coordinate whose row is gone (or whose key is unknown)
    becomes a stale placeholder so paste alignment follows the selection.
    """
    if not selection:
        return None
    entries: list[ClipboardEntry] = []
    for coord in selection:
        row = find_row(grid, coord.row_id)
        if row is None or coord.field_key not in COLUMN_BY_KEY:
            logger.debug("copy: stale coordinate %s/%s", coord.row_id, coord.field_key)
            entries.append(ClipboardEntry(coord.field_key, None, stale=True))
            continue
        entries.append(ClipboardEntry(coord.field_key, get_value(row, coord.field_key)))
    return ClipboardBuffer(tuple(entries))


def paste_selection(
    grid: Grid,
    selection: Selection,
    clipboard: ClipboardBuffer | None,
    *,
    revision: int,
) -> Grid | None:
    """Build the candidate grid for a paste; None when there is nothing to paste."""
    if not clipboard or not selection:
        return None
    out = grid
    applied = 0
    for i, target in enumerate(selection):
        entry = clipboard.entry_for(i)
        if entry.stale or entry.field_key != target.field_key:
            continue
        col = COLUMN_BY_KEY.get(target.field_key)
        if col is None or not col.writable:
            continue
        if find_row(out, target.row_id) is None:
            continue
        out = set_field(out, target.row_id, target.field_key, entry.value, revision=revision)
        applied += 1
    logger.debug("paste: applied %d of %d targets", applied, len(selection))
    return out
