from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import Future
from typing import Any, Protocol

from ..clients.api import ExternalServiceError, ItemLookupClient, LookupItem, PriceEstimateRequest
from ..csvio.codec import export_csv, import_csv
from ..grid import row_store
from ..grid.clipboard import copy_selection, paste_selection
from ..grid.derived import compute_totals, recompute_grid
from ..grid.history import HistoryManager
from ..grid.row_store import FieldValueError, GridError, LastRowError, RowNotFoundError
from ..grid.validation import validate_grid
from ..models.config_models import GridConfig
from ..models.notice_record import NoticeRecord
from ..models.results import GridTotals, ImportResult, SaveResult, ValidationIssue
from ..models.row import Grid, Row, RowIdFactory
from ..models.selection import CellCoordinate, ClipboardBuffer, Selection
from .estimation import EstimateCompletion, EstimationQueue

"""Command dispatcher for the order grid.

OrderGrid maps user intents (toolbar buttons, keyboard chords, async
completions) onto the grid engine with a fixed order per command:

    mutate (pure row_store / clipboard function on the present snapshot)
    -> recompute (derived fields)
    -> commit (history; the committed snapshot becomes the visible grid)

A command either commits exactly once or not at all. Undo / redo replace the
grid wholesale from history and skip the first two steps. Structural
problems (last row, unknown row, invalid value) and external failures never
escape as exceptions: they become NoticeRecords and the grid is unchanged.
"""

__all__ = [
    "OrderSaver",
    "OrderGrid",
]

logger = logging.getLogger(__name__)


class OrderSaver(Protocol):
    def save(self, rows: Sequence[Row]) -> int: ...


_LEVEL_TO_LOG = {"INFO": logging.INFO, "WARN": logging.WARNING, "ERROR": logging.ERROR}


class OrderGrid:
    def __init__(
        self,
        initial: Iterable[Row] | None = None,
        *,
        config: GridConfig | None = None,
        ids: RowIdFactory | None = None,
        estimator: EstimationQueue | None = None,
        lookup: ItemLookupClient | None = None,
        saver: OrderSaver | None = None,
    ) -> None:
        self.config = config or GridConfig()
        self.ids = ids or RowIdFactory()
        self.defaults = self.config.row_defaults
        self.estimator = estimator
        self.lookup = lookup
        self.saver = saver

        rows: Grid = tuple(initial or ())
        if not rows:
            rows = (row_store.new_row(self.ids, self.defaults),)
        self.history = HistoryManager(recompute_grid(rows), max_depth=self.config.history_depth)
        self.selection = Selection()
        self.clipboard: ClipboardBuffer | None = None
        self.notices: list[NoticeRecord] = []

    # ------------------------------------------------------------------
    # read access (always the present history snapshot)

    @property
    def rows(self) -> Grid:
        return self.history.present

    def row(self, row_id: str) -> Row | None:
        return row_store.find_row(self.rows, row_id)

    def totals(self) -> GridTotals:
        return compute_totals(self.rows)

    def validate(self) -> list[ValidationIssue]:
        return validate_grid(self.rows)

    @property
    def can_copy(self) -> bool:
        return bool(self.selection)

    @property
    def can_paste(self) -> bool:
        return bool(self.clipboard)

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    # ------------------------------------------------------------------
    # internals

    def _notice(self, level: str, code: str, message: str, row_id: str | None = None) -> NoticeRecord:
        rec = NoticeRecord.create(level, code, message, row_id)
        self.notices.append(rec)
        logger.log(_LEVEL_TO_LOG.get(level, logging.INFO), "%s: %s", code, message)
        return rec

    def _commit(self, candidate: Grid) -> Grid:
        return self.history.commit(recompute_grid(candidate))

    def _structural_notice(self, e: Exception, row_id: str | None) -> None:
        if isinstance(e, LastRowError):
            self._notice("WARN", "LAST_ROW", str(e), row_id)
        elif isinstance(e, RowNotFoundError):
            self._notice("WARN", "ROW_NOT_FOUND", str(e), row_id)
        else:
            self._notice("WARN", "INVALID_VALUE", str(e), row_id)

    # ------------------------------------------------------------------
    # row commands

    def add_row(self, after_id: str | None = None) -> Row | None:
        row = row_store.new_row(self.ids, self.defaults)
        try:
            candidate = row_store.add_row(self.rows, row, after_id)
        except GridError as e:
            self._structural_notice(e, after_id)
            return None
        self._commit(candidate)
        return row

    def delete_row(self, row_id: str) -> bool:
        try:
            candidate = row_store.delete_row(self.rows, row_id)
        except GridError as e:
            self._structural_notice(e, row_id)
            return False
        self._commit(candidate)
        return True

    def set_field(self, row_id: str, field_key: str, value: Any) -> bool:
        try:
            candidate = row_store.set_field(
                self.rows,
                row_id,
                field_key,
                value,
                revision=self.ids.next_revision(),
                strict_numeric_text=self.config.strict_numeric_text,
            )
        except (GridError, FieldValueError) as e:
            self._structural_notice(e, row_id)
            return False
        self._commit(candidate)
        return True

    def bulk_update(self, field_key: str, value: Any) -> bool:
        """Apply value to field_key on every row in the current selection (one commit)."""
        if not self.selection:
            return False
        try:
            candidate = row_store.bulk_update(
                self.rows,
                self.selection,
                field_key,
                value,
                revision=self.ids.next_revision(),
                strict_numeric_text=self.config.strict_numeric_text,
            )
        except (GridError, FieldValueError) as e:
            self._structural_notice(e, None)
            return False
        if candidate == self.rows:
            return False
        self._commit(candidate)
        return True

    def sort_by(self, field_key: str, descending: bool = False) -> bool:
        try:
            candidate = row_store.sort_rows(self.rows, field_key, descending)
        except FieldValueError as e:
            self._structural_notice(e, None)
            return False
        if candidate == self.rows:
            logger.debug(f"sort_by {field_key}: order unchanged")
            return False
        self._commit(candidate)
        return True

    # ------------------------------------------------------------------
    # selection & clipboard

    def select(self, coords: Iterable[CellCoordinate]) -> None:
        self.selection = Selection(coords)

    def click_cell(self, row_id: str, field_key: str) -> None:
        self.selection = Selection.single(row_id, field_key)

    def clear_selection(self) -> None:
        self.selection = Selection()

    def copy(self) -> bool:
        """Capture the selection into the clipboard (no history commit)."""
        buffer = copy_selection(self.rows, self.selection)
        if buffer is None:
            return False
        self.clipboard = buffer
        self._notice("INFO", "COPIED", f"Copied {len(buffer)} cells")
        return True

    def paste(self) -> bool:
        candidate = paste_selection(
            self.rows, self.selection, self.clipboard, revision=self.ids.next_revision()
        )
        if candidate is None or candidate == self.rows:
            return False
        self._commit(candidate)
        self._notice("INFO", "PASTED", "Pasted successfully")
        return True

    # ------------------------------------------------------------------
    # history

    def undo(self) -> bool:
        if not self.history.can_undo:
            return False
        self.history.undo()
        return True

    def redo(self) -> bool:
        if not self.history.can_redo:
            return False
        self.history.redo()
        return True

    # ------------------------------------------------------------------
    # external collaborators

    def lookup_items(self, query: str) -> list[LookupItem]:
        if self.lookup is None:
            return []
        try:
            return self.lookup.search(query)
        except ExternalServiceError as e:
            self._notice("ERROR", "LOOKUP_FAILED", f"Item lookup failed: {e}")
            return []

    def apply_lookup(self, row_id: str, item: LookupItem) -> bool:
        """Fill a row from a selected lookup result as one commit."""
        try:
            candidate = row_store.set_fields(
                self.rows, row_id, item.as_fields(), revision=self.ids.next_revision()
            )
        except (GridError, FieldValueError) as e:
            self._structural_notice(e, row_id)
            return False
        self._commit(candidate)
        return True

    def request_price_estimate(self, row_id: str) -> Future[None] | None:
        """Issue an async estimation for a row, stamped with its current revision."""
        row = self.row(row_id)
        if row is None:
            self._notice("WARN", "ROW_NOT_FOUND", f"row not found: {row_id}", row_id)
            return None
        if not row.item_code and not row.description:
            self._notice("WARN", "ESTIMATE_NEEDS_ITEM", "Please enter item code or description first", row_id)
            return None
        if self.estimator is None:
            self._notice("ERROR", "ESTIMATE_UNAVAILABLE", "price estimation is not configured", row_id)
            return None
        request = PriceEstimateRequest(
            item_code=row.item_code,
            description=row.description,
            quantity=row.quantity,
            supplier=row.supplier,
        )
        return self.estimator.submit(row.id, row.revision, request)

    def process_pending(self) -> int:
        """Apply queued async completions in arrival order; returns how many committed."""
        if self.estimator is None:
            return 0
        return sum(1 for c in self.estimator.drain() if self.apply_estimate(c))

    def apply_estimate(self, completion: EstimateCompletion) -> bool:
        rid = completion.row_id
        if completion.error is not None or completion.estimate is None:
            self._notice("ERROR", "ESTIMATE_FAILED", f"Failed to estimate price: {completion.error}", rid)
            return False
        row = self.row(rid)
        if row is None:
            # 行削除後の完了通知は無視
            logger.debug("estimate: row %s no longer exists, completion dropped", rid)
            return False
        if row.revision != completion.revision:
            self._notice(
                "WARN",
                "STALE_ESTIMATE",
                f"Discarded price estimate: row changed since request (rev {completion.revision} -> {row.revision})",
                rid,
            )
            return False
        est = completion.estimate
        try:
            candidate = row_store.set_fields(
                self.rows,
                rid,
                {
                    "unitPrice": est.estimated_price,
                    "estimatedPrice": est.estimated_price,
                    "priceConfidence": est.confidence,
                },
                revision=self.ids.next_revision(),
                internal=True,
            )
        except (GridError, FieldValueError) as e:
            self._structural_notice(e, rid)
            return False
        self._commit(candidate)
        self._notice("INFO", "ESTIMATED", f"Price estimated with {est.confidence}% confidence", rid)
        return True

    def save(self) -> SaveResult:
        """Hand the present snapshot to the saver. Never touches history."""
        issues = self.validate()
        if issues:
            self._notice("WARN", "VALIDATION_FAILED", f"{len(issues)} validation issue(s) block save")
            return SaveResult(ok=False, issues=issues)
        if self.saver is None:
            self._notice("ERROR", "SAVE_UNAVAILABLE", "no save endpoint configured")
            return SaveResult(ok=False, error="no save endpoint configured")
        snapshot = self.rows
        try:
            saved = self.saver.save(snapshot)
        except ExternalServiceError as e:
            self._notice("ERROR", "SAVE_FAILED", f"Save failed: {e}")
            return SaveResult(ok=False, error=str(e))
        self._notice("INFO", "SAVED", f"Saved {saved} items")
        return SaveResult(ok=True, saved_rows=saved)

    # ------------------------------------------------------------------
    # CSV

    def export_csv(self) -> str:
        return export_csv(self.rows)

    def import_csv(self, text: str) -> ImportResult:
        """Replace the whole grid with parsed rows (one commit; selection/clipboard cleared)."""
        result = import_csv(
            text, self.ids, self.defaults, strict_numeric_text=self.config.strict_numeric_text
        )
        for w in result.warnings:
            self._notice("WARN", "IMPORT_SKIPPED", w)
        if not result.rows:
            self._notice("WARN", "IMPORT_EMPTY", "No importable rows found")
            return result
        self._commit(result.rows)
        self.selection = Selection()
        self.clipboard = None
        self._notice("INFO", "IMPORTED", f"Imported {result.imported_rows} items")
        return result

    # ------------------------------------------------------------------
    # keyboard

    def handle_key(self, key: str, *, ctrl: bool = False, meta: bool = False, shift: bool = False) -> bool:
        """Dispatch a keyboard chord; returns True when the chord is recognized."""
        if not (ctrl or meta):
            return False
        k = key.lower()
        if k == "c":
            self.copy()
        elif k == "v":
            self.paste()
        elif k == "z":
            if shift:
                self.redo()
            else:
                self.undo()
        elif k == "y" and ctrl:
            self.redo()
        elif k == "s":
            self.save()
        else:
            return False
        return True
