from __future__ import annotations

import logging

from ..models.row import Grid

"""Linear undo/redo history of full grid snapshots.

Snapshots are Grids (tuples of frozen Rows), so storing them is already a
deep immutable copy. The grid the session starts from is kept as a base
snapshot outside the stack: it is shown until the first commit and is not
an undo target afterwards. Only committed snapshots are entries; index
points at the present one (-1 while nothing has been committed).
Committing from a non-tip position discards the redo branch first; there
is no branching.
"""

__all__ = [
    "HistoryManager",
]

logger = logging.getLogger(__name__)


class HistoryManager:
    def __init__(self, initial: Grid, max_depth: int | None = None) -> None:
        if not initial:
            raise ValueError("initial grid must contain at least one row")
        if max_depth is not None and max_depth < 1:
            raise ValueError("max_depth must be >= 1")
        self.max_depth = max_depth
        self._base = initial
        self._entries: list[Grid] = []
        self._index = -1

    @property
    def present(self) -> Grid:
        if self._index < 0:
            return self._base
        return self._entries[self._index]

    @property
    def index(self) -> int:
        return self._index

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def can_undo(self) -> bool:
        # 最初のコミットより前 (base) には戻らない
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def commit(self, grid: Grid) -> Grid:
        """Append grid as the new present snapshot."""
        if not grid:
            raise ValueError("cannot commit an empty grid")
        if self.can_redo:
            dropped = len(self._entries) - self._index - 1
            logger.debug("history: discard %d redo entries", dropped)
            del self._entries[self._index + 1:]
        self._entries.append(grid)
        self._index = len(self._entries) - 1
        if self.max_depth is not None and len(self._entries) > self.max_depth:
            # 古いエントリから破棄 (index は末尾を指したまま)
            overflow = len(self._entries) - self.max_depth
            del self._entries[:overflow]
            self._index -= overflow
        return self.present

    def undo(self) -> Grid:
        if self.can_undo:
            self._index -= 1
        return self.present

    def redo(self) -> Grid:
        if self.can_redo:
            self._index += 1
        return self.present

    def reset(self, grid: Grid) -> Grid:
        """Drop all history and start over from grid as the new base."""
        if not grid:
            raise ValueError("initial grid must contain at least one row")
        self._base = grid
        self._entries = []
        self._index = -1
        return self.present
