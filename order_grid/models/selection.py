from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

"""Selection and clipboard models.

Selection keeps insertion order (it decides how clipboard entries map onto
targets when pasting); duplicates collapse to their first position.
"""

__all__ = [
    "CellCoordinate",
    "Selection",
    "ClipboardEntry",
    "ClipboardBuffer",
]


@dataclass(frozen=True)
class CellCoordinate:
    row_id: str
    field_key: str


class Selection:
    """Ordered set of cell coordinates."""

    def __init__(self, coords: Iterable[CellCoordinate] = ()) -> None:
        self._coords: dict[CellCoordinate, None] = dict.fromkeys(coords)

    @classmethod
    def single(cls, row_id: str, field_key: str) -> Selection:
        return cls([CellCoordinate(row_id, field_key)])

    def __iter__(self) -> Iterator[CellCoordinate]:
        return iter(self._coords)

    def __len__(self) -> int:
        return len(self._coords)

    def __bool__(self) -> bool:
        return bool(self._coords)

    def __contains__(self, coord: object) -> bool:
        return coord in self._coords

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Selection):
            return NotImplemented
        return list(self._coords) == list(other._coords)

    def __repr__(self) -> str:  # pragma: no cover (debug aid)
        return f"Selection({list(self._coords)!r})"

    def row_ids(self) -> list[str]:
        """Distinct row ids in selection order."""
        return list(dict.fromkeys(c.row_id for c in self._coords))


@dataclass(frozen=True)
class ClipboardEntry:
    """One copied cell. A stale entry keeps its slot in the cycle but is never pasted."""
    field_key: str
    value: Any
    stale: bool = False


@dataclass(frozen=True)
class ClipboardBuffer:
    """Immutable ordered (field_key, value) pairs captured by a copy."""
    entries: tuple[ClipboardEntry, ...]

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)

    def entry_for(self, position: int) -> ClipboardEntry:
        """Entry used for the target at position (cycles over the buffer)."""
        return self.entries[position % len(self.entries)]
