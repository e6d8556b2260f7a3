from __future__ import annotations

import pytest

from order_grid.grid.history import HistoryManager
from order_grid.grid.row_store import new_row, set_field
from order_grid.models.row import RowIdFactory


@pytest.fixture()
def initial(ids: RowIdFactory):
    return (new_row(ids),)


def _edits(initial, n: int):
    """n successive snapshots, each changing the notes field."""
    grid = initial
    out = []
    for i in range(n):
        grid = set_field(grid, initial[0].id, "notes", f"v{i}", revision=i + 1)
        out.append(grid)
    return out


def test_base_snapshot_before_any_commit(initial):
    h = HistoryManager(initial)
    assert h.present == initial
    assert h.index == -1
    assert len(h) == 0
    assert not h.can_undo
    assert not h.can_redo
    # 飽和: コミット前の undo / redo は no-op
    assert h.undo() == initial
    assert h.redo() == initial


def test_empty_initial_rejected():
    with pytest.raises(ValueError):
        HistoryManager(())


def test_first_commit_is_not_undoable(initial):
    h = HistoryManager(initial)
    (first,) = _edits(initial, 1)
    h.commit(first)
    assert h.index == 0
    assert not h.can_undo
    assert h.undo() == first


def test_undo_n_times_restores_state_before_sequence(initial):
    """Undo after n commits returns to the snapshot committed before them."""
    snaps = _edits(initial, 5)
    h = HistoryManager(initial)
    h.commit(snaps[0])
    for g in snaps[1:]:
        h.commit(g)
    for _ in range(4):
        h.undo()
    assert h.present == snaps[0]
    # base には戻らない
    assert h.undo() == snaps[0]
    assert h.index == 0


def test_second_undo_at_first_entry_is_noop_then_redo_moves_forward(initial):
    a, b = _edits(initial, 2)
    h = HistoryManager(initial)
    h.commit(a)
    h.commit(b)
    h.undo()
    h.undo()
    assert h.present == a
    assert h.redo() == b
    assert not h.can_redo


def test_undo_redo_interleaving_is_reversible(initial):
    snaps = _edits(initial, 3)
    h = HistoryManager(initial)
    for g in snaps:
        h.commit(g)
    h.undo()
    h.undo()
    assert h.present == snaps[0]
    h.redo()
    assert h.present == snaps[1]
    h.undo()
    h.redo()
    h.redo()
    assert h.present == snaps[2]
    # tip では redo は no-op
    assert h.redo() == snaps[2]
    assert not h.can_redo


def test_commit_after_undo_discards_redo_branch(initial):
    snaps = _edits(initial, 3)
    h = HistoryManager(initial)
    for g in snaps:
        h.commit(g)
    h.undo()
    h.undo()
    assert h.can_redo

    branch = set_field(h.present, initial[0].id, "notes", "branch", revision=99)
    h.commit(branch)
    assert not h.can_redo
    assert h.redo() == branch
    assert len(h) == 2  # snaps[0], branch


def test_snapshots_are_not_mutated_by_later_edits(initial):
    h = HistoryManager(initial)
    first = set_field(initial, initial[0].id, "description", "A", revision=1)
    h.commit(first)
    h.commit(set_field(h.present, initial[0].id, "description", "B", revision=2))
    h.undo()
    assert h.present[0].description == "A"


def test_max_depth_drops_oldest_and_keeps_index_valid(initial):
    h = HistoryManager(initial, max_depth=3)
    snaps = _edits(initial, 5)
    for g in snaps:
        h.commit(g)
    assert len(h) == 3
    assert h.index == 2
    assert h.present == snaps[-1]
    h.undo()
    h.undo()
    assert h.present == snaps[2]
    # 最古を越えた undo は飽和
    assert h.undo() == snaps[2]
    assert not h.can_undo


def test_invalid_max_depth():
    with pytest.raises(ValueError):
        HistoryManager((new_row(RowIdFactory()),), max_depth=0)


def test_reset(initial, ids):
    h = HistoryManager(initial)
    for g in _edits(initial, 2):
        h.commit(g)
    other = (new_row(ids),)
    h.reset(other)
    assert h.present == other
    assert len(h) == 0
    assert not h.can_undo
