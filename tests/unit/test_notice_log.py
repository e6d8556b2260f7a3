from __future__ import annotations

import json
import re

import pytest

from order_grid.logging.notice_log import NoticeJournal
from order_grid.models.notice_record import NOTICE_KEYS, NoticeRecord


def test_create_stamps_utc_timestamp():
    rec = NoticeRecord.create("WARN", "LAST_ROW", "Cannot delete the last row", "row-1")
    assert rec.timestamp.endswith("Z")
    assert rec.row_id == "row-1"


def test_write_without_notices_creates_no_file(tmp_path):
    journal = NoticeJournal(tmp_path / "logs")
    assert journal.write() is None
    assert not (tmp_path / "logs").exists()


def test_write_emits_json_lines(tmp_path):
    journal = NoticeJournal(tmp_path)
    journal.record(NoticeRecord.create("INFO", "COPIED", "Copied 2 cells"))
    assert journal.collect([NoticeRecord.create("ERROR", "SAVE_FAILED", "Save failed: timeout")]) == 1
    assert journal.pending == 2

    path = journal.write()
    assert re.fullmatch(r"notices-\d{8}-\d{6}\.log", path.name)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert set(first) == NOTICE_KEYS
    assert first["row_id"] is None
    assert journal.pending == 0


def test_session_writes_share_one_file(tmp_path):
    journal = NoticeJournal(tmp_path)
    journal.record(NoticeRecord.create("INFO", "SAVED", "Saved 1 items"))
    p1 = journal.write()
    journal.record(NoticeRecord.create("INFO", "SAVED", "Saved 2 items"))
    p2 = journal.write()
    assert p1 == p2 == journal.path
    assert len(p1.read_text(encoding="utf-8").splitlines()) == 2
    # 書き出し後もセッション単位で集計される
    assert journal.counts_by_code() == {"SAVED": 2}


def test_min_level_filters_and_counts(tmp_path):
    journal = NoticeJournal(tmp_path, min_level="WARN")
    accepted = journal.collect(
        [
            NoticeRecord.create("INFO", "COPIED", "Copied 1 cells"),
            NoticeRecord.create("WARN", "LAST_ROW", "Cannot delete the last row", "row-1"),
            NoticeRecord.create("WARN", "LAST_ROW", "Cannot delete the last row", "row-1"),
            NoticeRecord.create("ERROR", "SAVE_FAILED", "Save failed: 503"),
        ]
    )
    assert accepted == 3
    assert journal.filtered == 1
    assert journal.counts_by_code() == {"LAST_ROW": 2, "SAVE_FAILED": 1}
    assert journal.has_errors

    codes = [json.loads(line)["code"] for line in journal.write().read_text(encoding="utf-8").splitlines()]
    assert "COPIED" not in codes


def test_has_errors_false_for_info_and_warn(tmp_path):
    journal = NoticeJournal(tmp_path)
    journal.record(NoticeRecord.create("WARN", "STALE_ESTIMATE", "Estimate discarded", "row-2"))
    assert not journal.has_errors


def test_unknown_levels_rejected(tmp_path):
    with pytest.raises(ValueError):
        NoticeJournal(tmp_path, min_level="DEBUG")
    journal = NoticeJournal(tmp_path)
    with pytest.raises(ValueError):
        journal.record(NoticeRecord("2026-01-01T00:00:00Z", "TRACE", "X", None, "x"))
