from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.notice_record import NoticeRecord

"""Session journal of grid notices.

The grid raises INFO/WARN/ERROR notices for copy, paste, import, save and
rejected edits. At the end of a CLI run they are written as JSON Lines to
`logs/notices-<UTC stamp>.log`; the stamp is fixed when the journal is
created so every write of one session lands in the same file. Notices below
`min_level` are counted as filtered and never written.
"""

__all__ = [
    "NOTICE_LEVELS",
    "NoticeJournal",
]

NOTICE_LEVELS = ("INFO", "WARN", "ERROR")
LOGS_DIR = Path("./logs")


class NoticeJournal:
    def __init__(self, logs_dir: Path | None = None, *, min_level: str = "INFO") -> None:
        if min_level not in NOTICE_LEVELS:
            raise ValueError(f"unknown notice level: {min_level!r}")
        self._threshold = NOTICE_LEVELS.index(min_level)
        self._logs_dir = logs_dir or LOGS_DIR
        stamp = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
        self.path = self._logs_dir / f"notices-{stamp}.log"
        self._pending: list[NoticeRecord] = []
        self._codes: Counter[str] = Counter()
        self._levels: Counter[str] = Counter()
        self.filtered = 0

    def record(self, notice: NoticeRecord) -> bool:
        """Queue one notice; False when it is below min_level."""
        if notice.level not in NOTICE_LEVELS:
            raise ValueError(f"{notice.code}: unknown notice level {notice.level!r}")
        if NOTICE_LEVELS.index(notice.level) < self._threshold:
            self.filtered += 1
            return False
        self._pending.append(notice)
        self._codes[notice.code] += 1
        self._levels[notice.level] += 1
        return True

    def collect(self, notices: Iterable[NoticeRecord]) -> int:
        return sum(1 for n in notices if self.record(n))

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def has_errors(self) -> bool:
        return self._levels["ERROR"] > 0

    def counts_by_code(self) -> dict[str, int]:
        """Accepted notices per code over the whole session (written or not)."""
        return dict(self._codes)

    def write(self) -> Path | None:
        """Append pending notices; no file is created when nothing is pending."""
        if not self._pending:
            return None
        self._logs_dir.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.writelines(n.to_json_line() + "\n" for n in self._pending)
        self._pending.clear()
        return self.path
