from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""NoticeRecord model for user-visible grid notices.

Structural no-ops (deleting the last row, invalid cell values), external call
failures (lookup / estimation / save) and import skips are surfaced to the
user as notices instead of exceptions. A NoticeRecord serializes to a fixed
JSON Lines schema so the CLI can persist them.
"""

__all__ = [
    "NoticeRecord",
    "NOTICE_KEYS",
]

NOTICE_KEYS = frozenset({"timestamp", "level", "code", "row_id", "message"})


@dataclass(frozen=True)
class NoticeRecord:
    """Structured user notice.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        level: "INFO" | "WARN" | "ERROR"
        code: notice classification in UPPER_SNAKE_CASE (e.g. LAST_ROW)
        row_id: affected row id, or None for grid-level notices
        message: human readable text
    """
    timestamp: str  # ISO8601 UTC
    level: str
    code: str  # UPPER_SNAKE
    row_id: str | None
    message: str

    @staticmethod
    def create(level: str, code: str, message: str, row_id: str | None = None) -> NoticeRecord:
        """Create a new NoticeRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return NoticeRecord(timestamp=ts, level=level, code=code, row_id=row_id, message=message)

    def to_json_line(self) -> str:
        # 追加キー阻止: dataclass -> dict して json.dumps
        return json.dumps(asdict(self), ensure_ascii=False)
