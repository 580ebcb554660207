from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime

from .import_report import RowError

"""ErrorRecord model for the JSON Lines error log.

Supports row=-1 as a sentinel value for file-level errors (corrupt upload,
failed bulk write) where no single row is to blame.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: uploaded filename
        row: Row number (1-based). -1 for file-level errors
        name: best-effort contact name, if known
        error_type: Error classification in UPPER_SNAKE_CASE format
        messages: human-readable reasons
    """
    timestamp: str
    file: str
    row: int
    name: str | None
    error_type: str
    messages: list[str] = field(default_factory=list)

    @staticmethod
    def create(
        file: str, row: int, error_type: str, messages: list[str], name: str | None = None
    ) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            name=name,
            error_type=error_type,
            messages=list(messages),
        )

    @staticmethod
    def from_row_error(file: str, error: RowError) -> ErrorRecord:
        return ErrorRecord.create(
            file=file,
            row=error.row,
            error_type=error.error_type,
            messages=error.messages,
            name=error.name,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
