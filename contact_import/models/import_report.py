from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Per-import report models.

A report is created fresh for every import call, returned once and never
persisted. ``errors`` is kept in ascending row order and its length always
equals ``failed``.
"""

__all__ = [
    "ImportReport",
    "RowError",
    "VALIDATION_ERROR",
    "DUPLICATE_ROW",
]

VALIDATION_ERROR = "VALIDATION_ERROR"
DUPLICATE_ROW = "DUPLICATE_ROW"


@dataclass(frozen=True)
class RowError:
    """A rejected row.

    Attributes:
        row: 1-based row number; the first data row after the header is row 2
        name: best-effort ``name`` value of the rejected record
        messages: human-readable reasons
        error_type: VALIDATION_ERROR or DUPLICATE_ROW (not part of the report payload)
    """
    row: int
    messages: list[str]
    name: str | None = None
    error_type: str = VALIDATION_ERROR

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"row": self.row}
        if self.name is not None:
            data["name"] = self.name
        data["messages"] = list(self.messages)
        return data


@dataclass
class ImportReport:
    total: int = 0
    success: int = 0
    failed: int = 0
    errors: list[RowError] = field(default_factory=list)

    def add_error(self, error: RowError) -> None:
        self.failed += 1
        self.errors.append(error)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "success": self.success,
            "failed": self.failed,
            "errors": [e.to_dict() for e in self.errors],
        }
