from __future__ import annotations

from dataclasses import dataclass, field

from ..models.import_report import ImportReport

"""SUMMARY line rendering for CLI runs.

Format:
SUMMARY files={files} failed_files={failed_files} total={total} success={success}
failed={failed} elapsed_sec={elapsed}
"""


@dataclass
class RunTotals:
    """Counters accumulated over every file of one CLI run."""
    files: int = 0
    failed_files: int = 0
    total: int = 0
    success: int = 0
    failed: int = 0
    reports: list[ImportReport] = field(default_factory=list)

    def add(self, report: ImportReport) -> None:
        self.files += 1
        self.total += report.total
        self.success += report.success
        self.failed += report.failed
        self.reports.append(report)

    def add_failed_file(self) -> None:
        self.files += 1
        self.failed_files += 1


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(totals: RunTotals, elapsed_seconds: float) -> str:
    """Render the SUMMARY line.

    >>> render_summary_line(RunTotals(files=1, total=3, success=1, failed=2), 2.0)
    'SUMMARY files=1 failed_files=0 total=3 success=1 failed=2 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={totals.files} "
        f"failed_files={totals.failed_files} "
        f"total={totals.total} "
        f"success={totals.success} "
        f"failed={totals.failed} "
        f"elapsed_sec={_format_seconds(elapsed_seconds)}"
    )
