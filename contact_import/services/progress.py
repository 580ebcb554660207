from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm

"""File-level progress for CLI imports.

One bar per run, advanced once per imported upload, with the running
success/failed contact counts as postfix. Nothing is drawn when stdout is
not a TTY (CI, redirected output).
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    def __init__(self, total_files: int, label: str = "Importing contacts") -> None:
        self.label = label
        self.files_started = 0
        self.pbar: Any = None
        if is_tty_enabled():
            self.pbar = tqdm(total=total_files, desc=label, unit="file", ascii=True, ncols=80)

    @property
    def enabled(self) -> bool:
        return self.pbar is not None

    def start_file(self, file_name: str) -> None:
        self.files_started += 1
        if self.enabled:
            self.pbar.set_description(f"{self.label}: {file_name}")

    def finish_file(self) -> None:
        if self.enabled:
            self.pbar.update(1)

    def set_postfix(self, success: int, failed: int) -> None:
        # 取込済み件数 / 失敗件数
        if self.enabled:
            self.pbar.set_postfix(success=success, failed=failed)

    def close(self) -> None:
        if self.enabled:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
