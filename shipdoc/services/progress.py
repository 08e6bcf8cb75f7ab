from __future__ import annotations

import sys
from collections import Counter
from pathlib import Path
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.excel_file import FileStatus

"""File-level progress bar (tqdm, TTY only).

Redirected output (CI, pipes, tests) gets no bar at all so the log stays
free of control sequences; the SUMMARY line carries the final numbers.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """One bar over the order exports of a run, with running status counters.

    Counters are kept with or without a TTY; only the bar is optional.
    """

    def __init__(self, total_files: int, *, description: str = "Generating documents") -> None:
        self.total_files = total_files
        self.description = description
        self.statuses: Counter[FileStatus] = Counter()
        self.records = 0
        self.pbar: TqdmType[Any] | None = None
        if is_tty_enabled():
            self.pbar = tqdm(
                total=total_files,
                desc=description,
                unit="file",
                leave=True,
                ncols=80,
                ascii=True,
            )

    @property
    def enabled(self) -> bool:
        return self.pbar is not None

    def start_file(self, file_path: Path) -> None:
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({file_path.name})")

    def finish_file(self, status: FileStatus, records: int = 0) -> None:
        self.statuses[status] += 1
        self.records += records
        if self.pbar is None:
            return
        failed = sum(n for s, n in self.statuses.items() if s is not FileStatus.SUCCESS)
        self.pbar.set_postfix(ok=self.statuses[FileStatus.SUCCESS], failed=failed, records=self.records)
        self.pbar.set_description(self.description)
        self.pbar.update(1)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
