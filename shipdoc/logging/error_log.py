from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord
from ..models.validation_error import ValidationError

"""Run error log (JSON Lines).

Validation errors and file-level failures of every order export are
collected during the run and written once at the end to
``logs/errors-YYYYMMDD-HHMMSS.log`` (UTC stamp of the first write). No file
is created for a clean run.
"""

__all__ = [
    "ErrorLogBuffer",
    "LOGS_DIR",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """Collects ErrorRecords for one run; not thread-safe."""

    def __init__(self, logs_dir: Path = LOGS_DIR) -> None:
        self._logs_dir = logs_dir
        self._pending: list[ErrorRecord] = []
        self._path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._path = self._logs_dir / f"errors-{stamp}.log"
        return self._path

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)

    def extend(self, records: Iterable[ErrorRecord]) -> None:
        self._pending.extend(records)

    def record_validation(self, file: str, errors: Iterable[ValidationError]) -> int:
        """Log every validation error of ``file``; returns how many were added."""
        before = len(self._pending)
        self.extend(ErrorRecord.from_validation(file, e) for e in errors)
        return len(self._pending) - before

    def record_file_failure(self, file: str, error_type: str, message: str) -> None:
        self.append(ErrorRecord.file_level(file, error_type, message))

    def counts_by_type(self) -> Counter[str]:
        return Counter(r.error_type for r in self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    def flush(self) -> Path | None:
        """Append pending records to the log file; None when nothing is pending."""
        if not self._pending:
            return None
        path = self.file_path
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            f.writelines(r.to_json_line() + "\n" for r in self._pending)
        self._pending.clear()
        return path
