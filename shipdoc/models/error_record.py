from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from .validation_error import ValidationError

"""ErrorRecord model for the JSON Lines error log.

Wraps a ValidationError (or a file-level failure) with the source file name,
an error classification and a UTC timestamp. ``row=-1`` is the sentinel for
file-level errors where no row applies.
"""

__all__ = [
    "ErrorRecord",
]

FILE_LEVEL_FIELD = "<FILE_LEVEL>"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Order export file name being processed
        row: Row number (1-based). -1 for file-level errors
        field: Canonical field name, or "<FILE_LEVEL>"
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human-readable description
    """
    timestamp: str  # ISO8601 UTC
    file: str
    row: int  # 行番号。不明な場合 -1 許容
    field: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, row: int, field: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            field=field,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_validation(file: str, error: ValidationError) -> ErrorRecord:
        return ErrorRecord.create(
            file=file,
            row=error.row,
            field=error.field,
            error_type="MISSING_REQUIRED_FIELD",
            message=error.message,
        )

    @staticmethod
    def file_level(file: str, error_type: str, message: str) -> ErrorRecord:
        return ErrorRecord.create(file, -1, FILE_LEVEL_FIELD, error_type, message)

    def to_json_line(self) -> str:
        """Serialize to one JSON line (exactly the dataclass keys)."""
        return json.dumps(asdict(self), ensure_ascii=False)
