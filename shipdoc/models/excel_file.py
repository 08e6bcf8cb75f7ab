from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

"""ExcelFile domain model and FileStatus enum.

The ExcelFile represents the processing context for a single order export,
tracking its status from discovery through document generation.
"""

__all__ = [
    "ExcelFile",
    "FileStatus",
]


class FileStatus(Enum):
    """Status enum for ExcelFile processing lifecycle.

    State transitions: pending → processing → (success | invalid | failed)

    - PENDING: File discovered but not yet processed
    - PROCESSING: File is currently being processed
    - SUCCESS: Rows validated and the shipment document was written
    - INVALID: Rows have validation errors; no document was written
    - FAILED: Malformed source or serialization contract violation
    """
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    INVALID = "invalid"
    FAILED = "failed"


@dataclass(frozen=True)
class ExcelFile:
    """Processing context for a single order export file."""
    path: Path                           # Full path to the .xlsx file
    name: str                            # File name
    start_time: datetime | None = None   # Processing start (UTC)
    end_time: datetime | None = None     # Processing end (UTC)
    status: FileStatus = FileStatus.PENDING
    total_rows: int = 0                  # Data rows read from the order sheet
    emitted_records: int = 0             # ShipmentRecords after quantity duplication
    error_count: int = 0                 # Validation errors found
    output_path: Path | None = None      # Written document (SUCCESS only)
    error: str | None = None             # Failure reason summary
