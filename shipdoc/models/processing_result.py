from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Processing result models.

Aggregated per-run outcome used for the SUMMARY line and exit code decision.
"""

__all__ = [
    "FileStat",
    "ProcessingResult",
]


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics."""
    file_name: str  # ファイル名
    status: str  # success/invalid/failed
    rows: int  # 読み取り行数
    records: int  # 出力レコード数 (数量複製後)
    errors: int  # 検証エラー数
    elapsed_seconds: float  # ファイル処理時間


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results and summary output for a run."""
    success_files: int
    failed_files: int  # invalid + failed
    total_rows: int
    total_records: int
    total_errors: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None
