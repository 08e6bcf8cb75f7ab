from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from ..excel.reader import MalformedSourceError
from ..logging.error_log import LOGS_DIR, ErrorLogBuffer
from ..models.config_models import AppConfig
from ..models.excel_file import ExcelFile, FileStatus
from ..models.processing_result import FileStat, ProcessingResult
from .mapping_proposal import MappingProposalError
from .order_pipeline import parse_orders
from .progress import ProgressTracker
from .shipment_document import SerializationContractError, build_records, render_document

"""Run orchestration: order exports in, shipment documents out.

Each file is handled on its own; one bad file never stops the run:
- malformed source / mapping / serialization failure -> FAILED + file-level error record
- validation errors -> INVALID, every error logged, no document written
- otherwise -> SUCCESS, ``<stem>.xml`` written to the output directory

Only a missing or unreadable source directory is fatal (ProcessingError).
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ProcessingError",
    "process_all",
    "scan_excel_files",
]

DOCUMENT_SUFFIX = ".xml"


class ProcessingError(Exception):
    """Fatal error that prevents the run from processing any file."""


def scan_excel_files(directory: Path) -> list[Path]:
    """List .xlsx files in ``directory`` (non-recursive, sorted by name).

    Excel lock files (``~$name.xlsx``) are skipped.

    Raises:
        ProcessingError: directory missing or unreadable
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix == ".xlsx" and not p.name.startswith("~$")
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def _failed(file_path: Path, start: datetime, rows: int, error: str) -> ExcelFile:
    return ExcelFile(
        path=file_path,
        name=file_path.name,
        start_time=start,
        end_time=datetime.now(UTC),
        status=FileStatus.FAILED,
        total_rows=rows,
        error_count=1,
        error=error,
    )


def _process_single_file(
    file_path: Path,
    config: AppConfig,
    output_dir: Path,
    error_log: ErrorLogBuffer,
) -> ExcelFile:
    start = datetime.now(UTC)
    name = file_path.name
    mapping_file = Path(config.mapping_file) if config.mapping_file else None

    try:
        parsed = parse_orders(file_path, mapping_file=mapping_file)
    except MalformedSourceError as e:
        error_log.record_file_failure(name, "MALFORMED_SOURCE", str(e))
        logger.error(f"{name}: {e}")
        return _failed(file_path, start, 0, str(e))
    except MappingProposalError as e:
        error_log.record_file_failure(name, "MAPPING_ERROR", str(e))
        logger.error(f"{name}: {e}")
        return _failed(file_path, start, 0, str(e))

    total_rows = len(parsed.raw_rows)
    if parsed.errors:
        error_log.record_validation(name, parsed.errors)
        logger.warning(f"{name}: {len(parsed.errors)} validation errors; document not written")
        return ExcelFile(
            path=file_path,
            name=name,
            start_time=start,
            end_time=datetime.now(UTC),
            status=FileStatus.INVALID,
            total_rows=total_rows,
            error_count=len(parsed.errors),
            error="validation errors",
        )

    try:
        records = build_records(parsed.rows, config.generator)
    except SerializationContractError as e:
        error_log.record_file_failure(name, "SERIALIZATION_CONTRACT", str(e))
        logger.error(f"{name}: {e}")
        return _failed(file_path, start, total_rows, str(e))

    output_path = output_dir / f"{file_path.stem}{DOCUMENT_SUFFIX}"
    try:
        output_path.write_text(render_document(records), encoding="utf-8")
    except OSError as e:
        error_log.record_file_failure(name, "OUTPUT_WRITE_ERROR", str(e))
        logger.error(f"{name}: cannot write {output_path}: {e}")
        return _failed(file_path, start, total_rows, str(e))

    logger.info(f"{name}: {total_rows} rows -> {len(records)} records ({output_path.name})")
    return ExcelFile(
        path=file_path,
        name=name,
        start_time=start,
        end_time=datetime.now(UTC),
        status=FileStatus.SUCCESS,
        total_rows=total_rows,
        emitted_records=len(records),
        output_path=output_path,
    )


def process_all(config: AppConfig, logs_dir: Path = LOGS_DIR) -> ProcessingResult:
    """Generate a shipment document for every order export in the source directory.

    Args:
        config: run configuration
        logs_dir: where the JSON Lines error log is written

    Returns:
        ProcessingResult with aggregated counters and per-file stats

    Raises:
        ProcessingError: source directory missing/unreadable, or output directory not creatable
    """
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer(logs_dir)

    file_paths = scan_excel_files(Path(config.source_directory))
    output_dir = Path(config.output_directory)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ProcessingError(f"Cannot create output directory {output_dir}: {e}") from e

    file_stats: list[FileStat] = []

    with ProgressTracker(len(file_paths)) as progress:
        for file_path in file_paths:
            progress.start_file(file_path)
            result = _process_single_file(file_path, config, output_dir, error_log)

            progress.finish_file(result.status, result.emitted_records)

            elapsed = (result.end_time - result.start_time).total_seconds()
            file_stats.append(
                FileStat(
                    file_name=result.name,
                    status=result.status.value,
                    rows=result.total_rows,
                    records=result.emitted_records,
                    errors=result.error_count,
                    elapsed_seconds=elapsed,
                )
            )

    # エラーログは実行終了時に一括書き出し
    counts = error_log.counts_by_type()
    try:
        log_path = error_log.flush()
    except OSError as e:
        logger.warning(f"error log could not be written: {e}")
    else:
        if log_path is not None:
            logger.info(f"error log: {log_path} {dict(counts)}")

    end_time = datetime.now(UTC)
    return ProcessingResult(
        success_files=sum(1 for s in file_stats if s.status == FileStatus.SUCCESS.value),
        failed_files=sum(1 for s in file_stats if s.status != FileStatus.SUCCESS.value),
        total_rows=sum(s.rows for s in file_stats),
        total_records=sum(s.records for s in file_stats),
        total_errors=sum(s.errors for s in file_stats),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )
