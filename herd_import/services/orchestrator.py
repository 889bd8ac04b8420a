from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from herd_import.csvio.reader import read_csv_text
from herd_import.db.storage import PostgresStorage, Storage
from herd_import.logging.error_log import ErrorLogBuffer
from herd_import.models.config_models import ImportConfig
from herd_import.models.error_record import FILE_LEVEL_ROW, ErrorRecord
from herd_import.models.import_result import ImportFatalError, ImportResult
from herd_import.models.processing_result import BatchStatsAccumulator, FileStat, ProcessingResult

from .pipeline import import_csv
from .progress import ProgressTracker

"""Batch orchestration for the CLI.

Runs one import call per mapped CSV file, in ``file_mappings`` order, against a
single storage. Files mapped to parents (properties, animals) should therefore
be listed before the files that reference them.

Per-row failures and fatal file errors are buffered as ErrorRecords and
flushed once at the end of the run.
"""

__all__ = [
    "ProcessingError",
    "scan_csv_files",
    "process_all",
]

logger = logging.getLogger(__name__)

PROCESSING_ERROR = "PROCESSING_ERROR"


class ProcessingError(Exception):
    """Fatal error that prevents the run from starting (directory problems)."""


@dataclass(frozen=True)
class _FileOutcome:
    status: str  # success/failed
    result: ImportResult | None
    error: str | None = None


def scan_csv_files(directory: Path) -> list[Path]:
    """List .csv files in directory (non-recursive, sorted by name).

    Raises:
        ProcessingError: directory missing, not a directory or unreadable
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        return sorted(
            p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == ".csv"
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def _plan_files(config: ImportConfig, found: list[Path]) -> tuple[list[tuple[Path, str]], int]:
    """Pair mapped files with their data type, in config order.

    Returns:
        (planned files, skipped file count)
    """
    by_name = {p.name: p for p in found}
    planned: list[tuple[Path, str]] = []
    skipped = 0
    for file_name, data_type in config.file_mappings.items():
        path = by_name.get(file_name)
        if path is None:
            logger.info("mapped file not found, skipped: %s", file_name)
            skipped += 1
            continue
        planned.append((path, data_type))
    for name in sorted(set(by_name) - set(config.file_mappings)):
        logger.warning("no mapping for file, skipped: %s", name)
        skipped += 1
    return planned, skipped


def _import_file(
    path: Path,
    data_type: str,
    storage: Storage,
    config: ImportConfig,
    error_log: ErrorLogBuffer,
) -> _FileOutcome:
    def record_file_error(error_type: str, message: str) -> _FileOutcome:
        logger.error("file=%s data_type=%s %s", path.name, data_type, message)
        error_log.append(
            ErrorRecord.create(path.name, data_type, FILE_LEVEL_ROW, error_type, message)
        )
        return _FileOutcome(status="failed", result=None, error=message)

    try:
        csv_text = read_csv_text(path)
    except (OSError, UnicodeDecodeError) as e:
        return record_file_error(PROCESSING_ERROR, f"cannot read file: {e}")

    try:
        result = import_csv(data_type, csv_text, storage, null_sentinels=config.null_sentinels)
    except ImportFatalError as e:
        return record_file_error(e.error_type, str(e))
    except Exception as e:
        # storage lookup errors (psycopg2 etc.) fail this file only
        logger.debug("file=%s unexpected error", path.name, exc_info=True)
        return record_file_error(PROCESSING_ERROR, str(e))

    for failure in result.errors:
        error_log.append(
            ErrorRecord.create(path.name, data_type, failure.row, failure.error_type, failure.error)
        )
    return _FileOutcome(status="success", result=result)


def process_all(config: ImportConfig, storage: Storage) -> ProcessingResult:
    """Import every mapped CSV file of the configured directory.

    Args:
        config: Run configuration (directory, file mappings, null sentinels)
        storage: Target storage shared by all files of the run

    Returns:
        ProcessingResult with aggregated metrics and per-file stats

    Raises:
        ProcessingError: the source directory cannot be scanned
    """
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer()

    found = scan_csv_files(Path(config.source_directory))
    planned, skipped = _plan_files(config, found)

    file_stats: list[FileStat] = []
    success_count = 0
    failed_count = 0
    total_rows = 0
    total_failed_rows = 0

    with ProgressTracker(len(planned)) as progress:
        for path, data_type in planned:
            progress.start_file(path)
            batch_stats = BatchStatsAccumulator()
            if isinstance(storage, PostgresStorage):
                storage.metrics_callback = lambda m: batch_stats.add_batch_time(m.elapsed_seconds)

            file_start = datetime.now(UTC)
            outcome = _import_file(path, data_type, storage, config, error_log)
            file_elapsed = (datetime.now(UTC) - file_start).total_seconds()

            inserted = outcome.result.success if outcome.result else 0
            failed_rows = outcome.result.failed if outcome.result else 0
            if outcome.status == "success":
                success_count += 1
                total_rows += inserted
                total_failed_rows += failed_rows
            else:
                failed_count += 1

            total_batches, avg_batch, p95_batch = batch_stats.get_stats()
            file_stats.append(FileStat(
                file_name=path.name,
                data_type=data_type,
                status=outcome.status,
                inserted_rows=inserted,
                failed_rows=failed_rows,
                elapsed_seconds=file_elapsed,
                error=outcome.error,
                total_batches=total_batches,
                avg_batch_seconds=avg_batch,
                p95_batch_seconds=p95_batch,
            ))
            progress.finish_file(success=success_count, failed=failed_count, rows=total_rows)

    log_path = error_log.flush()
    if log_path is not None:
        logger.info("error log written: %s", log_path)

    end_time = datetime.now(UTC)
    elapsed_seconds = (end_time - start_time).total_seconds()
    throughput_rps = total_rows / elapsed_seconds if elapsed_seconds > 0 else 0.0

    return ProcessingResult(
        success_files=success_count,
        failed_files=failed_count,
        total_inserted_rows=total_rows,
        total_failed_rows=total_failed_rows,
        skipped_files=skipped,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed_seconds,
        throughput_rows_per_sec=throughput_rps,
        file_stats=file_stats,
    )
