from __future__ import annotations

import statistics
from dataclasses import dataclass
from datetime import datetime

"""Run-level result models for the batch CLI.

Aggregates one ImportResult per CSV file into the numbers shown on the
SUMMARY line.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file import statistics."""
    file_name: str
    data_type: str
    status: str  # success/failed
    inserted_rows: int
    failed_rows: int
    elapsed_seconds: float
    error: str | None = None  # fatal error message (failed files only)
    total_batches: int = 0
    avg_batch_seconds: float = 0.0
    p95_batch_seconds: float = 0.0


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results for one CLI run."""
    success_files: int  # files whose import call completed
    failed_files: int  # files that hit a fatal error
    total_inserted_rows: int
    total_failed_rows: int  # per-row failures across completed files
    skipped_files: int  # mapped-but-missing + unmapped csv files
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float
    file_stats: list[FileStat] | None = None


class BatchStatsAccumulator:
    """Accumulates execute_values page timings for FileStat."""

    def __init__(self) -> None:
        self.batch_times: list[float] = []

    def add_batch_time(self, elapsed_seconds: float) -> None:
        self.batch_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Calculate batch statistics.

        Returns:
            tuple: (total_batches, avg_batch_seconds, p95_batch_seconds)
        """
        if not self.batch_times:
            return (0, 0.0, 0.0)

        total_batches = len(self.batch_times)
        avg_batch_seconds = statistics.mean(self.batch_times)

        if total_batches == 1:
            p95_batch_seconds = self.batch_times[0]
        else:
            p95_batch_seconds = statistics.quantiles(
                self.batch_times, n=20, method='inclusive'
            )[18]  # 95th percentile

        return (total_batches, avg_batch_seconds, p95_batch_seconds)
