from __future__ import annotations

from herd_import.models.processing_result import ProcessingResult

"""SUMMARY line rendering for the batch CLI.

Format:
    SUMMARY files={n}/{n} success={files} failed={files} rows={inserted}
    failed_rows={rows} skipped_files={files} elapsed_sec={s} throughput_rps={r}
"""

__all__ = [
    "render_summary_line",
    "format_number",
]


def format_number(value: float) -> str:
    """Render a metric without trailing zeros or scientific notation.

    >>> format_number(2.0)
    '2'
    >>> format_number(0.0000123)
    '0.000012'
    >>> format_number(1234.5678)
    '1234.57'
    """
    if value == int(value):
        return str(int(value))
    if abs(value) < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.2f}".rstrip("0").rstrip(".")


def render_summary_line(total_files: int, result: ProcessingResult) -> str:
    """Render the SUMMARY line for a finished run.

    Args:
        total_files: Number of files that went through an import call
        result: Aggregated run metrics
    """
    return (
        f"SUMMARY files={total_files}/{total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"rows={result.total_inserted_rows} "
        f"failed_rows={result.total_failed_rows} "
        f"skipped_files={result.skipped_files} "
        f"elapsed_sec={format_number(result.elapsed_seconds)} "
        f"throughput_rps={format_number(result.throughput_rows_per_sec)}"
    )
