from __future__ import annotations

from datetime import UTC, datetime

import pytest

from herd_import.models.processing_result import ProcessingResult
from herd_import.services.summary import format_number, render_summary_line


def _result(**kw) -> ProcessingResult:
    base = dict(
        success_files=2,
        failed_files=1,
        total_inserted_rows=150,
        total_failed_rows=3,
        skipped_files=1,
        start_time=datetime(2024, 1, 1, tzinfo=UTC),
        end_time=datetime(2024, 1, 1, 0, 0, 2, tzinfo=UTC),
        elapsed_seconds=2.0,
        throughput_rows_per_sec=75.0,
    )
    base.update(kw)
    return ProcessingResult(**base)


def test_render_summary_line():
    line = render_summary_line(3, _result())
    assert line == (
        "SUMMARY files=3/3 success=2 failed=1 rows=150 failed_rows=3 "
        "skipped_files=1 elapsed_sec=2 throughput_rps=75"
    )


def test_render_summary_fractional_metrics():
    line = render_summary_line(1, _result(elapsed_seconds=0.123456, throughput_rows_per_sec=1215.0307))
    assert line.endswith("elapsed_sec=0.12 throughput_rps=1215.03")


@pytest.mark.parametrize("value,expected", [
    (0.0, "0"),
    (3.0, "3"),
    (0.0004567, "0.000457"),
    (1.5, "1.5"),
    (66.666, "66.67"),
])
def test_format_number(value, expected):
    assert format_number(value) == expected
