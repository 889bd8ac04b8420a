from __future__ import annotations

import re
from datetime import UTC, datetime

import pytest

from herd_import.models.processing_result import ProcessingResult
from herd_import.services.summary import render_summary_line

"""SUMMARY line contract: wrappers parse this exact key order."""

pytestmark = pytest.mark.contract

SUMMARY_REGEX = re.compile(
    r"^SUMMARY files=(\d+)/(\d+) success=(\d+) failed=(\d+) rows=(\d+) failed_rows=(\d+) "
    r"skipped_files=(\d+) elapsed_sec=(\d+(?:\.\d+)?) throughput_rps=(\d+(?:\.\d+)?)$"
)


@pytest.mark.parametrize("elapsed,throughput", [(0.0, 0.0), (2.0, 500.0), (0.0031, 12.3456), (1234.5, 0.0001)])
def test_summary_line_matches_regex(elapsed, throughput):
    result = ProcessingResult(
        success_files=3,
        failed_files=1,
        total_inserted_rows=1000,
        total_failed_rows=7,
        skipped_files=2,
        start_time=datetime(2024, 1, 1, tzinfo=UTC),
        end_time=datetime(2024, 1, 1, tzinfo=UTC),
        elapsed_seconds=elapsed,
        throughput_rows_per_sec=throughput,
    )
    line = render_summary_line(4, result)
    match = SUMMARY_REGEX.match(line)
    assert match is not None, line
    assert match.groups()[:7] == ("4", "4", "3", "1", "1000", "7", "2")
