from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .row_result import RowFailure

"""Import call result and fatal error models.

A single import call ends in exactly one of:

- an ImportResult (COMPLETED), possibly with per-row failures
- an ImportFatalError (PARSE_FAILED / WRITE_FAILED, or rejected before parsing)

Per-row failures are data and never raised; fatal errors are never folded into
the per-row error list.
"""

__all__ = [
    "ImportStage",
    "ImportResult",
    "ImportFatalError",
    "MissingCsvDataError",
    "UnknownDataKindError",
    "CsvParseError",
    "BulkWriteError",
]


class ImportStage(Enum):
    """Stages of one import call.

    State transitions:
        received -> parsing -> (parse_failed | validating) -> resolving
        -> writing -> (completed | write_failed)
    """
    RECEIVED = "received"
    PARSING = "parsing"
    PARSE_FAILED = "parse_failed"
    VALIDATING = "validating"
    RESOLVING = "resolving"
    WRITING = "writing"
    COMPLETED = "completed"
    WRITE_FAILED = "write_failed"


class ImportFatalError(Exception):
    """Aborts a whole import call. Carries the stage it stopped in."""

    error_type = "PROCESSING_ERROR"
    default_stage = ImportStage.RECEIVED

    def __init__(self, message: str, *, stage: ImportStage | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage or self.default_stage


class MissingCsvDataError(ImportFatalError):
    """csvData absent, not a string, or empty."""


class UnknownDataKindError(ImportFatalError):
    """Data type name not one of the importable kinds."""


class CsvParseError(ImportFatalError):
    """CSV structure is malformed; no row boundaries can be trusted."""

    error_type = "CSV_PARSE_ERROR"
    default_stage = ImportStage.PARSE_FAILED

    def __init__(self, message: str, *, line: int | None = None) -> None:
        super().__init__(message)
        self.line = line


class BulkWriteError(ImportFatalError):
    """The single bulk insert of the call failed; nothing was persisted."""

    error_type = "BULK_WRITE_ERROR"
    default_stage = ImportStage.WRITE_FAILED


@dataclass
class ImportResult:
    """Outcome of a completed import call.

    ``success + failed`` always equals the number of data rows submitted.
    """
    data_type: str
    success: int = 0
    failed: int = 0
    errors: list[RowFailure] = field(default_factory=list)
    stage: ImportStage = ImportStage.COMPLETED

    @property
    def total_rows(self) -> int:
        return self.success + self.failed

    def add_failure(self, failure: RowFailure) -> None:
        self.failed += 1
        self.errors.append(failure)

    def to_dict(self) -> dict[str, Any]:
        """API payload: ``{success, failed, errors: [{row, data, error}]}``."""
        return {
            "success": self.success,
            "failed": self.failed,
            "errors": [e.to_dict() for e in self.errors],
        }
