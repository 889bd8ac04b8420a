from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

"""Tagged row outcome: RowOk(value) | RowErr(failure).

Validation and reference resolution each return one of these per row instead
of raising, so a bad row never interrupts the rest of the batch.
"""

__all__ = [
    "RowFailure",
    "RowOk",
    "RowErr",
    "RowOutcome",
    "ROW_VALIDATION_ERROR",
    "REFERENCE_NOT_FOUND",
]

T = TypeVar("T")

ROW_VALIDATION_ERROR = "ROW_VALIDATION_ERROR"
REFERENCE_NOT_FOUND = "REFERENCE_NOT_FOUND"


@dataclass(frozen=True)
class RowFailure:
    """Per-row failure descriptor.

    Attributes:
        row: 1-based data row number
        data: The offending raw row mapping
        error: Human readable reason
        error_type: ROW_VALIDATION_ERROR or REFERENCE_NOT_FOUND (not part of the
            API payload, used by the error log)
    """
    row: int
    data: dict[str, Any]
    error: str
    error_type: str = ROW_VALIDATION_ERROR

    def to_dict(self) -> dict[str, Any]:
        return {"row": self.row, "data": self.data, "error": self.error}


@dataclass(frozen=True)
class RowOk(Generic[T]):
    value: T
    ok = True


@dataclass(frozen=True)
class RowErr:
    failure: RowFailure
    ok = False


RowOutcome = RowOk[T] | RowErr
