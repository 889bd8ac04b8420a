from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Any

from jsonschema import Draft202012Validator, FormatChecker
from jsonschema.exceptions import ValidationError

from herd_import.models.row_data import NormalizedRow, RawRow
from herd_import.models.row_result import ROW_VALIDATION_ERROR, RowErr, RowFailure, RowOk

from .kinds import BOOLEAN, DATE, DECIMAL, INTEGER, DataKind

"""Per-row validation and normalization.

Steps for one RawRow:
1. keep only recognized columns, strip cells, drop empty cells and null
   sentinels (they count as absent)
2. validate the remaining strings against the kind's JSON Schema
3. only if valid, coerce to typed values (date, bool, int, Decimal)

The function is pure: no lookups, no shared state between rows.
"""

__all__ = [
    "RowValidator",
    "TRUTHY",
    "FALSY",
]

TRUTHY = frozenset({"true", "yes", "y", "1"})
FALSY = frozenset({"false", "no", "n", "0"})

_WHOLE_NUMBER_RE = re.compile(r"^[0-9]+$")
_DECIMAL_RE = re.compile(r"^[0-9]+(\.[0-9]+)?$")

_FORMAT_CHECKER = FormatChecker()


@_FORMAT_CHECKER.checks("boolean")
def _is_boolean(value: object) -> bool:
    if not isinstance(value, str):
        return True
    return value.lower() in TRUTHY | FALSY


@_FORMAT_CHECKER.checks("whole-number")
def _is_whole_number(value: object) -> bool:
    if not isinstance(value, str):
        return True
    return bool(_WHOLE_NUMBER_RE.match(value))


@_FORMAT_CHECKER.checks("decimal")
def _is_decimal(value: object) -> bool:
    if not isinstance(value, str):
        return True
    return bool(_DECIMAL_RE.match(value))


class RowValidator:
    """Validator for one data kind. Reusable across rows and calls."""

    def __init__(self, kind: DataKind, null_sentinels: Iterable[str] | None = None) -> None:
        self.kind = kind
        self.null_sentinels = frozenset(s.strip().upper() for s in (null_sentinels or ()))
        self._schema_validator = Draft202012Validator(
            kind.json_schema(), format_checker=_FORMAT_CHECKER
        )
        self._order = {name: i for i, name in enumerate(kind.column_names)}

    def validate(self, raw: RawRow) -> RowOk[NormalizedRow] | RowErr:
        instance = self._present_cells(raw)
        errors = list(self._schema_validator.iter_errors(instance))
        if errors:
            reason = "; ".join(_describe(e) for e in sorted(errors, key=self._error_position))
            return RowErr(RowFailure(
                row=raw.row_number,
                data=raw.data,
                error=reason,
                error_type=ROW_VALIDATION_ERROR,
            ))
        return RowOk(NormalizedRow(
            row_number=raw.row_number,
            data_type=self.kind.name,
            values=self._coerce(instance),
            raw=raw,
        ))

    def _present_cells(self, raw: RawRow) -> dict[str, str]:
        present: dict[str, str] = {}
        for name in self.kind.column_names:
            cell = raw.values.get(name)
            if cell is None:
                continue
            stripped = cell.strip()
            if not stripped or stripped.upper() in self.null_sentinels:
                continue
            present[name] = stripped
        return present

    def _coerce(self, instance: dict[str, str]) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for column in self.kind.columns:
            value = instance.get(column.name)
            if column.rule == BOOLEAN:
                values[column.name] = value is not None and value.lower() in TRUTHY
            elif value is None:
                values[column.name] = None
            elif column.rule == DATE:
                values[column.name] = date.fromisoformat(value)
            elif column.rule == INTEGER:
                values[column.name] = int(value)
            elif column.rule == DECIMAL:
                values[column.name] = Decimal(value)
            else:
                values[column.name] = value
        return values

    def _error_position(self, error: ValidationError) -> int:
        if error.path:
            return self._order.get(str(error.path[0]), len(self._order))
        # required: message starts with the repr of the missing column
        for name, pos in self._order.items():
            if error.message.startswith(repr(name)):
                return pos
        return len(self._order)


def _describe(error: ValidationError) -> str:
    if error.path:
        return f"{error.path[0]}: {error.message}"
    return error.message

