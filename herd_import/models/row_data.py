from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Row models for the CSV import pipeline.

A row moves through three shapes:

- RawRow: string cells straight from the CSV parser (natural keys, untyped)
- NormalizedRow: schema-checked and coerced values (still natural keys)
- the persisted entity built by the resolver (see entities.py)
"""

__all__ = [
    "RawRow",
    "NormalizedRow",
    "EXTRA_CELLS_KEY",
]

# 余剰セル (ヘッダより列が多い行) の格納キー
EXTRA_CELLS_KEY = "_extra"


@dataclass(frozen=True)
class RawRow:
    """A single data row as parsed from CSV text.

    ``row_number`` is the 1-based position among data rows; the header and
    skipped blank lines do not count.
    """
    row_number: int
    values: dict[str, str]  # header column -> cell text (missing cells absent)
    extra: tuple[str, ...] = ()  # cells beyond the header width

    @property
    def data(self) -> dict[str, Any]:
        """The row as reported back to the caller in per-row errors."""
        out: dict[str, Any] = dict(self.values)
        if self.extra:
            out[EXTRA_CELLS_KEY] = list(self.extra)
        return out


@dataclass(frozen=True)
class NormalizedRow:
    """A validated row with typed values, keyed by CSV column name.

    Absent optional columns are present with value None.
    """
    row_number: int
    data_type: str
    values: dict[str, Any]
    raw: RawRow = field(repr=False, compare=False)
