from __future__ import annotations

import csv
import io
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from herd_import.models.import_result import CsvParseError
from herd_import.models.row_data import RawRow

"""CSV row parser.

- First non-blank line is the header; names are stripped, case is kept.
- Blank lines (no cells, or only empty cells) are skipped and do not consume a
  row number.
- Column-count mismatch is NOT a parse error: missing cells are simply absent
  from the row mapping, surplus cells are kept on RawRow.extra. Detecting the
  consequences is the validator's job.
- Structural errors (e.g. unterminated quoted field) raise CsvParseError. The
  reader runs in strict mode so such input is never silently accepted.

parse_csv() is lazy: rows are produced while iterating, and a structural error
surfaces at the point the parser reaches it.
"""

__all__ = [
    "parse_csv",
    "read_csv_text",
    "preview_csv_file",
    "FilePreview",
]

_BOM = "\ufeff"


def parse_csv(csv_text: str) -> Iterator[RawRow]:
    """Parse CSV text into RawRow objects (single pass, non-restartable).

    Parameters
    ----------
    csv_text: Full CSV file contents (header line first)

    Yields
    ------
    RawRow with a 1-based data row number

    Raises
    ------
    CsvParseError: malformed CSV structure
    """
    if csv_text.startswith(_BOM):
        csv_text = csv_text[len(_BOM):]
    reader = csv.reader(io.StringIO(csv_text, newline=""), strict=True)

    header: list[str] | None = None
    row_number = 0
    while True:
        try:
            cells = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            raise CsvParseError(
                f"CSV parsing error at line {reader.line_num}: {e}", line=reader.line_num
            ) from e

        if _is_blank(cells):
            continue
        if header is None:
            header = [c.strip() for c in cells]
            continue

        row_number += 1
        values = dict(zip(header, cells))
        extra = tuple(cells[len(header):])
        yield RawRow(row_number=row_number, values=values, extra=extra)


def _is_blank(cells: list[str]) -> bool:
    return not cells or all(not c.strip() for c in cells)


def read_csv_text(path: Path) -> str:
    """Read a CSV file as text (UTF-8, BOM tolerated)."""
    return path.read_text(encoding="utf-8-sig")


@dataclass
class FilePreview:
    file_name: str
    columns: list[str]
    rows: list[dict[str, str]]


def preview_csv_file(path: Path, nrows: int = 3) -> FilePreview:
    """Header and first rows of a CSV file, for quick inspection.

    Every cell is read as text; pandas NA conversion is disabled so that
    strings such as ``NA`` show up exactly as they will reach the validator.
    """
    df = pd.read_csv(path, nrows=nrows, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    columns = [str(c).strip() for c in df.columns]
    df.columns = columns
    return FilePreview(
        file_name=path.name,
        columns=columns,
        rows=df.to_dict(orient="records"),
    )
