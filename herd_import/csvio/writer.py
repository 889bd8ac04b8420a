from __future__ import annotations

from typing import Any

import pandas as pd

from herd_import.validation.kinds import get_kind

"""CSV templates and exports.

- render_template(): header-only CSV with the recognized columns of a kind, in
  the order the importer documents them
- export_records(): persisted entities of a kind as CSV (entity column order)
"""

__all__ = [
    "render_template",
    "export_records",
]


def render_template(data_type: str) -> str:
    """Header-only CSV template for a data type.

    Raises:
        UnknownDataKindError: data_type is not importable
    """
    kind = get_kind(data_type)
    return pd.DataFrame(columns=kind.column_names).to_csv(index=False, lineterminator="\n")


def export_records(data_type: str, records: list[dict[str, Any]]) -> str:
    """Render persisted records of a data type as CSV.

    Missing values are written as empty cells; dates use ISO format.
    """
    kind = get_kind(data_type)
    df = pd.DataFrame.from_records(records, columns=kind.entity.column_names())
    return df.to_csv(index=False, lineterminator="\n")
