from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from herd_import.csvio.reader import parse_csv
from herd_import.db.batch_insert import BatchInsertError
from herd_import.db.storage import Storage
from herd_import.models.entities import Entity
from herd_import.models.import_result import (
    BulkWriteError,
    ImportResult,
    ImportStage,
    MissingCsvDataError,
)
from herd_import.models.row_data import NormalizedRow, RawRow
from herd_import.models.row_result import RowErr
from herd_import.validation.kinds import get_kind
from herd_import.validation.validator import RowValidator

from .resolver import ReferenceResolver

"""CSV import pipeline: the boundary operation behind every import surface.

    csv text -> parse (all rows) -> validate (per row) -> resolve (per row)
             -> one bulk write -> ImportResult

Rows are independent: a validation or reference failure is recorded in the
result and the remaining rows carry on. Parse failures and bulk write failures
are fatal for the call and raised as ImportFatalError subclasses.
"""

__all__ = [
    "import_csv",
]

logger = logging.getLogger(__name__)


def import_csv(
    data_type: str,
    csv_data: Any,
    storage: Storage,
    *,
    null_sentinels: Iterable[str] | None = None,
) -> ImportResult:
    """Import one CSV submission of the given data type.

    Args:
        data_type: ``animals``, ``properties``, ``fields``, ``vaccinations``,
            ``events``, ``calving-records`` or ``slaughter-records``
        csv_data: Full CSV text (header line first)
        storage: Lookup + bulk insert collaborator
        null_sentinels: Cell values treated as empty (compared upper-cased)

    Returns:
        ImportResult with success/failed counts and per-row failures

    Raises:
        MissingCsvDataError: csv_data is not a non-empty string
        UnknownDataKindError: data_type is not importable
        CsvParseError: CSV structure is malformed (nothing written)
        BulkWriteError: the bulk insert failed (nothing written)
    """
    if not isinstance(csv_data, str) or not csv_data.strip():
        raise MissingCsvDataError("CSV data is required")
    kind = get_kind(data_type)
    result = ImportResult(data_type=kind.name, stage=ImportStage.RECEIVED)

    result.stage = ImportStage.PARSING
    # 全行を先に読み切る: 構造エラー時は検証・書き込みに進まない
    raw_rows: list[RawRow] = list(parse_csv(csv_data))
    logger.debug("data_type=%s parsed_rows=%d", kind.name, len(raw_rows))

    result.stage = ImportStage.VALIDATING
    validator = RowValidator(kind, null_sentinels)
    normalized: list[NormalizedRow] = []
    for raw in raw_rows:
        outcome = validator.validate(raw)
        if isinstance(outcome, RowErr):
            result.add_failure(outcome.failure)
        else:
            normalized.append(outcome.value)

    result.stage = ImportStage.RESOLVING
    resolver = ReferenceResolver(storage)
    entities: list[Entity] = []
    for row in normalized:
        outcome = resolver.resolve(row)
        if isinstance(outcome, RowErr):
            result.add_failure(outcome.failure)
        else:
            entities.append(outcome.value)
    # 検証失敗と参照失敗が混在しても行番号順で返す
    result.errors.sort(key=lambda f: f.row)

    result.stage = ImportStage.WRITING
    try:
        written = storage.bulk_create(kind.entity, entities)
    except BatchInsertError as e:
        logger.error("data_type=%s bulk write failed rows=%d: %s", kind.name, len(entities), e)
        raise BulkWriteError(f"Bulk insert into {kind.table} failed: {e}") from e
    result.success = written

    result.stage = ImportStage.COMPLETED
    logger.info(
        "data_type=%s rows=%d success=%d failed=%d",
        kind.name,
        len(raw_rows),
        result.success,
        result.failed,
    )
    return result

