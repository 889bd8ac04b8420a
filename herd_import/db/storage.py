from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, Protocol

from herd_import.models.entities import Animal, Entity, Property

from .batch_insert import BatchInsertError, BatchMetrics, batch_insert

"""Persistence adapters used by the import pipeline.

Both adapters offer the same surface:

- find_animal_id(tag_number) / find_property_id(name): natural key lookups
- bulk_create(entity_type, entities): one atomic bulk insert
- list_records(entity_type): persisted rows as dicts (CSV export)

PostgresStorage wraps a psycopg2 cursor on a connection in autocommit mode and
brackets each bulk insert with explicit BEGIN/COMMIT. MemoryStorage keeps
everything in dicts and is used for dry runs and tests.
"""

__all__ = [
    "Storage",
    "PostgresStorage",
    "MemoryStorage",
]

logger = logging.getLogger(__name__)


class Storage(Protocol):
    def find_animal_id(self, tag_number: str) -> str | None: ...

    def find_property_id(self, name: str) -> str | None: ...

    def bulk_create(self, entity_type: type[Entity], entities: Sequence[Entity]) -> int: ...

    def list_records(self, entity_type: type[Entity]) -> list[dict[str, Any]]: ...


class PostgresStorage:
    """Storage backed by a psycopg2 cursor."""

    def __init__(
        self,
        cursor: Any,
        *,
        page_size: int = 1000,
        metrics_callback: Callable[[BatchMetrics], None] | None = None,
    ) -> None:
        self.cursor = cursor
        self.page_size = page_size
        self.metrics_callback = metrics_callback

    def find_animal_id(self, tag_number: str) -> str | None:
        self.cursor.execute(
            f'SELECT id FROM "{Animal.TABLE}" WHERE tag_number = %s', (tag_number,)
        )
        row = self.cursor.fetchone()
        return row[0] if row else None

    def find_property_id(self, name: str) -> str | None:
        # 物件名は一意制約なし: 最初に登録されたものを採用
        self.cursor.execute(
            f'SELECT id FROM "{Property.TABLE}" WHERE name = %s ORDER BY created_at, id LIMIT 1',
            (name,),
        )
        row = self.cursor.fetchone()
        return row[0] if row else None

    def bulk_create(self, entity_type: type[Entity], entities: Sequence[Entity]) -> int:
        """Insert all entities in one transaction.

        Raises:
            BatchInsertError: insert or commit failed; the transaction was rolled back
        """
        if not entities:
            return 0
        try:
            self.cursor.execute("BEGIN")
        except Exception as e:
            raise BatchInsertError(f"failed to begin transaction: {e}") from e
        try:
            result = batch_insert(
                cursor=self.cursor,
                table=entity_type.TABLE,
                columns=entity_type.column_names(),
                rows=[e.as_row() for e in entities],
                page_size=self.page_size,
                metrics_callback=self.metrics_callback,
            )
            self.cursor.execute("COMMIT")
        except Exception as e:
            self._rollback()
            if isinstance(e, BatchInsertError):
                raise
            raise BatchInsertError(f"commit failed: {e}") from e
        logger.debug("table=%s inserted_rows=%d", entity_type.TABLE, result.inserted_rows)
        return result.inserted_rows

    def list_records(self, entity_type: type[Entity]) -> list[dict[str, Any]]:
        columns = entity_type.column_names()
        cols_sql = ",".join(f'"{c}"' for c in columns)
        self.cursor.execute(
            f'SELECT {cols_sql} FROM "{entity_type.TABLE}" ORDER BY created_at, id'
        )
        return [dict(zip(columns, row)) for row in self.cursor.fetchall()]

    def _rollback(self) -> None:
        try:
            self.cursor.execute("ROLLBACK")
        except Exception as rollback_e:
            # 元の例外を優先する
            logger.error("rollback failed: %s", rollback_e)


class MemoryStorage:
    """In-memory storage with the same contract as PostgresStorage.

    Enforces the unique animal tag number; a violating bulk write persists
    nothing.
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[Entity]] = {}
        self._animal_ids_by_tag: dict[str, str] = {}

    def find_animal_id(self, tag_number: str) -> str | None:
        return self._animal_ids_by_tag.get(tag_number)

    def find_property_id(self, name: str) -> str | None:
        for prop in self.tables.get(Property.TABLE, []):
            if prop.name == name:  # type: ignore[attr-defined]
                return prop.id  # type: ignore[attr-defined]
        return None

    def bulk_create(self, entity_type: type[Entity], entities: Sequence[Entity]) -> int:
        if not entities:
            return 0
        if entity_type is Animal:
            seen = set(self._animal_ids_by_tag)
            for animal in entities:
                tag = animal.tag_number  # type: ignore[attr-defined]
                if tag in seen:
                    raise BatchInsertError(
                        f'duplicate key value violates unique constraint "animals_tag_number_key": '
                        f"tag_number={tag}"
                    )
                seen.add(tag)
            for animal in entities:
                self._animal_ids_by_tag[animal.tag_number] = animal.id  # type: ignore[attr-defined]
        self.tables.setdefault(entity_type.TABLE, []).extend(entities)
        return len(entities)

    def list_records(self, entity_type: type[Entity]) -> list[dict[str, Any]]:
        return [e.as_dict() for e in self.tables.get(entity_type.TABLE, [])]

    def count(self, entity_type: type[Entity]) -> int:
        return len(self.tables.get(entity_type.TABLE, []))
