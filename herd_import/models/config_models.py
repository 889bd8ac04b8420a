from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the herd CSV importer.

Filled by herd_import.config.loader after YAML schema validation.
"""

DEFAULT_PAGE_SIZE = 1000


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection fallback configuration.

    Environment variables (DATABASE_URL / PGDSN / PG*) take precedence.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration for a batch import run."""
    source_directory: str  # directory scanned for csv files
    # file name -> data type; dict order is import order (parents first)
    file_mappings: dict[str, str]
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    null_sentinels: frozenset[str] | None = None  # upper-cased
    page_size: int = DEFAULT_PAGE_SIZE
