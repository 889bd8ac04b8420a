from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

from herd_import.config.loader import DEFAULT_CONFIG_PATH, load_config
from herd_import.db.connection import db_cursor
from herd_import.db.storage import PostgresStorage, Storage
from herd_import.models.config_models import DEFAULT_PAGE_SIZE, DatabaseConfig

"""FastAPI dependencies.

``get_storage`` opens one PostgreSQL connection per request. Tests replace it
through ``app.dependency_overrides[get_storage]`` with a MemoryStorage.
"""

__all__ = [
    "CONFIG_ENV_VAR",
    "database_config",
    "get_storage",
]

CONFIG_ENV_VAR = "HERD_IMPORT_CONFIG"


def database_config() -> tuple[DatabaseConfig, int]:
    """Database settings and page size from the config file, when there is one.

    Connection environment variables still take precedence (see resolve_dsn).
    """
    path = Path(os.getenv(CONFIG_ENV_VAR, str(DEFAULT_CONFIG_PATH)))
    if not path.exists():
        return DatabaseConfig(), DEFAULT_PAGE_SIZE
    cfg = load_config(path)
    return cfg.database, cfg.page_size


def get_storage() -> Iterator[Storage]:  # pragma: no cover (needs a live database)
    db_cfg, page_size = database_config()
    with db_cursor(db_cfg) as cur:
        yield PostgresStorage(cur, page_size=page_size)
