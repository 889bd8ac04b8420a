# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import pytest

from herd_import.db.storage import MemoryStorage
from herd_import.logging.init import reset_logging


@pytest.fixture(autouse=True)
def _clean_logging():
    # herd_import ロガーはテスト毎に作り直す (capsys の stdout を掴むため)
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
file_mappings:
  properties.csv: properties
  fields.csv: fields
  animals.csv: animals
  vaccinations.csv: vaccinations
null_sentinels: ["NULL", "N/A"]
page_size: 500
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: herd
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def write_csv(temp_workdir: Path):
    def _write(name: str, text: str) -> Path:
        f = temp_workdir / "data" / name
        f.write_text(text, encoding="utf-8")
        return f
    return _write


@pytest.fixture()
def mock_mode(monkeypatch):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")


@pytest.fixture()
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def herd_storage() -> MemoryStorage:
    """MemoryStorage pre-loaded with one property and two animals."""
    from herd_import.services.pipeline import import_csv

    storage = MemoryStorage()
    import_csv("properties", "name,isLeased\nHome Farm,no\n", storage)
    import_csv(
        "animals",
        "tagNumber,type,sex\nA1,dairy,female\nB7,beef,male\n",
        storage,
    )
    return storage
