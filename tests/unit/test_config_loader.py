from __future__ import annotations
import pytest
from pathlib import Path
from herd_import.config.loader import SCHEMA_PATH, load_config, ConfigError
from herd_import.models.config_models import DEFAULT_PAGE_SIZE


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.source_directory == "./data"
    assert list(cfg.file_mappings.items()) == [
        ("properties.csv", "properties"),
        ("fields.csv", "fields"),
        ("animals.csv", "animals"),
        ("vaccinations.csv", "vaccinations"),
    ]
    assert cfg.null_sentinels == frozenset({"NULL", "N/A"})
    assert cfg.page_size == 500
    assert cfg.database.user == "appuser"
    assert cfg.database.port == 5432
    assert cfg.database.dsn is None


def test_load_config_defaults(temp_workdir: Path):
    cfg_path = temp_workdir / "config" / "import.yml"
    cfg_path.write_text("source_directory: ./data\nfile_mappings:\n  a.csv: animals\n", encoding="utf-8")
    cfg = load_config(cfg_path)
    assert cfg.page_size == DEFAULT_PAGE_SIZE
    assert cfg.null_sentinels is None
    assert cfg.database.host is None


def test_load_config_missing_file(temp_workdir: Path):
    missing = temp_workdir / "config" / "not_exists.yml"
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(missing)


def test_load_config_missing_required(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("source_directory: ./data\n", "")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "config validation failed" in str(e.value) and "required property" in str(e.value)


def test_load_config_unknown_data_type(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("animals.csv: animals", "animals.csv: sheep")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "sheep" in str(e.value)


def test_load_config_non_csv_file_name(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("animals.csv: animals", "animals.xlsx: animals")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(write_config)


def test_load_config_extra_field(write_config: Path):
    # additionalProperties: false
    text = write_config.read_text(encoding="utf-8") + "\nextra_field: not_allowed\n"
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "config validation failed" in str(e.value)


def test_load_config_invalid_yaml(write_config: Path):
    write_config.write_text("source_directory: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(write_config)


def test_load_config_root_not_mapping(write_config: Path):
    write_config.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(write_config)


def test_load_config_bad_page_size(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("page_size: 500", "page_size: 0")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(write_config)


def test_schema_file_is_bundled():
    assert SCHEMA_PATH.name == "config_schema.json"
    assert SCHEMA_PATH.exists()
