from __future__ import annotations
import json
import re
from pathlib import Path
from herd_import.logging.error_log import ErrorRecord, ErrorLogBuffer
from herd_import.models.error_record import FILE_LEVEL_ROW

KEYS = {"timestamp", "file", "data_type", "row", "error_type", "message"}


def test_error_record_creation_and_json_line():
    rec = ErrorRecord.create(
        file="animals.csv",
        data_type="animals",
        row=10,
        error_type="ROW_VALIDATION_ERROR",
        message="'tagNumber' is a required property",
    )
    data = json.loads(rec.to_json_line())
    assert data["file"] == "animals.csv"
    assert data["data_type"] == "animals"
    assert data["row"] == 10
    assert data["error_type"] == "ROW_VALIDATION_ERROR"
    assert "timestamp" in data and data["timestamp"].endswith("Z")
    assert set(data.keys()) == KEYS


def test_error_record_file_level_row():
    rec = ErrorRecord.create("animals.csv", "animals", FILE_LEVEL_ROW, "CSV_PARSE_ERROR", "bad quote")
    assert json.loads(rec.to_json_line())["row"] == -1


def test_error_record_keeps_non_ascii():
    rec = ErrorRecord.create("牛.csv", "animals", 1, "ROW_VALIDATION_ERROR", "名前")
    assert "牛.csv" in rec.to_json_line()


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("animals.csv", "animals", 1, "ROW_VALIDATION_ERROR", "bad type"))
    buf.append(ErrorRecord.create("fields.csv", "fields", 2, "REFERENCE_NOT_FOUND", 'Property "X" not found'))
    path = buf.flush()
    assert path is not None and path.exists()
    assert path.parent == Path("logs")
    assert re.fullmatch(r"errors-\d{8}-\d{6}\.log", path.name)
    # ファイル内容検証
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw).keys()) == KEYS
    # flush 後バッファクリア
    assert len(buf) == 0


def test_error_log_buffer_flush_empty_creates_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_error_log_buffer_second_flush_appends(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path)
    buf.append(ErrorRecord.create("a.csv", "animals", 1, "ROW_VALIDATION_ERROR", "x"))
    first = buf.flush()
    buf.append(ErrorRecord.create("a.csv", "animals", 2, "ROW_VALIDATION_ERROR", "y"))
    second = buf.flush()
    assert first == second
    assert len(second.read_text(encoding="utf-8").splitlines()) == 2


def test_records_returns_copy():
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("a.csv", "animals", 1, "ROW_VALIDATION_ERROR", "x"))
    buf.records.clear()
    assert len(buf) == 1
