from __future__ import annotations

import pytest

from herd_import.csvio.reader import parse_csv, preview_csv_file, read_csv_text
from herd_import.models.import_result import CsvParseError, ImportStage


def test_parse_basic_rows():
    rows = list(parse_csv("tagNumber,type,sex\nA1,dairy,female\nA2,beef,male\n"))
    assert [r.row_number for r in rows] == [1, 2]
    assert rows[0].values == {"tagNumber": "A1", "type": "dairy", "sex": "female"}
    assert rows[1].extra == ()


def test_header_names_are_stripped_but_case_kept():
    rows = list(parse_csv(" tagNumber , Type\nA1,dairy\n"))
    assert rows[0].values == {"tagNumber": "A1", "Type": "dairy"}


def test_blank_lines_do_not_consume_row_numbers():
    text = "\n\nname,isLeased\n\nHome,no\n ,  \nBack,yes\n\n"
    rows = list(parse_csv(text))
    assert [(r.row_number, r.values["name"]) for r in rows] == [(1, "Home"), (2, "Back")]


def test_quoted_fields_keep_commas_and_newlines():
    text = 'name,description\n"Smith, J","line one\nline two"\n'
    rows = list(parse_csv(text))
    assert rows[0].values == {"name": "Smith, J", "description": "line one\nline two"}


def test_short_row_leaves_missing_cells_absent():
    rows = list(parse_csv("tagNumber,type,sex\nA1,dairy\n"))
    assert rows[0].values == {"tagNumber": "A1", "type": "dairy"}
    assert "sex" not in rows[0].values


def test_long_row_keeps_surplus_cells_as_extra():
    rows = list(parse_csv("name,isLeased\nHome,no,surplus,more\n"))
    assert rows[0].values == {"name": "Home", "isLeased": "no"}
    assert rows[0].extra == ("surplus", "more")
    assert rows[0].data["_extra"] == ["surplus", "more"]


def test_bom_is_ignored():
    rows = list(parse_csv("\ufefftagNumber,type\nA1,dairy\n"))
    assert "tagNumber" in rows[0].values


def test_header_only_yields_nothing():
    assert list(parse_csv("tagNumber,type,sex\n")) == []


def test_crlf_line_endings():
    rows = list(parse_csv("name,isLeased\r\nHome,no\r\n"))
    assert rows[0].values == {"name": "Home", "isLeased": "no"}


def test_unterminated_quote_raises_parse_error():
    with pytest.raises(CsvParseError) as e:
        list(parse_csv('tagNumber,type\n"A1,dairy\n'))
    assert "CSV parsing error" in str(e.value)
    assert e.value.stage is ImportStage.PARSE_FAILED
    assert e.value.error_type == "CSV_PARSE_ERROR"


def test_parse_is_idempotent():
    text = "tagNumber,type,sex\nA1,dairy,female\n\nA2,beef,male,x\n"
    assert list(parse_csv(text)) == list(parse_csv(text))


def test_read_csv_text_strips_bom(tmp_path):
    f = tmp_path / "animals.csv"
    f.write_bytes("\ufefftagNumber\nA1\n".encode("utf-8"))
    assert read_csv_text(f) == "tagNumber\nA1\n"


def test_preview_keeps_na_strings(tmp_path):
    f = tmp_path / "animals.csv"
    f.write_text("tagNumber,name\nA1,NA\nA2,\nA3,Bess\nA4,Daisy\n", encoding="utf-8")
    preview = preview_csv_file(f)
    assert preview.file_name == "animals.csv"
    assert preview.columns == ["tagNumber", "name"]
    assert preview.rows == [
        {"tagNumber": "A1", "name": "NA"},
        {"tagNumber": "A2", "name": ""},
        {"tagNumber": "A3", "name": "Bess"},
    ]
