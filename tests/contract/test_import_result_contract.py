from __future__ import annotations

import pytest

from herd_import.db.storage import MemoryStorage
from herd_import.services.pipeline import import_csv

"""Import result payload contract: {success, failed, errors: [{row, data, error}]}."""

pytestmark = pytest.mark.contract


def test_result_payload_keys():
    result = import_csv(
        "animals",
        "tagNumber,type,sex\nA1,dairy,female\nA2,Dairy,male,extra\n",
        MemoryStorage(),
    )
    payload = result.to_dict()
    assert set(payload) == {"success", "failed", "errors"}
    assert payload["success"] == 1
    assert payload["failed"] == 1
    [error] = payload["errors"]
    assert set(error) == {"row", "data", "error"}
    assert error["row"] == 2
    assert error["data"] == {"tagNumber": "A2", "type": "Dairy", "sex": "male", "_extra": ["extra"]}
    assert isinstance(error["error"], str)


def test_error_type_not_in_payload():
    result = import_csv("fields", "name,propertyName\nN,Nowhere\n", MemoryStorage())
    assert "error_type" not in result.to_dict()["errors"][0]
