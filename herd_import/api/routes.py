from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from herd_import.csvio.writer import export_records, render_template
from herd_import.db.storage import Storage
from herd_import.models.import_result import (
    CsvParseError,
    ImportFatalError,
    MissingCsvDataError,
    UnknownDataKindError,
)
from herd_import.services.pipeline import import_csv
from herd_import.validation.kinds import get_kind

from .deps import get_storage

"""Import, template and export endpoints.

Errors are returned as ``{"message": ...}``: 400 for requests the caller can
fix (missing csvData, unknown data type, malformed CSV), 500 otherwise.
"""

router = APIRouter()
logger = logging.getLogger(__name__)

CLIENT_ERRORS = (MissingCsvDataError, UnknownDataKindError, CsvParseError)


class ImportRequest(BaseModel):
    """Body of an import call."""
    # 型チェックは import_csv 側 (非文字列も 400 "CSV data is required")
    csvData: Any = Field(None, description="Full CSV text, header line first")


class RowFailureResponse(BaseModel):
    row: int
    data: dict[str, Any]
    error: str


class ImportResponse(BaseModel):
    success: int
    failed: int
    errors: list[RowFailureResponse]


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


@router.post("/import/{data_type}", response_model=ImportResponse)
def import_data(
    data_type: str,
    request: ImportRequest | None = None,
    storage: Storage = Depends(get_storage),
) -> Any:
    """Import one CSV submission; rows fail independently."""
    csv_data = request.csvData if request is not None else None
    try:
        result = import_csv(data_type, csv_data, storage)
    except CLIENT_ERRORS as e:
        return _message(400, str(e))
    except ImportFatalError as e:
        logger.error("import %s failed at %s: %s", data_type, e.stage.value, e)
        return _message(500, str(e))
    except Exception as e:
        logger.exception("import %s failed", data_type)
        return _message(500, f"Import failed: {e}")
    return result.to_dict()


@router.get("/import/{data_type}/template")
def download_template(data_type: str) -> Response:
    try:
        content = render_template(data_type)
    except UnknownDataKindError as e:
        return _message(400, str(e))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{data_type}-template.csv"'},
    )


@router.get("/export/{data_type}")
def export_data(data_type: str, storage: Storage = Depends(get_storage)) -> Response:
    try:
        kind = get_kind(data_type)
    except UnknownDataKindError as e:
        return _message(400, str(e))
    content = export_records(kind.name, storage.list_records(kind.entity))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{kind.name}.csv"'},
    )
