# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — POST /ingest
Accepts an uploaded CSV-like file and returns the first-column items.
Nothing is stored; the caller decides which list to fill.
"""

from __future__ import annotations

from fastapi import APIRouter, UploadFile

from app.config import get_settings
from app.core.errors import IngestionError
from app.models.workspace import IngestResponse
from app.modules.ingestion.tabular import parse_tabular
from app.utils.logger import get_logger

router = APIRouter(tags=["ingest"])
log = get_logger(__name__)


@router.post(
    "/ingest",
    response_model=IngestResponse,
    summary="Extract an item list from a CSV upload",
    description=(
        "Takes the first column of each row, trimmed, skipping empty rows. "
        "Set has_header=true to drop the first row."
    ),
)
async def ingest(file: UploadFile, has_header: bool = False) -> IngestResponse:
    settings = get_settings()
    label = file.filename or "upload"

    data = await file.read()
    if len(data) > settings.upload_max_bytes:
        raise IngestionError(
            f"File '{label}' exceeds maximum size of {settings.upload_max_mb} MB."
        )

    items = parse_tabular(data, has_header=has_header, label=label)
    log.debug("upload_ingested", label=label, size_bytes=len(data), items=len(items))
    return IngestResponse(items=items, count=len(items))
