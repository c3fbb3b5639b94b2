# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Tabular Text Ingestion
Extracts a flat item list from CSV-like input: the first column of each
row, trimmed, with empty rows skipped.

The delimiter is sniffed from a sample (comma, semicolon, tab, pipe) and
falls back to comma when the sample is ambiguous, e.g. single-column data.

Raises IngestionError when nothing usable is found, so the API error
handler can surface it as a warning without touching editor state.
"""

from __future__ import annotations

import csv
import io

from app.core.errors import IngestionError
from app.utils.logger import get_logger

log = get_logger(__name__)

_DELIMITERS = ",;\t|"
_SNIFF_SAMPLE_CHARS = 8192


def decode_upload(data: bytes, label: str = "upload") -> str:
    """
    Decode uploaded bytes as UTF-8, dropping a leading BOM.

    Raises:
        IngestionError: if the bytes are not valid UTF-8 text.
    """
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise IngestionError(
            f"'{label}' is not UTF-8 text. Export the sheet as CSV and try again."
        ) from exc


def _sniff_dialect(text: str) -> type[csv.Dialect] | csv.Dialect:
    try:
        return csv.Sniffer().sniff(text[:_SNIFF_SAMPLE_CHARS], delimiters=_DELIMITERS)
    except csv.Error:
        return csv.excel


def parse_tabular(
    raw: str | bytes,
    *,
    has_header: bool = False,
    label: str = "upload",
) -> list[str]:
    """
    Parse tabular text into an ordered list of trimmed, non-empty items.

    Args:
        raw:        CSV-like text, or bytes to be decoded as UTF-8
        has_header: Drop the first non-empty row
        label:      Name used in error messages and logs

    Returns:
        First-column values in row order. Duplicates are kept.

    Raises:
        IngestionError: if the input yields zero items.
    """
    text = decode_upload(raw, label) if isinstance(raw, bytes) else raw

    items: list[str] = []
    if text.strip():
        reader = csv.reader(io.StringIO(text), _sniff_dialect(text))
        header_skipped = not has_header
        for row in reader:
            first = row[0].strip() if row else ""
            if not first:
                continue
            if not header_skipped:
                header_skipped = True
                continue
            items.append(first)

    if not items:
        log.warning("ingestion_empty", label=label, has_header=has_header)
        raise IngestionError(f"No items found in '{label}'.")

    log.info("ingestion_complete", label=label, items=len(items))
    return items
