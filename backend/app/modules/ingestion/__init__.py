# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Ingestion Module
Public API for turning uploaded tabular text into item lists.
"""

from app.modules.ingestion.tabular import decode_upload, parse_tabular

__all__ = [
    "decode_upload",
    "parse_tabular",
]
