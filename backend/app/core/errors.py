# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Error Taxonomy
Every rejection path in the matching core raises one of these.
The API layer (api/middleware/error_handler.py) maps them to
structured JSON error responses.
"""

from __future__ import annotations


class ListMatchError(Exception):
    """Base class for all ListMatch domain errors."""


class ValidationError(ListMatchError, ValueError):
    """Raised for malformed locks or unusable input lists."""


class LockConflictError(ValidationError):
    """Raised when a lock reuses a source or target already locked."""


class DependencyError(ListMatchError, RuntimeError):
    """
    Raised when the similarity provider or assignment solver fails.
    The message is surfaced verbatim to the caller.
    """


class IngestionError(ListMatchError, ValueError):
    """Raised when tabular input yields zero usable items."""


class WorkspaceNotFoundError(KeyError):
    """Raised when a workspace_id does not exist in the store."""
