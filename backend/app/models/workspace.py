# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Workspace State Models
Editor state for one user session: the two lists, the lock set, and the
most recently applied match result. Used by the WorkspaceStore and the
API request/response schemas.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.app_config import Defaults, Demo
from app.models.matching import Lock, MatchOptions, MatchResult


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WorkspaceStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    READY = "ready"
    FAILED = "failed"


class Workspace(_CamelModel):
    """Full workspace record stored in WorkspaceStore."""
    workspace_id: str
    list_a: list[str] = Field(default_factory=list)
    list_b: list[str] = Field(default_factory=list)
    locks: list[Lock] = Field(default_factory=list)

    status: WorkspaceStatus = WorkspaceStatus.IDLE
    result: Optional[MatchResult] = None
    error: Optional[str] = None
    # run_seq: last run started; applied_seq: run whose result is shown;
    # finished_seq: newest run that finished, successfully or not
    run_seq: int = Field(0, ge=0)
    applied_seq: int = Field(0, ge=0)
    finished_seq: int = Field(0, ge=0)
    in_flight: list[int] = Field(default_factory=list)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


# ─── API Request/Response Schemas ────────────────────────────────────────────

class MatchRequest(_CamelModel):
    """Request body for POST /match."""
    list_a: list[str]
    list_b: list[str]
    locks: list[Lock] = Field(default_factory=list)
    options: Optional[MatchOptions] = None


class CreateWorkspaceRequest(_CamelModel):
    """Request body for POST /workspaces. No demo_index = start fresh."""
    demo_index: Optional[int] = Field(None, ge=0)


class UpdateListsRequest(_CamelModel):
    """Request body for PUT /workspaces/{workspace_id}/lists."""
    list_a: list[str] = Field(default_factory=list)
    list_b: list[str] = Field(default_factory=list)


class AddLockRequest(_CamelModel):
    """Request body for POST /workspaces/{workspace_id}/locks."""
    source: str
    target: str


class RunRequest(_CamelModel):
    """Request body for POST /workspaces/{workspace_id}/run."""
    options: Optional[MatchOptions] = None


class RunResponse(_CamelModel):
    """
    Response body for POST /workspaces/{workspace_id}/run.
    applied=False means a newer run finished first and this result was
    discarded; workspace.result still holds the newer one.
    """
    run_seq: int
    applied: bool
    result: MatchResult
    workspace: Workspace


class IngestResponse(_CamelModel):
    """Response body for POST /ingest."""
    items: list[str]
    count: int


class ConfigResponse(_CamelModel):
    """Response body for GET /config."""
    demos: list[Demo]
    defaults: Defaults
    ratios: list[str]
