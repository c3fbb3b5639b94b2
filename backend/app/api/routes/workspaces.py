# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Workspace Routes
Editor state endpoints: create (fresh or from a demo), edit lists,
add/remove locks, and run the matcher against the current state.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, status

from app.core.errors import ValidationError
from app.core.runner import run_match
from app.dependencies import AppConfigDep, EngineDep, WorkspaceStoreDep
from app.models.workspace import (
    AddLockRequest,
    CreateWorkspaceRequest,
    RunRequest,
    RunResponse,
    UpdateListsRequest,
    Workspace,
)
from app.utils.logger import get_logger

router = APIRouter(prefix="/workspaces", tags=["workspaces"])
log = get_logger(__name__)


@router.post(
    "",
    response_model=Workspace,
    status_code=status.HTTP_201_CREATED,
    summary="Create a workspace",
    description="Empty when demo_index is omitted, otherwise seeded from that demo.",
)
async def create_workspace(
    store: WorkspaceStoreDep,
    app_config: AppConfigDep,
    body: Optional[CreateWorkspaceRequest] = None,
) -> Workspace:
    demo_index = body.demo_index if body else None
    if demo_index is None:
        return store.create_workspace()

    if demo_index >= len(app_config.demos):
        raise ValidationError(
            f"Unknown demo {demo_index}; {len(app_config.demos)} demos available."
        )

    demo = app_config.demos[demo_index]
    log.info("workspace_from_demo", demo_index=demo_index, title=demo.title)
    return store.create_workspace(demo.list_a, demo.list_b, demo.locks)


@router.get(
    "/{workspace_id}",
    response_model=Workspace,
    summary="Get workspace state",
)
async def get_workspace(workspace_id: str, store: WorkspaceStoreDep) -> Workspace:
    return store.require(workspace_id)


@router.put(
    "/{workspace_id}/lists",
    response_model=Workspace,
    summary="Replace both lists",
    description="Locks whose source or target is no longer listed are dropped.",
)
async def update_lists(
    workspace_id: str,
    body: UpdateListsRequest,
    store: WorkspaceStoreDep,
) -> Workspace:
    return store.set_lists(workspace_id, body.list_a, body.list_b)


@router.post(
    "/{workspace_id}/locks",
    response_model=Workspace,
    status_code=status.HTTP_201_CREATED,
    summary="Lock a pair",
)
async def add_lock(
    workspace_id: str,
    body: AddLockRequest,
    store: WorkspaceStoreDep,
) -> Workspace:
    return store.add_lock(workspace_id, body.source, body.target)


@router.delete(
    "/{workspace_id}/locks/{index}",
    response_model=Workspace,
    summary="Remove a lock by position",
)
async def remove_lock(
    workspace_id: str,
    index: int,
    store: WorkspaceStoreDep,
) -> Workspace:
    return store.remove_lock(workspace_id, index)


@router.post(
    "/{workspace_id}/run",
    response_model=RunResponse,
    summary="Run matching on the current workspace",
    description=(
        "applied=false means a newer run already landed and this result "
        "was discarded. On failure the previous result is kept."
    ),
)
async def run_workspace(
    workspace_id: str,
    store: WorkspaceStoreDep,
    engine: EngineDep,
    app_config: AppConfigDep,
    body: Optional[RunRequest] = None,
) -> RunResponse:
    options = app_config.defaults.apply(body.options if body else None)
    return await run_match(workspace_id, store, engine, options)
