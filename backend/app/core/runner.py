# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Workspace Run Orchestrator
Runs the matching engine against a snapshot of a workspace and applies
the result with last-writer-wins semantics.

Execution order:
  1. begin_run: allocate run_seq, snapshot lists + locks
  2. engine.match_lists_async on the snapshot
  3. complete_run (or fail_run): discarded if a newer run already landed

No cancellation: an in-flight stale run finishes and is simply dropped.
On failure the previous result stays in place and the error message is
recorded verbatim.
"""

from __future__ import annotations

import traceback
from typing import Optional

import structlog

from app.core.errors import ListMatchError
from app.core.workspace_store import WorkspaceStore
from app.models.matching import MatchOptions
from app.models.workspace import RunResponse
from app.modules.matching.engine import MatchEngine
from app.utils.logger import get_logger

log = get_logger(__name__)


async def run_match(
    workspace_id: str,
    store: WorkspaceStore,
    engine: MatchEngine,
    options: Optional[MatchOptions] = None,
) -> RunResponse:
    """
    Match a workspace's current lists and locks.

    Raises:
        WorkspaceNotFoundError: unknown workspace_id
        ValidationError / DependencyError: from the engine, after the
            failure has been recorded on the workspace
    """
    run_seq, snapshot = store.begin_run(workspace_id)
    structlog.contextvars.bind_contextvars(workspace_id=workspace_id, run_seq=run_seq)

    try:
        log.info("run_start")
        result = await engine.match_lists_async(
            snapshot.list_a,
            snapshot.list_b,
            snapshot.locks,
            options,
        )
    except ListMatchError as exc:
        store.fail_run(workspace_id, run_seq, str(exc))
        raise
    except Exception as exc:
        err_msg = f"{type(exc).__name__}: {exc}"
        log.error("run_fatal_error", error=err_msg, traceback=traceback.format_exc())
        store.fail_run(workspace_id, run_seq, err_msg)
        raise
    else:
        applied = store.complete_run(workspace_id, run_seq, result)
        log.info("run_complete", applied=applied)
    finally:
        structlog.contextvars.clear_contextvars()

    return RunResponse(
        run_seq=run_seq,
        applied=applied,
        result=result,
        workspace=store.require(workspace_id),
    )
