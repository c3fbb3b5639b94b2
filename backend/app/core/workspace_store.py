# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Abstract WorkspaceStore
Clean interface over editor state (lists, locks, latest result).
The matching engine never sees this store: runs receive a snapshot.

Runs are sequenced. begin_run() hands out increasing run numbers and
complete_run()/fail_run() only land for a run newer than every run that
has already finished, successfully or not, so a slow stale run can never
overwrite a fresher outcome (last writer wins). Status stays RUNNING
while any run is in flight, then reflects the newest finished run.

InMemoryWorkspaceStore — single-process deployments; lost on restart
"""

from __future__ import annotations

import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional, Sequence

from app.core.errors import ValidationError, WorkspaceNotFoundError
from app.models.matching import Lock, MatchResult
from app.models.workspace import Workspace, WorkspaceStatus
from app.modules.matching.engine import clean_items
from app.modules.matching.lock_set import LockSet
from app.utils.logger import get_logger

log = get_logger(__name__)


# ─── Abstract Interface ──────────────────────────────────────────────────────

class WorkspaceStore(ABC):
    """
    Abstract base class for workspace state backends.
    All methods are synchronous and return detached copies.
    """

    @abstractmethod
    def create_workspace(
        self,
        list_a: Sequence[str] = (),
        list_b: Sequence[str] = (),
        locks: Sequence[Lock] = (),
    ) -> Workspace:
        """Create a new IDLE workspace. Raises ValidationError on bad locks."""

    @abstractmethod
    def get_workspace(self, workspace_id: str) -> Optional[Workspace]:
        """Return a copy of the workspace, or None if not found."""

    @abstractmethod
    def set_lists(
        self, workspace_id: str, list_a: Sequence[str], list_b: Sequence[str]
    ) -> Workspace:
        """Replace both lists; locks that no longer fit are pruned."""

    @abstractmethod
    def add_lock(self, workspace_id: str, source: str, target: str) -> Workspace:
        """Append a lock. Raises LockConflictError / ValidationError."""

    @abstractmethod
    def remove_lock(self, workspace_id: str, index: int) -> Workspace:
        """Remove the lock at index. Raises IndexError."""

    @abstractmethod
    def begin_run(self, workspace_id: str) -> tuple[int, Workspace]:
        """Start a run. Returns (run_seq, snapshot)."""

    @abstractmethod
    def complete_run(self, workspace_id: str, run_seq: int, result: MatchResult) -> bool:
        """Apply a run's result unless a newer run already finished. Returns True if applied."""

    @abstractmethod
    def fail_run(self, workspace_id: str, run_seq: int, error: str) -> bool:
        """Record a run failure, keeping the prior result. Same staleness rule as complete_run."""

    def require(self, workspace_id: str) -> Workspace:
        """get_workspace() that raises WorkspaceNotFoundError instead of returning None."""
        workspace = self.get_workspace(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError(workspace_id)
        return workspace


# ─── In-Memory Implementation ────────────────────────────────────────────────

class InMemoryWorkspaceStore(WorkspaceStore):
    """
    Thread-safe in-memory workspace store using a dict + RLock.
    All data is lost on process restart.
    """

    def __init__(self) -> None:
        self._store: dict[str, Workspace] = {}
        self._lock = threading.RLock()

    def _get(self, workspace_id: str) -> Workspace:
        workspace = self._store.get(workspace_id)
        if workspace is None:
            log.warning("workspace_not_found", workspace_id=workspace_id)
            raise WorkspaceNotFoundError(workspace_id)
        return workspace

    @staticmethod
    def _touch(workspace: Workspace) -> Workspace:
        workspace.updated_at = datetime.now(timezone.utc)
        return workspace.model_copy(deep=True)

    def create_workspace(
        self,
        list_a: Sequence[str] = (),
        list_b: Sequence[str] = (),
        locks: Sequence[Lock] = (),
    ) -> Workspace:
        lock_set = LockSet.from_pairs(locks)
        workspace = Workspace(
            workspace_id=str(uuid.uuid4()),
            list_a=list(list_a),
            list_b=list(list_b),
            locks=lock_set.locks(),
        )
        with self._lock:
            self._store[workspace.workspace_id] = workspace
        log.info(
            "workspace_created",
            workspace_id=workspace.workspace_id,
            n_source=len(workspace.list_a),
            n_target=len(workspace.list_b),
            n_locks=len(workspace.locks),
        )
        return workspace.model_copy(deep=True)

    def get_workspace(self, workspace_id: str) -> Optional[Workspace]:
        with self._lock:
            workspace = self._store.get(workspace_id)
            return workspace.model_copy(deep=True) if workspace else None

    def set_lists(
        self, workspace_id: str, list_a: Sequence[str], list_b: Sequence[str]
    ) -> Workspace:
        with self._lock:
            workspace = self._get(workspace_id)
            lock_set = LockSet.from_pairs(workspace.locks)
            lock_set.prune(clean_items(list_a), clean_items(list_b))

            workspace.list_a = list(list_a)
            workspace.list_b = list(list_b)
            workspace.locks = lock_set.locks()
            return self._touch(workspace)

    def add_lock(self, workspace_id: str, source: str, target: str) -> Workspace:
        with self._lock:
            workspace = self._get(workspace_id)
            lock_set = LockSet.from_pairs(workspace.locks)
            lock = lock_set.add_lock(source, target)

            if lock.source not in clean_items(workspace.list_a):
                raise ValidationError(f"'{lock.source}' is not in List A.")
            if lock.target not in clean_items(workspace.list_b):
                raise ValidationError(f"'{lock.target}' is not in List B.")

            workspace.locks = lock_set.locks()
            log.info("lock_added", workspace_id=workspace_id, source=lock.source, target=lock.target)
            return self._touch(workspace)

    def remove_lock(self, workspace_id: str, index: int) -> Workspace:
        with self._lock:
            workspace = self._get(workspace_id)
            lock_set = LockSet.from_pairs(workspace.locks)
            lock = lock_set.remove_lock(index)

            workspace.locks = lock_set.locks()
            log.info("lock_removed", workspace_id=workspace_id, source=lock.source, target=lock.target)
            return self._touch(workspace)

    def begin_run(self, workspace_id: str) -> tuple[int, Workspace]:
        with self._lock:
            workspace = self._get(workspace_id)
            workspace.run_seq += 1
            workspace.in_flight.append(workspace.run_seq)
            workspace.status = WorkspaceStatus.RUNNING
            return workspace.run_seq, self._touch(workspace)

    @staticmethod
    def _finish(workspace: Workspace, run_seq: int) -> bool:
        """
        Retire run_seq from the in-flight set.
        Returns True only if it is newer than every run already finished.
        """
        if run_seq not in workspace.in_flight:
            return False
        workspace.in_flight.remove(run_seq)
        return run_seq > workspace.finished_seq

    @staticmethod
    def _settle(workspace: Workspace) -> None:
        # Outcome of the newest finished run, once nothing is left running
        if workspace.in_flight:
            workspace.status = WorkspaceStatus.RUNNING
        elif workspace.error is not None:
            workspace.status = WorkspaceStatus.FAILED
        else:
            workspace.status = WorkspaceStatus.READY

    def complete_run(self, workspace_id: str, run_seq: int, result: MatchResult) -> bool:
        with self._lock:
            workspace = self._get(workspace_id)
            applied = self._finish(workspace, run_seq)
            if applied:
                workspace.result = result
                workspace.error = None
                workspace.applied_seq = run_seq
                workspace.finished_seq = run_seq
            self._settle(workspace)
            self._touch(workspace)

        if not applied:
            log.info(
                "stale_result_discarded",
                workspace_id=workspace_id,
                run_seq=run_seq,
                finished_seq=workspace.finished_seq,
            )
            return False

        log.debug("run_applied", workspace_id=workspace_id, run_seq=run_seq)
        return True

    def fail_run(self, workspace_id: str, run_seq: int, error: str) -> bool:
        with self._lock:
            workspace = self._get(workspace_id)
            recorded = self._finish(workspace, run_seq)
            if recorded:
                workspace.error = error
                workspace.finished_seq = run_seq
            self._settle(workspace)
            self._touch(workspace)

        if not recorded:
            log.info("stale_failure_discarded", workspace_id=workspace_id, run_seq=run_seq)
            return False

        log.error("run_failed", workspace_id=workspace_id, run_seq=run_seq, error=error)
        return True

    def count(self) -> int:
        """Return total number of workspaces (useful for health checks)."""
        with self._lock:
            return len(self._store)
