# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Matching Engine Orchestrator
Wires the matching sub-modules into the complete pipeline:

  Stage 1: Partition lists by locks → open A, open B
  Stage 2: Similarity matrix over open A × open B   (provider call)
  Stage 3: Hungarian maximum-reward assignment       (solver call)
  Stage 4: Merge manual + automatic, threshold, rank
  Stage 5: Unmatched remainders

The provider and solver are injected at construction. The engine keeps
no state between runs: every call snapshots its inputs, and the inputs
are never mutated.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np

from app.core.errors import DependencyError, ValidationError
from app.models.matching import MatchOptions, MatchResult
from app.modules.matching.assignment import (
    Assignment,
    AssignmentSolver,
    ScipyAssignmentSolver,
)
from app.modules.matching.lock_set import LockLike, LockSet
from app.modules.matching.postprocess import (
    automatic_matches,
    build_result,
    manual_matches,
)
from app.modules.matching.similarity import RapidFuzzProvider, SimilarityProvider
from app.utils.logger import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class _MatchPlan:
    list_a: tuple[str, ...]
    list_b: tuple[str, ...]
    locks: LockSet
    open_a: tuple[str, ...]
    open_b: tuple[str, ...]
    options: MatchOptions

    @property
    def needs_solve(self) -> bool:
        return bool(self.open_a) and bool(self.open_b)


def clean_items(items: Iterable[str]) -> tuple[str, ...]:
    """Trim every item and drop blanks, preserving order and duplicates."""
    cleaned = []
    for x in items:
        if x is not None and not isinstance(x, str):
            raise ValidationError(f"List items must be strings, got {type(x).__name__} {x!r}.")
        s = (x or "").strip()
        if s:
            cleaned.append(s)
    return tuple(cleaned)


class MatchEngine:
    def __init__(
        self,
        provider: Optional[SimilarityProvider] = None,
        solver: Optional[AssignmentSolver] = None,
        max_list_items: Optional[int] = None,
    ) -> None:
        self.provider = provider or RapidFuzzProvider()
        self.solver = solver or ScipyAssignmentSolver()
        self.max_list_items = max_list_items

    # ─── Public API ──────────────────────────────────────────────────────────

    def match_lists(
        self,
        list_a: Sequence[str],
        list_b: Sequence[str],
        locks: Optional[Iterable[LockLike]] = None,
        options: Optional[MatchOptions] = None,
    ) -> MatchResult:
        """
        Globally optimal matching of list_a against list_b.

        Args:
            list_a:  Source items (List A)
            list_b:  Target items (List B)
            locks:   LockSet or iterable of (source, target) pairs
            options: ratio + threshold; None uses the built-in defaults

        Returns:
            Fresh immutable MatchResult.

        Raises:
            ValidationError:  empty list, oversized list, or bad locks
            DependencyError:  similarity provider or solver failure
        """
        started = time.perf_counter()
        plan = self._prepare(list_a, list_b, locks, options)

        matrix = self._score(plan) if plan.needs_solve else None
        assignment = self._solve(matrix) if matrix is not None else None

        return self._finish(plan, matrix, assignment, started)

    async def match_lists_async(
        self,
        list_a: Sequence[str],
        list_b: Sequence[str],
        locks: Optional[Iterable[LockLike]] = None,
        options: Optional[MatchOptions] = None,
    ) -> MatchResult:
        """
        Cooperative form of match_lists(). The only suspension points are
        the provider and solver calls, each run in a worker thread.
        """
        started = time.perf_counter()
        plan = self._prepare(list_a, list_b, locks, options)

        matrix = None
        assignment = None
        if plan.needs_solve:
            matrix = await asyncio.to_thread(self._score, plan)
            assignment = await asyncio.to_thread(self._solve, matrix)

        return self._finish(plan, matrix, assignment, started)

    # ─── Stages ──────────────────────────────────────────────────────────────

    def _prepare(
        self,
        list_a: Sequence[str],
        list_b: Sequence[str],
        locks: Optional[Iterable[LockLike]],
        options: Optional[MatchOptions],
    ) -> _MatchPlan:
        clean_a = clean_items(list_a)
        clean_b = clean_items(list_b)

        if not clean_a or not clean_b:
            raise ValidationError("Add items to both lists before running.")

        if self.max_list_items is not None:
            longest = max(len(clean_a), len(clean_b))
            if longest > self.max_list_items:
                raise ValidationError(
                    f"Lists are limited to {self.max_list_items} items "
                    f"(got {longest})."
                )

        lock_set = LockSet.from_pairs(locks)
        lock_set.validate_against(clean_a, clean_b)

        fixed_a = lock_set.sources
        fixed_b = lock_set.targets
        open_a = tuple(x for x in clean_a if x not in fixed_a)
        open_b = tuple(x for x in clean_b if x not in fixed_b)

        plan = _MatchPlan(
            list_a=clean_a,
            list_b=clean_b,
            locks=lock_set,
            open_a=open_a,
            open_b=open_b,
            options=options or MatchOptions(),
        )

        log.info(
            "match_start",
            n_source=len(clean_a),
            n_target=len(clean_b),
            n_locks=len(lock_set),
            n_open_source=len(open_a),
            n_open_target=len(open_b),
            ratio=plan.options.ratio,
            threshold=plan.options.threshold,
        )
        return plan

    def _score(self, plan: _MatchPlan) -> np.ndarray:
        try:
            matrix = self.provider.score_matrix(plan.open_a, plan.open_b, plan.options.ratio)
        except DependencyError:
            raise
        except Exception as exc:
            raise DependencyError(f"Similarity provider failed: {exc}") from exc

        matrix = np.asarray(matrix)
        expected = (len(plan.open_a), len(plan.open_b))
        if matrix.shape != expected:
            raise DependencyError(
                f"Similarity provider returned shape {matrix.shape}, expected {expected}"
            )
        return matrix

    def _solve(self, matrix: np.ndarray) -> Assignment:
        try:
            return self.solver.solve(matrix)
        except DependencyError:
            raise
        except Exception as exc:
            raise DependencyError(f"Assignment solver failed: {exc}") from exc

    def _finish(
        self,
        plan: _MatchPlan,
        matrix: Optional[np.ndarray],
        assignment: Optional[Assignment],
        started: float,
    ) -> MatchResult:
        manual = manual_matches(plan.locks)
        automatic = automatic_matches(assignment, plan.open_a, plan.open_b, matrix)

        result = build_result(
            plan.list_a,
            plan.list_b,
            manual,
            automatic,
            plan.options.threshold,
        )

        stats = result.stats
        log.info(
            "match_complete",
            total_matches=stats.total_matches,
            manual=stats.manual_count,
            auto=stats.auto_count,
            auto_before_threshold=len(automatic),
            mean_score=round(stats.mean_score, 2),
            unmatched_source=stats.unmatched_source_count,
            unmatched_target=stats.unmatched_target_count,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return result


_default_engine: Optional[MatchEngine] = None


def get_default_engine() -> MatchEngine:
    """Lazily built rapidfuzz + scipy engine shared by match_lists()."""
    global _default_engine
    if _default_engine is None:
        _default_engine = MatchEngine()
    return _default_engine


def match_lists(
    list_a: Sequence[str],
    list_b: Sequence[str],
    locks: Optional[Iterable[LockLike]] = None,
    options: Optional[MatchOptions] = None,
) -> MatchResult:
    """Module-level convenience over the default engine."""
    return get_default_engine().match_lists(list_a, list_b, locks, options)
