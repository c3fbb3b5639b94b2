# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Hungarian Assignment Solver
Pairs open List A items (rows) with open List B items (columns) so that
total similarity is maximised, via scipy.optimize.linear_sum_assignment.

Without this, greedy nearest-neighbour matching collapses: an early item
grabs the partner a later item needed, and the later item is left with a
poor match or none at all. The Hungarian algorithm gives the globally
optimal 1:1 pairing.

Rectangular matrices are solved directly. With more rows than columns the
surplus rows come back unassigned, and vice versa.

Tie-break (integral reward matrices only):
  adjusted[i, j] = reward[i, j] - eps · (i - j)²
  eps · Σ (i - j)² over any assignment is < 1, so the adjustment can never
  outweigh a single point of real reward. Among equally-scored assignments
  the one closest to the diagonal wins. That is not the same as lowest
  column index: on a wide matrix row 2 prefers column 2 over column 0.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol

import numpy as np
from scipy.optimize import linear_sum_assignment

from app.core.errors import DependencyError
from app.utils.logger import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class Assignment:
    """
    Sparse solver output: every row maps to a column index or None.
    """
    rows: dict[int, Optional[int]]
    n_cols: int
    unassigned_cols: frozenset[int] = field(default_factory=frozenset)

    def pairs(self) -> list[tuple[int, int]]:
        """Assigned (row, col) pairs in row order."""
        return [(r, c) for r, c in sorted(self.rows.items()) if c is not None]

    @property
    def unassigned_rows(self) -> list[int]:
        return [r for r, c in sorted(self.rows.items()) if c is None]

    def total(self, matrix: np.ndarray) -> float:
        return float(sum(matrix[r, c] for r, c in self.pairs()))


class AssignmentSolver(Protocol):
    def solve(self, matrix: np.ndarray) -> Assignment: ...


def _tie_break_penalty(n_rows: int, n_cols: int) -> np.ndarray:
    """(i - j)² scaled so its sum over any assignment stays below 1."""
    k = min(n_rows, n_cols)
    span = max(n_rows, n_cols) - 1
    if span == 0:
        return np.zeros((n_rows, n_cols), dtype=np.float64)

    eps = 1.0 / (k * span * span + 1)
    i = np.arange(n_rows, dtype=np.float64)[:, None]
    j = np.arange(n_cols, dtype=np.float64)[None, :]
    return eps * (i - j) ** 2


class ScipyAssignmentSolver:
    """Maximum-reward rectangular assignment with a fixed tie-break."""

    def solve(self, matrix: np.ndarray) -> Assignment:
        """
        Solve the maximum-weight assignment over a reward matrix.

        Args:
            matrix: (M, N) reward matrix, higher = better match

        Returns:
            Assignment covering all M rows.

        Raises:
            DependencyError: on a malformed/non-finite matrix or solver failure.
        """
        reward = np.asarray(matrix, dtype=np.float64)
        if reward.ndim != 2:
            raise DependencyError(
                f"Assignment solver expects a 2-D matrix, got shape {reward.shape}"
            )

        n_rows, n_cols = reward.shape
        if n_rows == 0 or n_cols == 0:
            return Assignment(
                rows={r: None for r in range(n_rows)},
                n_cols=n_cols,
                unassigned_cols=frozenset(range(n_cols)),
            )

        if not np.all(np.isfinite(reward)):
            raise DependencyError("Assignment solver received non-finite scores")

        if np.array_equal(reward, np.rint(reward)):
            reward = reward - _tie_break_penalty(n_rows, n_cols)

        log.debug("hungarian_start", n_rows=n_rows, n_cols=n_cols)

        try:
            row_ind, col_ind = linear_sum_assignment(reward, maximize=True)
        except ValueError as exc:
            raise DependencyError(f"Assignment solver failed: {exc}") from exc

        rows: dict[int, Optional[int]] = {r: None for r in range(n_rows)}
        for r, c in zip(row_ind, col_ind):
            rows[int(r)] = int(c)

        used_cols = {int(c) for c in col_ind}
        assignment = Assignment(
            rows=rows,
            n_cols=n_cols,
            unassigned_cols=frozenset(set(range(n_cols)) - used_cols),
        )

        log.debug(
            "hungarian_complete",
            assigned_pairs=len(row_ind),
            unassigned_rows=len(assignment.unassigned_rows),
            unassigned_cols=len(assignment.unassigned_cols),
        )
        return assignment
