# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Result Shaping
Post-Hungarian: turns a raw row→column assignment plus the user's locks
into the ranked, thresholded, partitioned MatchResult.

Order of operations:
  merge (manual first, then automatic in row order)
  → threshold filter (manual exempt)
  → stable sort by score descending
  → unmatched remainders, by value
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np

from app.models.matching import Lock, Match, MatchResult
from app.modules.matching.assignment import Assignment
from app.utils.logger import get_logger

log = get_logger(__name__)

MANUAL_SCORE = 100.0


def manual_matches(locks: Iterable[Lock]) -> list[Match]:
    """One score-100 manual match per lock, in declaration order."""
    return [
        Match(source=lock.source, target=lock.target, score=MANUAL_SCORE, is_manual=True)
        for lock in locks
    ]


def automatic_matches(
    assignment: Optional[Assignment],
    open_a: Sequence[str],
    open_b: Sequence[str],
    matrix: Optional[np.ndarray],
) -> list[Match]:
    """Convert assigned (row, col) pairs into automatic matches, in row order."""
    if assignment is None or matrix is None:
        return []

    return [
        Match(
            source=open_a[row],
            target=open_b[col],
            score=float(matrix[row, col]),
            is_manual=False,
        )
        for row, col in assignment.pairs()
    ]


def filter_by_threshold(
    matches: Sequence[Match],
    threshold: Optional[float],
) -> list[Match]:
    """
    Drop automatic matches scoring strictly below threshold.
    Manual matches always survive; threshold=None keeps everything.
    """
    if threshold is None:
        return list(matches)

    kept = [m for m in matches if m.is_manual or m.score >= threshold]

    log.debug(
        "threshold_filter_complete",
        threshold=threshold,
        before=len(matches),
        after=len(kept),
    )
    return kept


def rank_matches(matches: Sequence[Match]) -> list[Match]:
    """Sort by score descending. sorted() is stable, so ties keep merge order."""
    return sorted(matches, key=lambda m: m.score, reverse=True)


def compute_unmatched(items: Sequence[str], matched: Iterable[str]) -> list[str]:
    """
    Items whose value does not appear among the matched values, in input order.
    Matching is by value: every duplicate of a matched label counts as matched.
    """
    matched_values = set(matched)
    return [x for x in items if x not in matched_values]


def build_result(
    list_a: Sequence[str],
    list_b: Sequence[str],
    manual: Sequence[Match],
    automatic: Sequence[Match],
    threshold: Optional[float],
) -> MatchResult:
    """Merge, filter, rank and partition into an immutable MatchResult."""
    merged = [*manual, *automatic]
    ranked = rank_matches(filter_by_threshold(merged, threshold))

    return MatchResult(
        matches=tuple(ranked),
        unmatched_source=tuple(compute_unmatched(list_a, (m.source for m in ranked))),
        unmatched_target=tuple(compute_unmatched(list_b, (m.target for m in ranked))),
    )
