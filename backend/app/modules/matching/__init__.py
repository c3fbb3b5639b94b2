# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Matching Engine Module
Public API for the global optimal list-matching pipeline.
"""

from app.modules.matching.assignment import (
    Assignment,
    AssignmentSolver,
    ScipyAssignmentSolver,
)
from app.modules.matching.engine import MatchEngine, get_default_engine, match_lists
from app.modules.matching.lock_set import LockSet
from app.modules.matching.postprocess import (
    build_result,
    compute_unmatched,
    filter_by_threshold,
    rank_matches,
)
from app.modules.matching.similarity import (
    RapidFuzzProvider,
    SimilarityProvider,
    available_ratios,
    resolve_ratio,
    score,
)

__all__ = [
    # Similarity
    "SimilarityProvider",
    "RapidFuzzProvider",
    "available_ratios",
    "resolve_ratio",
    "score",
    # Locks
    "LockSet",
    # Hungarian solver
    "Assignment",
    "AssignmentSolver",
    "ScipyAssignmentSolver",
    # Result shaping
    "filter_by_threshold",
    "rank_matches",
    "compute_unmatched",
    "build_result",
    # Orchestrator
    "MatchEngine",
    "get_default_engine",
    "match_lists",
]
