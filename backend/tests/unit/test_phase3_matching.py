# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 3 — Matching component tests.
Covers the similarity registry, the lock set invariants, the Hungarian
assignment adapter (rectangular inputs, tie-break, optimality) and
result shaping (threshold, ranking, unmatched remainders).
"""

from itertools import permutations

import numpy as np
import pytest

from app.models.matching import Match


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _brute_force_best(matrix: np.ndarray) -> float:
    """Best total over every one-to-one pairing (small matrices only)."""
    m, n = matrix.shape
    if m > n:
        return _brute_force_best(matrix.T)
    best = 0.0
    for cols in permutations(range(n), m):
        best = max(best, float(sum(matrix[i, c] for i, c in enumerate(cols))))
    return best


def _auto(source: str, target: str, score: float) -> Match:
    return Match(source=source, target=target, score=score, is_manual=False)


def _manual(source: str, target: str) -> Match:
    return Match(source=source, target=target, score=100, is_manual=True)


# ─── Similarity ──────────────────────────────────────────────────────────────

def test_score_identical_strings_is_100():
    from app.modules.matching.similarity import score
    assert score("Apple", "Apple") == 100


def test_score_ignores_case_and_punctuation():
    from app.modules.matching.similarity import score
    assert score("Apple, Inc.", "apple inc") == 100


def test_token_sort_ignores_word_order_but_ratio_does_not():
    from app.modules.matching.similarity import score
    assert score("new york mets", "mets new york", "token_sort_ratio") == 100
    assert score("new york mets", "mets new york", "ratio") < 100


def test_score_is_integer_in_range():
    from app.modules.matching.similarity import available_ratios, score

    for ratio in available_ratios():
        value = score("Banana split", "Bananna", ratio)
        assert isinstance(value, int)
        assert 0 <= value <= 100


def test_unknown_ratio_falls_back_to_token_sort():
    from app.modules.matching.similarity import resolve_ratio, score

    name, _ = resolve_ratio("definitely_not_a_ratio")
    assert name == "token_sort_ratio"
    assert score("york new", "new york", "definitely_not_a_ratio") == 100


def test_available_ratios_contains_defaults():
    from app.modules.matching.similarity import available_ratios

    names = available_ratios()
    for expected in ("ratio", "partial_ratio", "token_sort_ratio", "token_set_ratio"):
        assert expected in names


def test_score_matrix_shape_and_dtype():
    from app.modules.matching.similarity import RapidFuzzProvider, score

    rows = ["Apple", "Banana", "Cherry"]
    cols = ["Appel", "Bananna"]
    matrix = RapidFuzzProvider().score_matrix(rows, cols, "token_sort_ratio")

    assert matrix.shape == (3, 2)
    assert matrix.dtype == np.int32
    assert np.all((matrix >= 0) & (matrix <= 100))
    # Matrix cells agree with the single-pair scorer
    assert matrix[1, 1] == score("Banana", "Bananna", "token_sort_ratio")


# ─── Lock Set ────────────────────────────────────────────────────────────────

def test_lock_set_add_and_query():
    from app.modules.matching.lock_set import LockSet

    locks = LockSet()
    locks.add_lock("X", "Z")
    locks.add_lock("W", "Y")

    assert len(locks) == 2
    assert locks.sources == {"X", "W"}
    assert locks.targets == {"Z", "Y"}
    assert locks.to_pairs() == [("X", "Z"), ("W", "Y")]


def test_lock_set_duplicate_pair_rejected():
    from app.core.errors import ValidationError
    from app.modules.matching.lock_set import LockSet

    locks = LockSet()
    locks.add_lock("X", "Z")
    with pytest.raises(ValidationError):
        locks.add_lock("X", "Z")
    assert len(locks) == 1


def test_lock_set_source_reuse_rejected():
    from app.core.errors import LockConflictError
    from app.modules.matching.lock_set import LockSet

    locks = LockSet()
    locks.add_lock("X", "Z")
    with pytest.raises(LockConflictError):
        locks.add_lock("X", "Y")


def test_lock_set_target_reuse_rejected():
    from app.core.errors import LockConflictError
    from app.modules.matching.lock_set import LockSet

    locks = LockSet()
    locks.add_lock("X", "Z")
    with pytest.raises(LockConflictError):
        locks.add_lock("W", "Z")


def test_lock_conflict_is_validation_error():
    from app.core.errors import LockConflictError, ValidationError
    assert issubclass(LockConflictError, ValidationError)


def test_lock_set_blank_side_rejected():
    from app.core.errors import ValidationError
    from app.modules.matching.lock_set import LockSet

    with pytest.raises(ValidationError):
        LockSet().add_lock("  ", "Z")


def test_lock_set_add_trims_items():
    from app.modules.matching.lock_set import LockSet

    locks = LockSet()
    locks.add_lock("  X ", " Z")
    assert locks.to_pairs() == [("X", "Z")]


def test_lock_set_remove():
    from app.modules.matching.lock_set import LockSet

    locks = LockSet.from_pairs([("X", "Z"), ("W", "Y")])
    removed = locks.remove_lock(0)

    assert removed.as_pair() == ("X", "Z")
    assert locks.to_pairs() == [("W", "Y")]
    # Freed items can be locked again
    locks.add_lock("X", "Z")


def test_lock_set_remove_out_of_range():
    from app.modules.matching.lock_set import LockSet

    locks = LockSet.from_pairs([("X", "Z")])
    with pytest.raises(IndexError):
        locks.remove_lock(1)
    with pytest.raises(IndexError):
        locks.remove_lock(-1)
    assert len(locks) == 1


def test_lock_set_from_mixed_pairs():
    from app.models.matching import Lock
    from app.modules.matching.lock_set import LockSet

    locks = LockSet.from_pairs([
        ["A", "1"],
        ("B", "2"),
        Lock(source="C", target="3"),
        {"source": "D", "target": "4"},
    ])
    assert locks.to_pairs() == [("A", "1"), ("B", "2"), ("C", "3"), ("D", "4")]


def test_lock_set_from_malformed_pair():
    from app.core.errors import ValidationError
    from app.modules.matching.lock_set import LockSet

    with pytest.raises(ValidationError):
        LockSet.from_pairs([("A", "B", "C")])


@pytest.mark.parametrize("pair", [(1, "b"), ("a", 2.5), (None, "b"), ("a", ["b"])])
def test_lock_set_non_string_side_is_validation_error(pair):
    from app.core.errors import ValidationError
    from app.modules.matching.lock_set import LockSet

    with pytest.raises(ValidationError):
        LockSet.from_pairs([pair])


def test_engine_rejects_non_string_lock_side():
    from app.core.errors import ValidationError
    from app.modules.matching.engine import MatchEngine

    with pytest.raises(ValidationError):
        MatchEngine().match_lists(["1"], ["b"], locks=[(1, "b")])


def test_engine_rejects_non_string_list_item():
    from app.core.errors import ValidationError
    from app.modules.matching.engine import MatchEngine

    with pytest.raises(ValidationError):
        MatchEngine().match_lists(["a", 7], ["b"])


def test_lock_set_from_pairs_copies_lock_set():
    from app.modules.matching.lock_set import LockSet

    original = LockSet.from_pairs([("A", "B")])
    clone = LockSet.from_pairs(original)
    clone.add_lock("C", "D")

    assert len(original) == 1


def test_lock_set_validate_against_lists():
    from app.core.errors import ValidationError
    from app.modules.matching.lock_set import LockSet

    locks = LockSet.from_pairs([("X", "Z")])
    locks.validate_against(["X"], ["Y", "Z"])

    with pytest.raises(ValidationError):
        locks.validate_against(["W"], ["Z"])
    with pytest.raises(ValidationError):
        locks.validate_against(["X"], ["Y"])


def test_lock_set_prune():
    from app.modules.matching.lock_set import LockSet

    locks = LockSet.from_pairs([("X", "Z"), ("W", "Y")])
    dropped = locks.prune(["X", "W"], ["Z"])

    assert [lock.as_pair() for lock in dropped] == [("W", "Y")]
    assert locks.to_pairs() == [("X", "Z")]


def test_lock_set_stays_a_bipartite_matching():
    from app.core.errors import ValidationError
    from app.modules.matching.lock_set import LockSet

    rng = np.random.default_rng(3)
    locks = LockSet()
    for _ in range(200):
        a = f"a{rng.integers(0, 8)}"
        b = f"b{rng.integers(0, 8)}"
        try:
            locks.add_lock(a, b)
        except ValidationError:
            pass

    pairs = locks.to_pairs()
    assert len({a for a, _ in pairs}) == len(pairs)
    assert len({b for _, b in pairs}) == len(pairs)


# ─── Hungarian Assignment ────────────────────────────────────────────────────

def test_solver_beats_greedy():
    from app.modules.matching.assignment import ScipyAssignmentSolver

    # Greedy takes row0→col0 (90) and leaves row1 with 10 (total 100).
    # Optimal is row0→col1 + row1→col0 = 173.
    matrix = np.array([[90, 85], [88, 10]])
    assignment = ScipyAssignmentSolver().solve(matrix)

    assert assignment.pairs() == [(0, 1), (1, 0)]
    assert assignment.total(matrix) == 173


def test_solver_tall_matrix_leaves_rows_unassigned():
    from app.modules.matching.assignment import ScipyAssignmentSolver

    matrix = np.array([[50, 10], [60, 70], [90, 20]])
    assignment = ScipyAssignmentSolver().solve(matrix)

    assert assignment.rows[0] is None
    assert assignment.pairs() == [(1, 1), (2, 0)]
    assert assignment.unassigned_rows == [0]
    assert assignment.unassigned_cols == frozenset()


def test_solver_wide_matrix_leaves_columns_unassigned():
    from app.modules.matching.assignment import ScipyAssignmentSolver

    matrix = np.array([[10, 80, 30]])
    assignment = ScipyAssignmentSolver().solve(matrix)

    assert assignment.rows == {0: 1}
    assert assignment.unassigned_cols == frozenset({0, 2})


def test_solver_tie_break_prefers_diagonal():
    from app.modules.matching.assignment import ScipyAssignmentSolver

    solver = ScipyAssignmentSolver()
    assert solver.solve(np.full((2, 2), 50)).pairs() == [(0, 0), (1, 1)]
    assert solver.solve(np.full((3, 3), 0)).pairs() == [(0, 0), (1, 1), (2, 2)]


def test_solver_tie_break_prefers_diagonal_when_rectangular():
    from app.modules.matching.assignment import ScipyAssignmentSolver

    solver = ScipyAssignmentSolver()
    assert solver.solve(np.full((1, 3), 70)).rows == {0: 0}
    assert solver.solve(np.full((3, 1), 70)).rows == {0: 0, 1: None, 2: None}
    assert solver.solve(np.full((3, 5), 70)).pairs() == [(0, 0), (1, 1), (2, 2)]


def test_solver_tie_break_is_diagonal_not_lowest_index():
    from app.modules.matching.assignment import ScipyAssignmentSolver

    # Rows 0 and 1 are pinned to columns 1 and 3; row 2 ties across 0/2/4
    matrix = np.array([
        [0, 90, 0, 0, 0],
        [0, 0, 0, 90, 0],
        [50, 0, 50, 0, 50],
    ])
    assignment = ScipyAssignmentSolver().solve(matrix)
    assert assignment.rows == {0: 1, 1: 3, 2: 2}


def test_solver_tie_break_never_overrides_real_reward():
    from app.modules.matching.assignment import ScipyAssignmentSolver

    # Off-diagonal is better by a single point
    matrix = np.array([[50, 51], [51, 50]])
    assert ScipyAssignmentSolver().solve(matrix).pairs() == [(0, 1), (1, 0)]


def test_solver_is_optimal_on_random_matrices():
    from app.modules.matching.assignment import ScipyAssignmentSolver

    rng = np.random.default_rng(11)
    solver = ScipyAssignmentSolver()
    for shape in [(3, 3), (4, 5), (5, 4), (2, 6), (6, 2), (5, 5)]:
        matrix = rng.integers(0, 101, size=shape)
        assignment = solver.solve(matrix)
        assert assignment.total(matrix) == _brute_force_best(matrix)
        assert len(assignment.pairs()) == min(shape)


def test_solver_deterministic():
    from app.modules.matching.assignment import ScipyAssignmentSolver

    rng = np.random.default_rng(5)
    matrix = rng.integers(0, 4, size=(6, 7))  # lots of ties
    solver = ScipyAssignmentSolver()
    assert solver.solve(matrix) == solver.solve(matrix.copy())


def test_solver_float_matrix():
    from app.modules.matching.assignment import ScipyAssignmentSolver

    matrix = np.array([[0.9, 0.2], [0.8, 0.7]])
    assert ScipyAssignmentSolver().solve(matrix).pairs() == [(0, 0), (1, 1)]


def test_solver_empty_matrix():
    from app.modules.matching.assignment import ScipyAssignmentSolver

    assignment = ScipyAssignmentSolver().solve(np.zeros((0, 3)))
    assert assignment.rows == {}
    assert assignment.unassigned_cols == frozenset({0, 1, 2})


def test_solver_rejects_non_finite():
    from app.core.errors import DependencyError
    from app.modules.matching.assignment import ScipyAssignmentSolver

    with pytest.raises(DependencyError):
        ScipyAssignmentSolver().solve(np.array([[1.0, np.nan], [2.0, 3.0]]))


def test_solver_rejects_non_2d():
    from app.core.errors import DependencyError
    from app.modules.matching.assignment import ScipyAssignmentSolver

    with pytest.raises(DependencyError):
        ScipyAssignmentSolver().solve(np.array([1, 2, 3]))


# ─── Result Shaping ──────────────────────────────────────────────────────────

def test_filter_threshold_none_keeps_everything():
    from app.modules.matching.postprocess import filter_by_threshold

    matches = [_auto("a", "b", 5), _auto("c", "d", 95)]
    assert filter_by_threshold(matches, None) == matches


def test_filter_threshold_is_inclusive_and_exempts_manual():
    from app.modules.matching.postprocess import filter_by_threshold

    matches = [
        _manual("x", "y"),
        _auto("a", "b", 59),
        _auto("c", "d", 60),
    ]
    kept = filter_by_threshold(matches, 60)
    assert [(m.source, m.target) for m in kept] == [("x", "y"), ("c", "d")]

    # Manual survives even an impossible threshold
    assert filter_by_threshold(matches, 1000) == [matches[0]]


def test_rank_matches_descending_and_stable():
    from app.modules.matching.postprocess import rank_matches

    matches = [
        _manual("m", "n"),
        _auto("a", "b", 70),
        _auto("c", "d", 100),
        _auto("e", "f", 70),
    ]
    ranked = rank_matches(matches)
    assert [m.source for m in ranked] == ["m", "c", "a", "e"]


def test_compute_unmatched_by_value():
    from app.modules.matching.postprocess import compute_unmatched

    items = ["Apple", "Pear", "Apple", "Kiwi"]
    assert compute_unmatched(items, ["Apple"]) == ["Pear", "Kiwi"]


def test_build_result_partitions_and_ranks():
    from app.modules.matching.postprocess import build_result

    result = build_result(
        ["X", "A", "B"],
        ["Z", "C", "D"],
        [_manual("X", "Z")],
        [_auto("A", "C", 40), _auto("B", "D", 90)],
        threshold=50,
    )
    assert [(m.source, m.target) for m in result.matches] == [("X", "Z"), ("B", "D")]
    assert result.unmatched_source == ("A",)
    assert result.unmatched_target == ("C",)


def test_match_band():
    from app.models.matching import ScoreBand

    assert _auto("a", "b", 85).band == ScoreBand.HIGH
    assert _auto("a", "b", 50).band == ScoreBand.MEDIUM
    assert _auto("a", "b", 49).band == ScoreBand.LOW
    assert _manual("a", "b").band == ScoreBand.HIGH


def test_result_stats():
    from app.models.matching import MatchResult

    result = MatchResult(
        matches=(_manual("x", "y"), _auto("a", "b", 80), _auto("c", "d", 60)),
        unmatched_source=("e",),
    )
    stats = result.stats
    assert stats.total_matches == 3
    assert stats.manual_count == 1
    assert stats.auto_count == 2
    assert stats.mean_score == pytest.approx(80.0)
    assert stats.min_score == 60
    assert stats.max_score == 100
    assert stats.unmatched_source_count == 1
    assert stats.unmatched_target_count == 0


def test_result_stats_empty():
    from app.models.matching import MatchResult

    stats = MatchResult().stats
    assert stats.total_matches == 0
    assert stats.mean_score == 0.0


def test_result_is_immutable():
    from pydantic import ValidationError as PydanticValidationError

    from app.models.matching import MatchResult

    result = MatchResult(matches=(_auto("a", "b", 80),))
    with pytest.raises(PydanticValidationError):
        result.matches = ()
