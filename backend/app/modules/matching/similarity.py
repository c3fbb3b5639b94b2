# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — String Similarity Provider
Registry of named rapidfuzz scorers, selectable per run via
MatchOptions.ratio.

Every scorer returns an integer in [0, 100]. Inputs are normalised with
rapidfuzz's default_process (lowercase, non-alphanumerics stripped) so
"Apple, Inc." and "apple inc" compare equal.

The full |A| × |B| matrix is built in one rapidfuzz.process.cdist call
rather than a Python double loop.

An unknown ratio name does not fail the run; it falls back to the
order-insensitive token_sort_ratio.
"""

from __future__ import annotations

from typing import Callable, Protocol, Sequence

import numpy as np
from rapidfuzz import fuzz, process, utils

from app.core.errors import DependencyError
from app.models.matching import DEFAULT_RATIO
from app.utils.logger import get_logger

log = get_logger(__name__)

Scorer = Callable[..., float]

RATIOS: dict[str, Scorer] = {
    "ratio": fuzz.ratio,
    "partial_ratio": fuzz.partial_ratio,
    "token_sort_ratio": fuzz.token_sort_ratio,
    "token_set_ratio": fuzz.token_set_ratio,
    "partial_token_sort_ratio": fuzz.partial_token_sort_ratio,
    "partial_token_set_ratio": fuzz.partial_token_set_ratio,
    "WRatio": fuzz.WRatio,
    "QRatio": fuzz.QRatio,
}


class SimilarityProvider(Protocol):
    """Anything that can score every row string against every column string."""

    def score_matrix(
        self, rows: Sequence[str], cols: Sequence[str], ratio: str
    ) -> np.ndarray: ...


def available_ratios() -> list[str]:
    return list(RATIOS)


def resolve_ratio(name: str | None) -> tuple[str, Scorer]:
    """
    Look up a scorer by name.
    Returns (effective_name, scorer), the default on unknown names.
    """
    if name in RATIOS:
        return name, RATIOS[name]

    log.warning("unknown_ratio_fallback", requested=name, fallback=DEFAULT_RATIO)
    return DEFAULT_RATIO, RATIOS[DEFAULT_RATIO]


def score(a: str, b: str, ratio: str = DEFAULT_RATIO) -> int:
    """Score a single pair with the named strategy."""
    _, scorer = resolve_ratio(ratio)
    try:
        value = scorer(a, b, processor=utils.default_process)
    except Exception as exc:
        raise DependencyError(f"Similarity scorer '{ratio}' failed: {exc}") from exc
    return int(round(value))


class RapidFuzzProvider:
    """Default similarity provider backed by rapidfuzz."""

    def __init__(self, workers: int = 1) -> None:
        # cdist parallelism; 1 keeps runs single-threaded
        self._workers = workers

    def score_matrix(
        self, rows: Sequence[str], cols: Sequence[str], ratio: str = DEFAULT_RATIO
    ) -> np.ndarray:
        """
        Build the (len(rows), len(cols)) int32 similarity matrix.

        Raises:
            DependencyError: if rapidfuzz fails for any reason.
        """
        effective, scorer = resolve_ratio(ratio)

        try:
            raw = process.cdist(
                list(rows),
                list(cols),
                scorer=scorer,
                processor=utils.default_process,
                workers=self._workers,
            )
        except Exception as exc:
            raise DependencyError(
                f"Similarity scorer '{effective}' failed: {exc}"
            ) from exc

        matrix = np.rint(raw).astype(np.int32)

        log.debug(
            "score_matrix_built",
            ratio=effective,
            shape=matrix.shape,
        )
        return matrix
