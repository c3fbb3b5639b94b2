# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Matching Data Models
Pydantic models for the values that flow through the matching engine:
user locks, options, resolved matches, and the final result snapshot.

All public models serialise with camelCase aliases (isManual,
unmatchedSource, ...) and accept either spelling on input.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_RATIO = "token_sort_ratio"
DEFAULT_THRESHOLD = 60.0

# Score bands, same cut-offs the result table colours by
_BAND_HIGH = 80.0
_BAND_MEDIUM = 50.0


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ScoreBand(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Lock(_CamelModel):
    """A user-declared forced pairing of a List A item with a List B item."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        str_strip_whitespace=True,
    )

    source: str = Field(..., min_length=1, description="Item from List A")
    target: str = Field(..., min_length=1, description="Item from List B")

    @model_validator(mode="before")
    @classmethod
    def _accept_pair(cls, data: Any) -> Any:
        # Config documents and the editor send locks as ["a", "b"]
        if isinstance(data, (list, tuple)):
            if len(data) != 2:
                raise ValueError("A lock pair must have exactly two items")
            return {"source": data[0], "target": data[1]}
        return data

    def as_pair(self) -> tuple[str, str]:
        return self.source, self.target


class MatchOptions(_CamelModel):
    """
    Per-run matching options.
    threshold=None disables filtering; fields the caller leaves unset are
    filled from the configured defaults by Defaults.apply().
    """
    ratio: str = DEFAULT_RATIO
    threshold: Optional[float] = DEFAULT_THRESHOLD


class Match(_CamelModel):
    """A resolved (source, target) pair with its similarity score."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    source: str
    target: str
    score: float = Field(..., ge=0.0, le=100.0)
    is_manual: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def band(self) -> ScoreBand:
        if self.is_manual or self.score >= _BAND_HIGH:
            return ScoreBand.HIGH
        if self.score >= _BAND_MEDIUM:
            return ScoreBand.MEDIUM
        return ScoreBand.LOW


class MatchStats(_CamelModel):
    """Summary numbers for a result, used in logs and the results header."""
    total_matches: int = 0
    manual_count: int = 0
    auto_count: int = 0
    mean_score: float = 0.0
    min_score: float = 0.0
    max_score: float = 0.0
    unmatched_source_count: int = 0
    unmatched_target_count: int = 0


class MatchResult(_CamelModel):
    """
    Immutable snapshot produced by one engine invocation.
    Carries no reference back to the caller's lists or lock set.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    matches: tuple[Match, ...] = ()
    unmatched_source: tuple[str, ...] = ()
    unmatched_target: tuple[str, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def stats(self) -> MatchStats:
        scores = [m.score for m in self.matches]
        manual = sum(1 for m in self.matches if m.is_manual)
        return MatchStats(
            total_matches=len(self.matches),
            manual_count=manual,
            auto_count=len(self.matches) - manual,
            mean_score=sum(scores) / len(scores) if scores else 0.0,
            min_score=min(scores) if scores else 0.0,
            max_score=max(scores) if scores else 0.0,
            unmatched_source_count=len(self.unmatched_source),
            unmatched_target_count=len(self.unmatched_target),
        )

    @property
    def automatic_matches(self) -> tuple[Match, ...]:
        return tuple(m for m in self.matches if not m.is_manual)

    @property
    def manual_matches(self) -> tuple[Match, ...]:
        return tuple(m for m in self.matches if m.is_manual)
