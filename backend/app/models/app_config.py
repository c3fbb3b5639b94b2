# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Configuration Document Models
Shape of config.json: a gallery of demo list-pairs plus the
deployment's default matching options.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.matching import DEFAULT_RATIO, DEFAULT_THRESHOLD, Lock, MatchOptions


class Demo(BaseModel):
    """A named preset list-pair, optionally with pre-seeded locks."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    body: str = ""
    icon: str = "bi bi-list-check"
    list_a: list[str] = Field(default_factory=list)
    list_b: list[str] = Field(default_factory=list)
    locks: list[Lock] = Field(default_factory=list)


class Defaults(BaseModel):
    """Default matching options; each missing field falls back on its own."""
    ratio: str = DEFAULT_RATIO
    threshold: Optional[float] = DEFAULT_THRESHOLD

    def apply(self, options: Optional[MatchOptions] = None) -> MatchOptions:
        """
        Return options with every field the caller did not set explicitly
        taken from these defaults. An explicit threshold=None is preserved.
        """
        if options is None:
            return MatchOptions(ratio=self.ratio, threshold=self.threshold)

        explicit = options.model_fields_set
        return MatchOptions(
            ratio=options.ratio if "ratio" in explicit else self.ratio,
            threshold=options.threshold if "threshold" in explicit else self.threshold,
        )


class AppConfig(BaseModel):
    demos: list[Demo] = Field(default_factory=list)
    defaults: Defaults = Field(default_factory=Defaults)
