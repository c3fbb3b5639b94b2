# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — POST /match + GET /ratios
Stateless matching: the caller sends both lists, its locks and options,
and receives a fresh MatchResult. Nothing is stored server-side.
"""

from __future__ import annotations

from fastapi import APIRouter

from app.dependencies import AppConfigDep, EngineDep
from app.models.matching import MatchResult
from app.models.workspace import MatchRequest
from app.modules.matching.similarity import available_ratios
from app.utils.logger import get_logger

router = APIRouter(tags=["match"])
log = get_logger(__name__)


@router.post(
    "/match",
    response_model=MatchResult,
    summary="Match two lists",
    description=(
        "Globally optimal pairing of listA against listB. Locked pairs are "
        "always kept with score 100; automatic pairs below the threshold "
        "are dropped. Options left unset use the configured defaults."
    ),
)
async def match(
    body: MatchRequest,
    engine: EngineDep,
    app_config: AppConfigDep,
) -> MatchResult:
    options = app_config.defaults.apply(body.options)
    log.debug("match_request_received", ratio=options.ratio, threshold=options.threshold)
    return await engine.match_lists_async(body.list_a, body.list_b, body.locks, options)


@router.get(
    "/ratios",
    summary="List similarity strategies",
)
async def ratios() -> dict:
    return {"ratios": available_ratios()}
