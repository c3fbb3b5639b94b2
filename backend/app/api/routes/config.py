# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — GET /config
Demo gallery and effective matching defaults for the frontend.
"""

from __future__ import annotations

from fastapi import APIRouter

from app.dependencies import AppConfigDep
from app.models.workspace import ConfigResponse
from app.modules.matching.similarity import available_ratios

router = APIRouter(tags=["config"])


@router.get(
    "/config",
    response_model=ConfigResponse,
    summary="Demo presets and default options",
)
async def get_config(app_config: AppConfigDep) -> ConfigResponse:
    return ConfigResponse(
        demos=app_config.demos,
        defaults=app_config.defaults,
        ratios=available_ratios(),
    )
