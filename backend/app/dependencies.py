# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — FastAPI Dependencies
Singleton providers for the WorkspaceStore, the MatchEngine and the
loaded configuration document. All are instantiated once at startup
via the lifespan event in main.py and stored here as module-level
singletons. Route handlers access them via FastAPI's Depends() injection.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from app.config import get_settings
from app.core.app_config import load_app_config
from app.core.workspace_store import InMemoryWorkspaceStore, WorkspaceStore
from app.models.app_config import AppConfig
from app.modules.matching.engine import MatchEngine
from app.utils.logger import get_logger

log = get_logger(__name__)

# ─── WorkspaceStore Singleton ────────────────────────────────────────────────

_workspace_store: WorkspaceStore | None = None


def init_workspace_store() -> None:
    """Initialise the WorkspaceStore singleton. Called once during lifespan startup."""
    global _workspace_store
    log.info("init_workspace_store", backend="memory")
    _workspace_store = InMemoryWorkspaceStore()


def get_workspace_store() -> WorkspaceStore:
    """
    FastAPI dependency: inject the WorkspaceStore singleton into route handlers.

    Usage in a route:
        @router.get("/workspaces/{workspace_id}")
        def get_workspace(workspace_id: str, store: WorkspaceStoreDep):
            ...
    """
    if _workspace_store is None:
        raise RuntimeError(
            "WorkspaceStore has not been initialised. "
            "Ensure init_workspace_store() is called during app lifespan startup."
        )
    return _workspace_store


WorkspaceStoreDep = Annotated[WorkspaceStore, Depends(get_workspace_store)]


# ─── MatchEngine Singleton ───────────────────────────────────────────────────

_engine: MatchEngine | None = None


def init_engine() -> None:
    """Build the rapidfuzz + scipy engine once at startup."""
    global _engine
    settings = get_settings()
    _engine = MatchEngine(max_list_items=settings.max_list_items)
    log.info("init_engine", max_list_items=settings.max_list_items)


def get_engine() -> MatchEngine:
    if _engine is None:
        raise RuntimeError(
            "MatchEngine has not been initialised. "
            "Ensure init_engine() is called during app lifespan startup."
        )
    return _engine


EngineDep = Annotated[MatchEngine, Depends(get_engine)]


# ─── Configuration Document ──────────────────────────────────────────────────

_app_config: AppConfig | None = None


def init_app_config() -> None:
    """Load config.json once; never fails (see core.app_config)."""
    global _app_config
    _app_config = load_app_config()


def get_app_config() -> AppConfig:
    if _app_config is None:
        raise RuntimeError(
            "AppConfig has not been loaded. "
            "Ensure init_app_config() is called during app lifespan startup."
        )
    return _app_config


AppConfigDep = Annotated[AppConfig, Depends(get_app_config)]
