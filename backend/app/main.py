# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — FastAPI Application Entry Point
Creates the app, registers lifespan events, CORS, routers,
and global error handlers.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.middleware.error_handler import register_error_handlers
from app.api.routes import config, ingest, match, workspaces
from app.config import get_settings
from app.dependencies import (
    get_app_config,
    init_app_config,
    init_engine,
    init_workspace_store,
)
from app.utils.logger import configure_logging, get_logger

log = get_logger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Startup: configure logging, load config.json, build the engine and
    the workspace store.
    """
    # ── Startup ──────────────────────────────────────────────────────────────
    configure_logging()
    settings = get_settings()

    log.info(
        "listmatch_startup",
        version=VERSION,
        app_config_path=str(settings.app_config_path),
        max_list_items=settings.max_list_items,
    )

    init_app_config()
    init_engine()
    init_workspace_store()

    defaults = get_app_config().defaults
    log.info("listmatch_ready", ratio=defaults.ratio, threshold=defaults.threshold)
    yield

    # ── Shutdown ─────────────────────────────────────────────────────────────
    log.info("listmatch_shutdown")


def create_app() -> FastAPI:
    app = FastAPI(
        title="ListMatch",
        summary="Globally optimal fuzzy matching between two lists.",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # ── CORS ─────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",   # Vite dev server
            "http://localhost:3000",   # Alternative dev port
            "http://localhost:80",     # Docker nginx
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Error Handlers ───────────────────────────────────────────────────────
    register_error_handlers(app)

    # ── Routers ──────────────────────────────────────────────────────────────
    app.include_router(match.router)
    app.include_router(workspaces.router)
    app.include_router(ingest.router)
    app.include_router(config.router)

    # ── Health Check ─────────────────────────────────────────────────────────
    @app.get("/health", tags=["health"], summary="Health check")
    async def health() -> dict:
        return {
            "status": "ok",
            "service": "listmatch",
            "version": VERSION,
        }

    return app


# Module-level app instance for uvicorn
app = create_app()
