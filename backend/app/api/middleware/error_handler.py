# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Global Error Handler
Converts domain and unhandled exceptions into structured JSON error
responses. Registered on the FastAPI app in main.py.

FastAPI resolves handlers along the exception's MRO, so
LockConflictError (409) wins over its ValidationError parent (422).
"""

from __future__ import annotations

import traceback

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.core.errors import (
    DependencyError,
    IngestionError,
    LockConflictError,
    ValidationError,
    WorkspaceNotFoundError,
)
from app.utils.logger import get_logger

log = get_logger(__name__)


def _error_body(code: str, message: str, detail: str | None = None) -> dict:
    body = {"error": {"code": code, "message": message}}
    if detail:
        body["error"]["detail"] = detail
    return body


def register_error_handlers(app: FastAPI) -> None:
    """
    Register all global exception handlers on the FastAPI application.
    Call this in main.py after creating the app instance.
    """

    @app.exception_handler(LockConflictError)
    async def lock_conflict_handler(
        req: Request, exc: LockConflictError
    ) -> JSONResponse:
        log.warning("lock_conflict", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=_error_body(code="LOCK_CONFLICT", message=str(exc)),
        )

    @app.exception_handler(ValidationError)
    async def validation_handler(
        req: Request, exc: ValidationError
    ) -> JSONResponse:
        log.warning("validation_error", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(code="VALIDATION_ERROR", message=str(exc)),
        )

    @app.exception_handler(IngestionError)
    async def ingestion_handler(
        req: Request, exc: IngestionError
    ) -> JSONResponse:
        log.warning("ingestion_warning", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(code="INGESTION_WARNING", message=str(exc)),
        )

    @app.exception_handler(DependencyError)
    async def dependency_handler(
        req: Request, exc: DependencyError
    ) -> JSONResponse:
        log.error("dependency_error", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=_error_body(code="DEPENDENCY_ERROR", message=str(exc)),
        )

    @app.exception_handler(WorkspaceNotFoundError)
    async def workspace_not_found_handler(
        req: Request, exc: WorkspaceNotFoundError
    ) -> JSONResponse:
        log.warning("workspace_not_found", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=_error_body(
                code="WORKSPACE_NOT_FOUND",
                message=f"Workspace not found: {exc.args[0] if exc.args else ''}",
            ),
        )

    @app.exception_handler(IndexError)
    async def lock_not_found_handler(
        req: Request, exc: IndexError
    ) -> JSONResponse:
        log.warning("lock_not_found", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=_error_body(code="LOCK_NOT_FOUND", message=str(exc)),
        )

    @app.exception_handler(Exception)
    async def generic_handler(req: Request, exc: Exception) -> JSONResponse:
        tb = traceback.format_exc()
        log.error(
            "unhandled_exception",
            path=str(req.url),
            error=str(exc),
            exc_type=type(exc).__name__,
            traceback=tb,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                code="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred.",
            ),
        )
