# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Structured Logging
JSON-formatted logs via structlog. Every log entry carries the app name.
Inside a workspace run the bound workspace_id and run_seq are folded
into a compact run tag ("3f2a9c1e#4") so interleaved runs of the same
workspace can be told apart at a glance.

Matching code logs numpy scalars and shapes straight from the score
matrix; they are converted to plain Python values before rendering.
"""

import logging
import sys
from typing import Any

import numpy as np
import structlog
from structlog.types import EventDict, Processor

from app.config import get_settings

APP_NAME = "listmatch"

# Leading characters of the workspace uuid kept in the run tag
_RUN_TAG_ID_CHARS = 8


def _add_app_info(
    logger: Any, method: str, event_dict: EventDict
) -> EventDict:
    event_dict["app"] = APP_NAME
    return event_dict


def _add_run_tag(
    logger: Any, method: str, event_dict: EventDict
) -> EventDict:
    """Add run="<workspace>#<seq>" when a workspace run is bound."""
    workspace_id = event_dict.get("workspace_id")
    run_seq = event_dict.get("run_seq")
    if workspace_id is not None and run_seq is not None:
        event_dict["run"] = f"{str(workspace_id)[:_RUN_TAG_ID_CHARS]}#{run_seq}"
    return event_dict


def _to_builtin(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, tuple):
        return [_to_builtin(v) for v in value]
    return value


def _coerce_numpy(
    logger: Any, method: str, event_dict: EventDict
) -> EventDict:
    """Replace numpy scalars/arrays (and tuples of them) with builtins."""
    for key, value in event_dict.items():
        event_dict[key] = _to_builtin(value)
    return event_dict


def _drop_color_message_key(
    logger: Any, method: str, event_dict: EventDict
) -> EventDict:
    """Remove uvicorn's color_message to keep logs clean."""
    event_dict.pop("color_message", None)
    return event_dict


def build_processors(log_level: str) -> list[Processor]:
    """Processor chain: console rendering at DEBUG, JSON otherwise."""
    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _add_app_info,
        _add_run_tag,
        _coerce_numpy,
        _drop_color_message_key,
    ]

    if log_level == "DEBUG":
        return shared + [structlog.dev.ConsoleRenderer(colors=True)]
    return shared + [
        structlog.processors.dict_tracebacks,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging() -> None:
    """Configure structlog and the stdlib root logger. Called once at startup."""
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=build_processors(settings.log_level),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stdout),
        cache_logger_on_first_use=True,
    )

    # uvicorn/fastapi passthrough
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


def get_logger(name: str = APP_NAME) -> structlog.BoundLogger:
    """
    Return a structlog bound logger.

    Usage:
        log = get_logger(__name__)
        log.info("match_complete", total_matches=12, manual=2)

    core.runner binds workspace_id and run_seq for the duration of a run,
    which _add_run_tag turns into the run field.
    """
    return structlog.get_logger(name)
