# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Configuration Document Loader
Reads config.json once at startup: the demo gallery plus default
matching options.

Never fails startup. A missing file, unreadable JSON or a schema
mismatch logs a warning and degrades to an empty gallery with the
built-in defaults from Settings. Missing fields inside `defaults` fall
back one by one.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from app.config import get_settings
from app.models.app_config import AppConfig, Defaults
from app.utils.logger import get_logger

log = get_logger(__name__)


def builtin_defaults() -> Defaults:
    settings = get_settings()
    return Defaults(ratio=settings.default_ratio, threshold=settings.default_threshold)


def parse_app_config(raw: Any) -> AppConfig:
    """
    Validate an already-decoded config document.
    Falls back to an empty config when the document is unusable.
    """
    fallback = builtin_defaults()

    if not isinstance(raw, dict):
        log.warning("app_config_invalid", reason="document is not an object")
        return AppConfig(defaults=fallback)

    defaults = raw.get("defaults")
    merged_defaults = fallback.model_dump()
    if isinstance(defaults, dict):
        merged_defaults.update({k: v for k, v in defaults.items() if k in merged_defaults})

    try:
        config = AppConfig.model_validate(
            {"demos": raw.get("demos") or [], "defaults": merged_defaults}
        )
    except PydanticValidationError as exc:
        log.warning("app_config_invalid", reason="schema", errors=exc.error_count())
        return AppConfig(defaults=fallback)

    return config


def load_app_config(path: Optional[Path] = None) -> AppConfig:
    """
    Load and validate the configuration document at path
    (default: Settings.app_config_path).
    """
    path = Path(path) if path is not None else get_settings().app_config_path

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        log.warning("app_config_missing", path=str(path))
        return AppConfig(defaults=builtin_defaults())
    except (OSError, json.JSONDecodeError) as exc:
        log.warning("app_config_unreadable", path=str(path), error=str(exc))
        return AppConfig(defaults=builtin_defaults())

    config = parse_app_config(raw)
    log.info(
        "app_config_loaded",
        path=str(path),
        demos=len(config.demos),
        ratio=config.defaults.ratio,
        threshold=config.defaults.threshold,
    )
    return config
