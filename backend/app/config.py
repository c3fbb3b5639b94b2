# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
ListMatch — Application Configuration
All settings are loaded from environment variables with sensible
defaults. Override via backend/.env or environment.

The demo gallery and per-deployment matching defaults live in a separate
JSON document (see app.core.app_config); the values here are the
built-in fallbacks used when that document is missing or incomplete.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ─── Matching Defaults ───────────────────────────────────────────────────
    default_ratio: str = "token_sort_ratio"
    default_threshold: float = 60.0
    # Upper bound per list; the score matrix is |A| × |B| integers
    max_list_items: int = 2000

    # ─── Configuration Document ──────────────────────────────────────────────
    app_config_path: Path = Path("./config.json")

    # ─── Ingestion ───────────────────────────────────────────────────────────
    upload_max_mb: int = 5

    # ─── Logging ─────────────────────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ─── Server ──────────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 8000

    # ─── Derived helpers ─────────────────────────────────────────────────────
    @property
    def upload_max_bytes(self) -> int:
        return self.upload_max_mb * 1024 * 1024


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached singleton Settings instance."""
    return Settings()
