"""
Runtime configuration for the arena.

Values come from the process environment (optionally seeded from a ``.env``
file through python-dotenv) and are validated by a pydantic model.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from infra.paths import LOG_DIR, MATCH_STORAGE_DIR


class Settings(BaseModel):
    """
    Arena configuration.

    Attributes:
        board_cols: Board width used for new matches (COLS)
        board_rows: Board height used for new matches (ROWS)
        storage_dir: Directory holding one JSON snapshot per match
        snapshot_timeout: Seconds a single snapshot write may take
        snapshot_retries: Write attempts before a snapshot is given up
        log_level: Root logging level
        log_json: Emit JSON log lines
        log_file: Log file path, or None for stdout only
        seed: Base RNG seed for spawn positions (None = nondeterministic)
    """
    board_cols: int = Field(default=12, gt=0)
    board_rows: int = Field(default=12, gt=0)
    storage_dir: Path = MATCH_STORAGE_DIR
    snapshot_timeout: float = Field(default=5.0, gt=0)
    snapshot_retries: int = Field(default=3, ge=1)
    log_level: str = "INFO"
    log_json: bool = False
    log_file: Optional[Path] = LOG_DIR / "arena.log"
    seed: Optional[int] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``ARENA_*`` environment variables."""
        load_dotenv()

        raw = {
            "board_cols": os.getenv("ARENA_COLS"),
            "board_rows": os.getenv("ARENA_ROWS"),
            "storage_dir": os.getenv("ARENA_STORAGE_DIR"),
            "snapshot_timeout": os.getenv("ARENA_SNAPSHOT_TIMEOUT"),
            "snapshot_retries": os.getenv("ARENA_SNAPSHOT_RETRIES"),
            "log_level": os.getenv("ARENA_LOG_LEVEL"),
            "log_json": os.getenv("ARENA_LOG_JSON"),
            "seed": os.getenv("ARENA_SEED"),
        }
        log_file = os.getenv("ARENA_LOG_FILE")
        if log_file is not None:
            raw["log_file"] = log_file or None

        # Unset variables fall back to the model defaults.
        return cls(**{key: value for key, value in raw.items() if value is not None})


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings.from_env()
