#!/usr/bin/env python3
"""Environment-driven settings for the leaderboard service."""

from __future__ import annotations

import os
from pathlib import Path


_ROOT_DIR = Path(__file__).resolve().parent.parent
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _read_env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return default


def port() -> int:
    return _read_env_int("PORT", 3000)


def host() -> str:
    return os.getenv("HOST", "0.0.0.0").strip() or "0.0.0.0"


def leaderboard_file() -> Path:
    raw = os.getenv("LEADERBOARD_FILE")
    if raw and raw.strip():
        return Path(raw.strip())
    return _ROOT_DIR / "leaderboard.json"


def max_entries() -> int:
    return max(1, _read_env_int("LEADERBOARD_MAX_ENTRIES", 100))


def top_n() -> int:
    return max(1, _read_env_int("LEADERBOARD_TOP_N", 10))


def log_level() -> str:
    value = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    if value not in _LOG_LEVELS:
        return "INFO"
    return value


__all__ = [
    "port",
    "host",
    "leaderboard_file",
    "max_entries",
    "top_n",
    "log_level",
]
