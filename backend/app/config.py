"""Environment-backed configuration shared across the service.

Values are read from the process environment (after loading `.env`) with
safe defaults. Components that need configuration build their own settings
objects from these helpers at construction time.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def env_str(key: str, default: str = "") -> str:
    return os.getenv(key, default).strip()


def env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def env_bool(key: str, default: bool = False) -> bool:
    return os.getenv(key, "true" if default else "false").strip().lower() == "true"


def env_list(key: str) -> list[str]:
    """Read a comma-separated list, dropping blanks."""
    return [item.strip() for item in os.getenv(key, "").split(",") if item.strip()]


DATABASE_URL: str = env_str("DATABASE_URL", "sqlite:///./idea_validator.db")
LOG_LEVEL: str = env_str("LOG_LEVEL", "INFO").upper()
DEBUG: bool = env_bool("DEBUG", False)
