"""Ustawienia aplikacji czytane ze zmiennych środowiskowych (prefiks TODOS_).

Opcje CLI mają pierwszeństwo przed wartościami z `Settings`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TODOS"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env_str(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return raw.strip()


def _env_float(name: str, default: float) -> float:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str) -> Path | None:
    raw = _env_str(name)
    return None if raw is None else Path(raw).expanduser()


def _env_level(name: str, default: int) -> int:
    raw = _env_str(name)
    if raw is None:
        return default
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else default


@dataclass(frozen=True)
class Settings:
    api_url: str | None = None
    db_path: Path | None = None
    http_timeout: float = 10.0
    log_dir: Path | None = None
    log_level: int = logging.WARNING


def load_settings() -> Settings:
    return Settings(
        api_url=_env_str(_k("API_URL")),
        db_path=_env_path(_k("DB")),
        http_timeout=_env_float(_k("HTTP_TIMEOUT"), 10.0),
        log_dir=_env_path(_k("LOG_DIR")),
        log_level=_env_level(_k("LOG_LEVEL"), logging.WARNING),
    )
