# src/planstore/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every variable has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "PLANSTORE"

BACKEND_SQLITE = "sqlite"
BACKEND_MEMORY = "memory"
_BACKENDS = {BACKEND_SQLITE, BACKEND_MEMORY}


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Storage ----
    data_dir: Path
    backend: str
    autosave_seconds: float

    # ---- Policies ----
    seed_default_project: bool
    flush_on_exit: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "planstore") or "planstore"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/planstore"))

        backend = _env(_k("BACKEND"), BACKEND_SQLITE).strip().lower()
        if backend not in _BACKENDS:
            backend = BACKEND_SQLITE

        autosave_seconds = max(0.0, _env_float(_k("AUTOSAVE_SECONDS"), 3.0))

        seed_default_project = _env_bool(_k("SEED_DEFAULT_PROJECT"), True)
        flush_on_exit = _env_bool(_k("FLUSH_ON_EXIT"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            backend=backend,
            autosave_seconds=autosave_seconds,
            seed_default_project=seed_default_project,
            flush_on_exit=flush_on_exit,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings; the local .env is loaded on first use."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS
