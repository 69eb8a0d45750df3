from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'sqlite'
    - SQLITE_DB_PATH: path to the sqlite key-value file. Default './data/tasklist.db'
    - STORAGE_QUOTA_BYTES: capacity limit of the store; unset or <= 0 means unlimited
    - TASKS_STORAGE_KEY: key holding the task collection. Default 'tasks'
    - FILTER_STORAGE_KEY: key holding the selected filter. Default 'currentFilter'
    - LOAD_RECOVERY: 'discard' (default) or 'salvage' for corrupt task collections
    - LOG_LEVEL: console log level name. Default 'INFO'
    - LOG_FILE: optional path of a full debug log file
    """

    persistence_backend: str = "memory"
    sqlite_db_path: str = "./data/tasklist.db"
    storage_quota_bytes: Optional[int] = None
    tasks_storage_key: str = "tasks"
    filter_storage_key: str = "currentFilter"
    load_recovery: str = "discard"
    log_level: int = logging.INFO
    log_file: Optional[str] = None

    @property
    def salvage_on_load(self) -> bool:
        return self.load_recovery == "salvage"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_positive_int(value: str) -> Optional[int]:
    try:
        n = int(value.strip())
    except ValueError:
        return None
    return n if n > 0 else None


def _parse_log_level(value: str, default: int = logging.INFO) -> int:
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else default


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite"}:
        # Fallback to memory if unsupported
        backend = "memory"

    recovery = _get_env("LOAD_RECOVERY", "discard").strip().lower()
    if recovery not in {"discard", "salvage"}:
        recovery = "discard"

    log_file = os.getenv("LOG_FILE") or None

    return Settings(
        persistence_backend=backend,
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/tasklist.db").strip(),
        storage_quota_bytes=_parse_positive_int(_get_env("STORAGE_QUOTA_BYTES", "0")),
        tasks_storage_key=_get_env("TASKS_STORAGE_KEY", "tasks").strip(),
        filter_storage_key=_get_env("FILTER_STORAGE_KEY", "currentFilter").strip(),
        load_recovery=recovery,
        log_level=_parse_log_level(_get_env("LOG_LEVEL", "INFO")),
        log_file=log_file,
    )
