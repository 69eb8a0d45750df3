from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .errors import QuotaExceededError
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class KeyValueStorage(ABC):
    """
    Synchronous string-keyed, string-valued store with an optional capacity limit.

    Implementations raise StorageReadError / StorageWriteError (QuotaExceededError
    when the capacity would be exceeded) and leave stored values untouched on failure.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key if present."""

    @abstractmethod
    def keys(self) -> List[str]:
        """Return all stored keys."""


def entry_size(key: str, value: str) -> int:
    """Size an entry counts against the quota (characters of key and value)."""
    return len(key) + len(value)


def check_quota(key: str, value: str, current_usage: int, previous: Optional[str], quota_bytes: Optional[int]) -> None:
    """
    Raise QuotaExceededError when replacing `previous` with `value` would exceed the quota.
    """
    if not quota_bytes:
        return
    freed = entry_size(key, previous) if previous is not None else 0
    required = current_usage - freed + entry_size(key, value)
    if required > quota_bytes:
        raise QuotaExceededError(key, quota_bytes, required)


class InMemoryStorage(KeyValueStorage):
    """
    Process-local storage suitable for tests and ephemeral sessions.
    """

    def __init__(self, quota_bytes: Optional[int] = None, initial: Optional[Dict[str, str]] = None) -> None:
        self._quota_bytes = quota_bytes if quota_bytes and quota_bytes > 0 else None
        self._items: Dict[str, str] = dict(initial or {})

    def usage(self) -> int:
        return sum(entry_size(k, v) for k, v in self._items.items())

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        check_quota(key, value, self.usage(), self._items.get(key), self._quota_bytes)
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._items)


# PUBLIC_INTERFACE
def get_storage(settings: Optional[Settings] = None) -> KeyValueStorage:
    """
    Factory returning the configured storage backend.
    - memory: InMemoryStorage
    - sqlite: SQLiteStorage at settings.sqlite_db_path
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteStorage

        logger.debug("Using SQLite storage at %s", settings.sqlite_db_path)
        return SQLiteStorage(settings.sqlite_db_path, quota_bytes=settings.storage_quota_bytes)
    logger.debug("Using in-memory storage")
    return InMemoryStorage(quota_bytes=settings.storage_quota_bytes)
