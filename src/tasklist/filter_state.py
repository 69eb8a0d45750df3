from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .categories import is_known_category
from .errors import StorageError
from .models import ALL_FILTER
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)


def _is_valid_filter(value: Optional[str]) -> bool:
    return value == ALL_FILTER or is_known_category(value)


# PUBLIC_INTERFACE
class FilterState:
    """
    The selected category filter, persisted under its own key.

    Storage failures here are only logged: losing the selection costs
    convenience, not data.
    """

    def __init__(self, storage: KeyValueStorage, *, key: str = "currentFilter") -> None:
        self._storage = storage
        self._key = key
        self._value = ALL_FILTER
        self._listeners: List[Callable[[], None]] = []

    @property
    def value(self) -> str:
        return self._value

    def get_filter(self) -> str:
        return self._value

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def load(self) -> str:
        """Restore the stored filter; anything missing or unrecognised means 'all'."""
        try:
            stored = self._storage.get_item(self._key)
        except StorageError as exc:
            logger.warning("Failed to read filter state: %s", exc)
            stored = None

        if stored is None:
            self._value = ALL_FILTER
        elif _is_valid_filter(stored):
            self._value = stored
        else:
            logger.warning("Ignoring malformed stored filter %r", stored)
            self._value = ALL_FILTER
        return self._value

    def set_filter(self, value: Optional[str]) -> str:
        """Select a category id or 'all', persist it and announce the change."""
        if not _is_valid_filter(value):
            logger.warning("Unknown filter %r, showing all tasks", value)
            value = ALL_FILTER

        self._value = value
        try:
            self._storage.set_item(self._key, value)
        except StorageError as exc:
            logger.warning("Failed to save filter state: %s", exc)

        for listener in list(self._listeners):
            listener()
        return self._value
