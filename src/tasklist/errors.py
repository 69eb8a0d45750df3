from __future__ import annotations

from typing import Optional


# PUBLIC_INTERFACE
class TaskListError(Exception):
    """Base class for all task list errors."""


# PUBLIC_INTERFACE
class StorageError(TaskListError):
    """Raised by a key-value storage backend when an operation fails."""

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key


# PUBLIC_INTERFACE
class StorageReadError(StorageError):
    """The backend could not read a value."""


# PUBLIC_INTERFACE
class StorageWriteError(StorageError):
    """The backend could not write a value; the previous value is unchanged."""


# PUBLIC_INTERFACE
class QuotaExceededError(StorageWriteError):
    """
    The write would push the store past its capacity limit.

    Attributes:
    - quota_bytes: configured capacity
    - required_bytes: size the store would have reached after the write
    """

    def __init__(self, key: str, quota_bytes: int, required_bytes: int) -> None:
        super().__init__(
            f"Storage quota exceeded writing {key!r}: {required_bytes} > {quota_bytes} bytes",
            key=key,
        )
        self.quota_bytes = quota_bytes
        self.required_bytes = required_bytes


# PUBLIC_INTERFACE
class MalformedDataError(TaskListError):
    """Persisted data could not be parsed into the expected structure."""
