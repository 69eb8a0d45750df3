from __future__ import annotations

import pytest

from tasklist.task_store import TaskStore

from .fakes import FIXED_NOW_MS, FlakyStorage, RecordingNotifier


@pytest.fixture()
def storage() -> FlakyStorage:
    return FlakyStorage()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def store(storage: FlakyStorage, notifier: RecordingNotifier) -> TaskStore:
    """Store whose clock is frozen, so every add happens in the same millisecond."""
    s = TaskStore(storage, notify=notifier, clock=lambda: FIXED_NOW_MS)
    s.load()
    return s
