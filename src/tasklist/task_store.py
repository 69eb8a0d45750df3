from __future__ import annotations

import logging
import math
from typing import Callable, List, Optional, Tuple

from pydantic import ValidationError

from .errors import MalformedDataError, StorageError
from .migrations import parse_collection, serialize_collection
from .models import Task, TaskId
from .schemas import TaskCreate
from .storage import KeyValueStorage
from .utils import now_ms as _wall_clock_ms

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Unable to save tasks. Your storage may be full."

Notifier = Callable[[str], None]
Listener = Callable[[], None]


def _log_notifier(message: str) -> None:
    logger.error("User notification: %s", message)


# PUBLIC_INTERFACE
class TaskStore:
    """
    Owns the task collection and keeps it in sync with storage.

    Every successful mutation is persisted immediately and then announced to
    subscribed listeners. Storage faults are handled here: read and parse
    failures fall back to an empty collection, write failures are reported to
    the user through `notify`.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = "tasks",
        notify: Optional[Notifier] = None,
        clock: Callable[[], int] = _wall_clock_ms,
        salvage: bool = False,
    ) -> None:
        self._storage = storage
        self._key = key
        self._notify = notify or _log_notifier
        self._clock = clock
        self._salvage = salvage
        self._tasks: List[Task] = []
        self._last_id = 0
        self._listeners: List[Listener] = []

    # ---- read access ----

    @property
    def tasks(self) -> Tuple[Task, ...]:
        """Snapshot of the collection in insertion order."""
        return tuple(self._tasks)

    def get(self, task_id: TaskId) -> Optional[Task]:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return any(t.id == task_id for t in self._tasks)

    # ---- change notification ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback fired after each mutation; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener()

    # ---- persistence ----

    def load(self) -> None:
        """
        Replace the in-memory collection with the stored one.

        A missing value is an empty collection. A malformed value is logged and
        treated as empty (or partially recovered when salvage is enabled).
        Records that needed migration are written back immediately.
        """
        try:
            serialized = self._storage.get_item(self._key)
        except StorageError as exc:
            logger.error("Failed to read tasks from storage: %s", exc)
            serialized = None

        tasks: List[Task] = []
        if serialized is not None:
            try:
                result = parse_collection(serialized, self._clock(), salvage=self._salvage)
            except MalformedDataError as exc:
                logger.error("Failed to load tasks from storage, starting empty: %s", exc)
            else:
                tasks = result.tasks
                if result.needs_write_back:
                    self._tasks = tasks
                    logger.info(
                        "Migrated stored tasks to current schema (kept=%d dropped=%d)",
                        len(tasks),
                        result.dropped,
                    )
                    self.persist()

        self._tasks = tasks
        self._last_id = max((math.floor(t.id) for t in tasks), default=0)
        logger.debug("Loaded %d tasks", len(tasks))
        self._changed()

    def persist(self) -> bool:
        """
        Write the whole collection to storage.

        Returns False after notifying the user when the write fails; memory and
        storage have diverged at that point.
        """
        try:
            self._storage.set_item(self._key, serialize_collection(self._tasks))
        except StorageError as exc:
            logger.error("Failed to save tasks to storage: %s", exc)
            self._notify(SAVE_FAILED_MESSAGE)
            return False
        return True

    # ---- mutations ----

    def _allocate_id(self, now: int) -> int:
        new_id = max(now, self._last_id + 1)
        self._last_id = new_id
        return new_id

    def add(
        self,
        text: str,
        category: Optional[str] = None,
        due_date: Optional[str] = None,
    ) -> Optional[Task]:
        """
        Create a task from raw input values.

        Text that is empty after trimming is ignored: nothing is created or
        written. Returns the new task, or None when the request was ignored.
        """
        try:
            request = TaskCreate(text=text, category=category, due_date=due_date)
        except ValidationError as exc:
            if any(err["loc"] == ("text",) for err in exc.errors()):
                logger.debug("Ignoring add request with empty text")
            else:
                logger.warning("Rejected add request: %s", exc)
            return None

        if category and not isinstance(category, str):
            logger.warning("Ignoring invalid category %r for new task", category)

        if due_date and request.due_date is None:
            logger.warning("Ignoring invalid due date %r for new task", due_date)

        now = self._clock()
        task = Task(
            id=self._allocate_id(now),
            text=request.text,
            completed=False,
            category=request.category,
            due_date=request.due_date,
            created_at=now,
        )
        self._tasks.append(task)
        logger.debug("Task added id=%s category=%s due=%s", task.id, task.category, task.due_date)
        self.persist()
        self._changed()
        return task

    def delete(self, task_id: TaskId) -> bool:
        """Remove the task with this id. Unknown ids are ignored; returns True if removed."""
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                del self._tasks[index]
                break
        else:
            logger.debug("Delete ignored, no task with id=%s", task_id)
            return False

        logger.debug("Task deleted id=%s", task_id)
        self.persist()
        self._changed()
        return True

    def toggle_complete(self, task_id: TaskId) -> Optional[Task]:
        """Flip completion of the task with this id. Unknown ids are ignored."""
        task = self.get(task_id)
        if task is None:
            logger.debug("Toggle ignored, no task with id=%s", task_id)
            return None

        task.completed = not task.completed
        logger.debug("Task toggled id=%s completed=%s", task_id, task.completed)
        self.persist()
        self._changed()
        return task
