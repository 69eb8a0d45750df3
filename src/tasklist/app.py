from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional, Protocol

from .filter_state import FilterState
from .logging_setup import setup_logging
from .models import Task, TaskId
from .schemas import TaskListView
from .settings import Settings, get_settings
from .storage import KeyValueStorage, get_storage
from .task_store import Notifier, TaskStore
from .utils import now_ms
from .view import build_view

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    """Rendering layer port: draws a derived view. Must not call back into the app."""

    def render(self, view: TaskListView) -> None: ...


# PUBLIC_INTERFACE
class TaskListApp:
    """
    Composition root for the task list.

    Owns one TaskStore and one FilterState over the same storage, loads both
    at construction and re-derives the view after every mutation. The
    input layer calls add / delete / toggle_complete / set_filter with raw
    values; the rendering layer receives TaskListView objects.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        settings: Optional[Settings] = None,
        notifier: Optional[Notifier] = None,
        renderer: Optional[Renderer] = None,
        today: Optional[Callable[[], date]] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        settings = settings or Settings()
        self._today = today or date.today
        self._renderer = renderer
        self.store = TaskStore(
            storage,
            key=settings.tasks_storage_key,
            notify=notifier,
            clock=clock,
            salvage=settings.salvage_on_load,
        )
        self.filter_state = FilterState(storage, key=settings.filter_storage_key)

        # Filter first so the render triggered by the task load already uses it.
        self.filter_state.load()
        self.store.subscribe(self._rerender)
        self.filter_state.subscribe(self._rerender)
        self.store.load()
        logger.info("Task list ready tasks=%d filter=%s", len(self.store), self.filter_state.value)

    # PUBLIC_INTERFACE
    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        *,
        notifier: Optional[Notifier] = None,
        renderer: Optional[Renderer] = None,
        configure_logging: bool = False,
    ) -> "TaskListApp":
        """
        Build the app with the storage backend selected by settings.

        With configure_logging=True the root logger is set up from settings first.
        """
        settings = settings or get_settings()
        if configure_logging:
            setup_logging(level=settings.log_level, log_file=settings.log_file)
        return cls(get_storage(settings), settings=settings, notifier=notifier, renderer=renderer)

    @property
    def filter(self) -> str:
        return self.filter_state.value

    @property
    def tasks(self):
        return self.store.tasks

    def attach_renderer(self, renderer: Optional[Renderer]) -> None:
        """Swap the rendering layer and draw the current state on the new one."""
        self._renderer = renderer
        self._rerender()

    def view(self) -> TaskListView:
        """Current filtered, sorted, annotated task list."""
        return build_view(self.store.tasks, self.filter_state.value, self._today())

    def _rerender(self) -> None:
        if self._renderer is not None:
            self._renderer.render(self.view())

    # ---- input layer entry points ----

    def add(self, text: str, category: Optional[str] = None, due_date: Optional[str] = None) -> Optional[Task]:
        return self.store.add(text, category, due_date)

    def delete(self, task_id: TaskId) -> bool:
        return self.store.delete(task_id)

    def toggle_complete(self, task_id: TaskId) -> Optional[Task]:
        return self.store.toggle_complete(task_id)

    def set_filter(self, value: Optional[str]) -> str:
        return self.filter_state.set_filter(value)
