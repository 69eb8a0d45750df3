"""
Client-side task list core.

Holds the task collection and selected filter, persists both to a
key-value store, and derives the display-ready view for a rendering layer.
"""

from .app import Renderer, TaskListApp
from .categories import CATEGORIES, UNCATEGORIZED, UNCATEGORIZED_ID, Category, lookup
from .errors import (
    MalformedDataError,
    QuotaExceededError,
    StorageError,
    StorageReadError,
    StorageWriteError,
    TaskListError,
)
from .filter_state import FilterState
from .models import ALL_FILTER, DateStatus, Task
from .schemas import TaskCreate, TaskListView, TaskView
from .settings import Settings, get_settings
from .storage import InMemoryStorage, KeyValueStorage, get_storage
from .task_store import SAVE_FAILED_MESSAGE, TaskStore
from .view import build_view, date_status, filtered_tasks, format_for_display, sort_for_display

__all__ = [
    "ALL_FILTER",
    "CATEGORIES",
    "Category",
    "DateStatus",
    "FilterState",
    "InMemoryStorage",
    "KeyValueStorage",
    "MalformedDataError",
    "QuotaExceededError",
    "Renderer",
    "SAVE_FAILED_MESSAGE",
    "Settings",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "Task",
    "TaskCreate",
    "TaskListApp",
    "TaskListError",
    "TaskListView",
    "TaskStore",
    "TaskView",
    "UNCATEGORIZED",
    "UNCATEGORIZED_ID",
    "build_view",
    "date_status",
    "filtered_tasks",
    "format_for_display",
    "get_settings",
    "get_storage",
    "lookup",
    "sort_for_display",
]
