from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

from .categories import lookup
from .models import ALL_FILTER, DateStatus, Task
from .schemas import TaskListView, TaskView
from .utils import format_month_day, parse_due_date

EMPTY_MESSAGE_ALL = "No tasks yet. Add one above!"
EMPTY_MESSAGE_CATEGORY = "No tasks in {label} category."


# PUBLIC_INTERFACE
def date_status(due_date: Optional[str], completed: bool, today: Optional[date] = None) -> DateStatus:
    """
    Classify a due date against today's calendar date.

    Completed tasks and tasks without a due date are always NONE.
    """
    if completed or not due_date:
        return DateStatus.NONE
    today = today or date.today()
    due = parse_due_date(due_date)
    if due < today:
        return DateStatus.OVERDUE
    if due == today:
        return DateStatus.TODAY
    return DateStatus.FUTURE


# PUBLIC_INTERFACE
def filtered_tasks(tasks: Iterable[Task], current_filter: str) -> List[Task]:
    """All tasks for 'all', otherwise those whose category equals the filter, order kept."""
    if current_filter == ALL_FILTER:
        return list(tasks)
    return [t for t in tasks if t.category == current_filter]


def _display_key(task: Task) -> Tuple[bool, bool, date]:
    if task.due_date:
        return (task.completed, False, parse_due_date(task.due_date))
    return (task.completed, True, date.min)


# PUBLIC_INTERFACE
def sort_for_display(tasks: Iterable[Task]) -> List[Task]:
    """
    Display order: incomplete before completed, dated before undated,
    earlier dates first. Ties keep their relative order.
    """
    return sorted(tasks, key=_display_key)


# PUBLIC_INTERFACE
def format_for_display(due_date: Optional[str], today: Optional[date] = None) -> str:
    """'Today', an abbreviated month and day such as 'Mar 5', or '' without a date."""
    if not due_date:
        return ""
    today = today or date.today()
    due = parse_due_date(due_date)
    if due == today:
        return "Today"
    return format_month_day(due)


# PUBLIC_INTERFACE
def empty_message(current_filter: str) -> str:
    if current_filter == ALL_FILTER:
        return EMPTY_MESSAGE_ALL
    return EMPTY_MESSAGE_CATEGORY.format(label=lookup(current_filter).label)


def to_task_view(task: Task, today: date) -> TaskView:
    return TaskView(
        id=task.id,
        text=task.text,
        completed=task.completed,
        category=lookup(task.category),
        due_date=task.due_date,
        date_status=date_status(task.due_date, task.completed, today),
        due_label=format_for_display(task.due_date, today),
    )


# PUBLIC_INTERFACE
def build_view(tasks: Sequence[Task], current_filter: str, today: Optional[date] = None) -> TaskListView:
    """
    Derive everything the rendering layer needs from the collection and filter.
    """
    today = today or date.today()
    visible = sort_for_display(filtered_tasks(tasks, current_filter))
    items = tuple(to_task_view(t, today) for t in visible)
    return TaskListView(
        items=items,
        filter=current_filter,
        is_empty=not items,
        empty_message=empty_message(current_filter) if not items else None,
    )
