from __future__ import annotations

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .categories import UNCATEGORIZED_ID, Category
from .models import ALL_FILTER, DateStatus, TaskId
from .utils import normalize_due_date


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Validated add request built from raw input values.

    Text is trimmed and must not be empty. A missing category becomes
    'uncategorized'; an empty or unparseable due date becomes None.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "text": "Buy milk",
                "category": "shopping",
                "due_date": "2024-03-15",
            }
        }
    )

    text: str = Field(..., description="Task text", min_length=1)
    category: str = Field(default=UNCATEGORIZED_ID, description="Category id")
    due_date: Optional[str] = Field(default=None, description="Due date as YYYY-MM-DD")

    @field_validator("text", mode="before")
    @classmethod
    def strip_text(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, v: object) -> str:
        return v if isinstance(v, str) and v else UNCATEGORIZED_ID

    @field_validator("due_date", mode="before")
    @classmethod
    def normalize_due(cls, v: object) -> Optional[str]:
        return normalize_due_date(v)


# PUBLIC_INTERFACE
class TaskView(BaseModel):
    """
    One display-ready task for the rendering layer.
    """

    model_config = ConfigDict(frozen=True)

    id: TaskId
    text: str
    completed: bool
    category: Category = Field(..., description="Resolved category (fallback applied)")
    due_date: Optional[str] = None
    date_status: DateStatus = DateStatus.NONE
    due_label: str = Field(default="", description="Formatted due date, '' when absent")


# PUBLIC_INTERFACE
class TaskListView(BaseModel):
    """
    Complete derived view state: what to draw after a mutation.
    """

    model_config = ConfigDict(frozen=True)

    items: Tuple[TaskView, ...] = ()
    filter: str = ALL_FILTER
    is_empty: bool = True
    empty_message: Optional[str] = Field(
        default=None, description="Message to show when there are no items"
    )
