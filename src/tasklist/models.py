from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, confloat, field_validator
from pydantic.alias_generators import to_camel

from .categories import UNCATEGORIZED_ID
from .utils import parse_due_date

# Ids are integers for tasks created here; older data may carry fractional ids.
# NaN and infinities are rejected: they cannot be compared or allocated past.
TaskId = Union[StrictInt, confloat(strict=True, allow_inf_nan=False)]

# Sentinel filter value meaning "every category".
ALL_FILTER = "all"


# PUBLIC_INTERFACE
class DateStatus(str, Enum):
    """Urgency classification of a task's due date relative to today."""

    NONE = "none"
    OVERDUE = "overdue"
    TODAY = "today"
    FUTURE = "future"


# PUBLIC_INTERFACE
class Task(BaseModel):
    """
    Canonical task record as held in memory and persisted to storage.

    Fields (stored under camelCase keys):
    - id: Unique, stable identifier
    - text: Trimmed, non-empty display text
    - completed: Completion flag
    - category: Category id; unknown ids are kept and resolved at display time
    - due_date: Optional 'YYYY-MM-DD' calendar date, None when absent
    - created_at: Creation time in epoch milliseconds
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        # Fields this version does not know about are carried through saves.
        extra="allow",
    )

    id: TaskId = Field(..., description="Unique task identifier")
    text: str = Field(..., min_length=1, description="Display text")
    completed: StrictBool = Field(default=False, description="Completion status flag")
    category: str = Field(default=UNCATEGORIZED_ID, description="Category id")
    due_date: Optional[str] = Field(default=None, description="Due date as YYYY-MM-DD")
    created_at: int = Field(..., description="Creation timestamp (epoch ms)")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Strip whitespace; empty text is never allowed on a stored task."""
        s = v.strip()
        if not s:
            raise ValueError("text must not be empty")
        return s

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, v: Optional[str]) -> str:
        return v or UNCATEGORIZED_ID

    @field_validator("due_date", mode="before")
    @classmethod
    def validate_due_date(cls, v: Optional[str]) -> Optional[str]:
        """
        Empty values collapse to None so absence has a single representation.
        Anything else must be a real calendar date.
        """
        if v is None or v == "":
            return None
        return parse_due_date(v).isoformat()

    def to_record(self) -> dict:
        """Serializable dict using the stored (camelCase) field names."""
        return self.model_dump(by_alias=True)
