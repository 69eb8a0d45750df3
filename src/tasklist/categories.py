from __future__ import annotations

from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

UNCATEGORIZED_ID = "uncategorized"


# PUBLIC_INTERFACE
class Category(BaseModel):
    """
    A fixed classification tag drawn from the static registry.

    Fields:
    - id: Unique identifier stored on tasks
    - label: Display label
    - color_tag: Color name the rendering layer maps to its own palette
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Category identifier stored on tasks")
    label: str = Field(..., description="Human readable label")
    color_tag: str = Field(..., description="Color tag used by the rendering layer")


CATEGORIES: Tuple[Category, ...] = (
    Category(id=UNCATEGORIZED_ID, label="Uncategorized", color_tag="gray"),
    Category(id="work", label="Work", color_tag="blue"),
    Category(id="personal", label="Personal", color_tag="green"),
    Category(id="shopping", label="Shopping", color_tag="purple"),
    Category(id="health", label="Health", color_tag="red"),
)

_BY_ID: Dict[str, Category] = {c.id: c for c in CATEGORIES}

UNCATEGORIZED: Category = _BY_ID[UNCATEGORIZED_ID]


# PUBLIC_INTERFACE
def lookup(category_id: Optional[str]) -> Category:
    """Return the category with this id, or the uncategorized entry for anything unknown."""
    if not category_id:
        return UNCATEGORIZED
    return _BY_ID.get(category_id, UNCATEGORIZED)


# PUBLIC_INTERFACE
def is_known_category(category_id: Optional[str]) -> bool:
    """True when the id names a registry entry."""
    return bool(category_id) and category_id in _BY_ID


# PUBLIC_INTERFACE
def category_ids() -> Tuple[str, ...]:
    """Registry ids in display order."""
    return tuple(c.id for c in CATEGORIES)
