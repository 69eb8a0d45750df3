from __future__ import annotations

import re
import time
from datetime import date
from typing import Optional

_DUE_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

_MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


# PUBLIC_INTERFACE
def now_ms() -> int:
    """Current wall clock time in epoch milliseconds."""
    return int(time.time() * 1000)


# PUBLIC_INTERFACE
def parse_due_date(value: str) -> date:
    """
    Parse a 'YYYY-MM-DD' string into a calendar date.

    The year/month/day components are read directly from the string so that
    no timezone conversion can shift the day.

    Raises:
        ValueError: if the string is not in that form or is not a real date.
    """
    m = _DUE_DATE_RE.match(value.strip()) if isinstance(value, str) else None
    if m is None:
        raise ValueError(f"Invalid due date {value!r}; expected YYYY-MM-DD")
    year, month, day = (int(part) for part in m.groups())
    return date(year, month, day)


# PUBLIC_INTERFACE
def normalize_due_date(value: object) -> Optional[str]:
    """
    Return the canonical due date string, or None when the value means "no date".

    Empty strings, None and unparseable values all collapse to None.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        return parse_due_date(value).isoformat()
    except ValueError:
        return None


# PUBLIC_INTERFACE
def format_month_day(d: date) -> str:
    """Abbreviated en-US month and day, e.g. 'Mar 5'."""
    return f"{_MONTH_ABBREVIATIONS[d.month - 1]} {d.day}"
