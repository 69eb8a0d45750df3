from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, List, Sequence, Set, Tuple

from pydantic import ValidationError

from .categories import UNCATEGORIZED_ID
from .errors import MalformedDataError
from .models import Task
from .utils import normalize_due_date

logger = logging.getLogger(__name__)


@dataclass
class MigrationResult:
    """
    Outcome of migrating a stored collection.

    - tasks: canonical tasks in stored order
    - needs_write_back: True when the stored form differs from the canonical one
    - dropped: number of records discarded (salvage mode or duplicate ids)
    """

    tasks: List[Task] = field(default_factory=list)
    needs_write_back: bool = False
    dropped: int = 0


# PUBLIC_INTERFACE
def migrate_record(raw: Mapping[str, Any], now_ms: int) -> Tuple[Task, bool]:
    """
    Upgrade one stored record to the canonical Task shape.

    Missing or empty 'category' becomes 'uncategorized', missing, empty or
    invalid 'dueDate' becomes None, missing 'createdAt' becomes now_ms.
    Migrating an already canonical record returns it unchanged with changed=False.

    Returns:
        (task, changed)

    Raises:
        MalformedDataError: the record cannot be made canonical (no id, no text, ...).
    """
    if not isinstance(raw, Mapping):
        raise MalformedDataError(f"Task record must be an object, got {type(raw).__name__}")

    record = dict(raw)
    changed = False

    if not record.get("category"):
        record["category"] = UNCATEGORIZED_ID
        changed = True

    due = record.get("dueDate")
    normalized_due = normalize_due_date(due)
    if "dueDate" not in record or due != normalized_due:
        record["dueDate"] = normalized_due
        changed = True

    if record.get("createdAt") is None:
        record["createdAt"] = now_ms
        changed = True

    text = record.get("text")
    if isinstance(text, str) and text != text.strip():
        changed = True

    try:
        task = Task.model_validate(record)
    except ValidationError as exc:
        raise MalformedDataError(f"Task record {record.get('id')!r} is invalid: {exc}") from exc
    return task, changed


# PUBLIC_INTERFACE
def migrate_records(raw_records: Sequence[Any], now_ms: int, *, salvage: bool = False) -> MigrationResult:
    """
    Migrate a stored collection.

    With salvage=False the first unusable record aborts the whole migration
    (MalformedDataError). With salvage=True unusable records are dropped and
    logged. Records repeating an earlier id are always dropped.
    """
    if not isinstance(raw_records, list):
        raise MalformedDataError(
            f"Task collection must be an array, got {type(raw_records).__name__}"
        )

    result = MigrationResult()
    seen: Set[Any] = set()
    for index, raw in enumerate(raw_records):
        try:
            task, changed = migrate_record(raw, now_ms)
        except MalformedDataError as exc:
            if not salvage:
                raise
            logger.warning("Dropping unreadable task record at index %d: %s", index, exc)
            result.dropped += 1
            result.needs_write_back = True
            continue

        if task.id in seen:
            logger.warning("Dropping task record at index %d with duplicate id %r", index, task.id)
            result.dropped += 1
            result.needs_write_back = True
            continue

        seen.add(task.id)
        result.tasks.append(task)
        result.needs_write_back = result.needs_write_back or changed
    return result


# PUBLIC_INTERFACE
def parse_collection(serialized: str, now_ms: int, *, salvage: bool = False) -> MigrationResult:
    """
    Decode the stored JSON array and migrate it.

    Raises:
        MalformedDataError: invalid JSON, or any failure migrate_records raises.
    """
    try:
        raw = json.loads(serialized)
    except (TypeError, ValueError, RecursionError) as exc:
        raise MalformedDataError(f"Stored task collection is not valid JSON: {exc}") from exc
    return migrate_records(raw, now_ms, salvage=salvage)


# PUBLIC_INTERFACE
def serialize_collection(tasks: Sequence[Task]) -> str:
    """Encode tasks as the stored JSON array."""
    return json.dumps([t.to_record() for t in tasks], ensure_ascii=False)
