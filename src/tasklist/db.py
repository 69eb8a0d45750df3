from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator, List, Optional

from .errors import StorageReadError, StorageWriteError
from .storage import KeyValueStorage, check_quota

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "kv_store"
    key: str = "key"
    value: str = "value"


_COLS = _Cols()


class SQLiteStorage(KeyValueStorage):
    """
    Durable key-value storage in a single SQLite table.

    Each call opens its own connection; writes commit before returning.
    """

    def __init__(self, db_path: str, quota_bytes: Optional[int] = None) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._quota_bytes = quota_bytes if quota_bytes and quota_bytes > 0 else None
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.key} TEXT PRIMARY KEY,
                    {_COLS.value} TEXT NOT NULL
                )
                """
            )

    def usage(self) -> int:
        try:
            with self._conn() as conn:
                row = conn.execute(
                    f"SELECT COALESCE(SUM(LENGTH({_COLS.key}) + LENGTH({_COLS.value})), 0) AS used "
                    f"FROM {_COLS.table}"
                ).fetchone()
                return int(row["used"]) if row else 0
        except sqlite3.Error as exc:
            raise StorageReadError(f"Failed to measure storage usage: {exc}") from exc

    def get_item(self, key: str) -> Optional[str]:
        try:
            with self._conn() as conn:
                row = conn.execute(
                    f"SELECT {_COLS.value} FROM {_COLS.table} WHERE {_COLS.key} = ?", (key,)
                ).fetchone()
                return str(row[_COLS.value]) if row else None
        except sqlite3.Error as exc:
            raise StorageReadError(f"Failed to read {key!r}: {exc}", key=key) from exc

    def set_item(self, key: str, value: str) -> None:
        if self._quota_bytes:
            check_quota(key, value, self.usage(), self.get_item(key), self._quota_bytes)
        try:
            with self._conn() as conn:
                conn.execute(
                    f"""
                    INSERT INTO {_COLS.table} ({_COLS.key}, {_COLS.value}) VALUES (?, ?)
                    ON CONFLICT({_COLS.key}) DO UPDATE SET {_COLS.value} = excluded.{_COLS.value}
                    """,
                    (key, value),
                )
        except sqlite3.Error as exc:
            raise StorageWriteError(f"Failed to write {key!r}: {exc}", key=key) from exc
        logger.debug("Stored %s (%d chars)", key, len(value))

    def remove_item(self, key: str) -> None:
        try:
            with self._conn() as conn:
                conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.key} = ?", (key,))
        except sqlite3.Error as exc:
            raise StorageWriteError(f"Failed to remove {key!r}: {exc}", key=key) from exc

    def keys(self) -> List[str]:
        try:
            with self._conn() as conn:
                rows = conn.execute(f"SELECT {_COLS.key} FROM {_COLS.table} ORDER BY {_COLS.key}").fetchall()
                return [str(r[_COLS.key]) for r in rows]
        except sqlite3.Error as exc:
            raise StorageReadError(f"Failed to list keys: {exc}") from exc
