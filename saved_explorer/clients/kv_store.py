"""SQLite-backed persistent key-value store with an in-memory twin for tests."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional

from saved_explorer.core.errors import StorageError

logger = logging.getLogger(__name__)


def _serialize(key: str, value: Any) -> str:
    try:
        return json.dumps(value, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise StorageError(f"Value for key {key!r} is not JSON serializable.") from exc


def _deserialize(key: str, raw: str) -> Optional[Any]:
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Discarding unreadable stored value for key %s", key)
        return None


class SQLiteKeyValueStore:
    """Durable string-keyed store for JSON values."""

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        try:
            if self._db_path.parent and not self._db_path.parent.exists():
                self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._ensure_schema()
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Unable to open key-value store at {db_path}.") from exc

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_values (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

    def get(self, key: str) -> Optional[Any]:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT value FROM kv_values WHERE key = ?",
                    (key,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read key {key!r}.") from exc
        if not row:
            return None
        return _deserialize(key, row["value"])

    def set(self, key: str, value: Any) -> None:
        data_json = _serialize(key, value)
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO kv_values (key, value)
                    VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """,
                    (key, data_json),
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to write key {key!r}.") from exc

    def delete(self, key: str) -> None:
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM kv_values WHERE key = ?", (key,))
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to delete key {key!r}.") from exc


class InMemoryKeyValueStore:
    """Process-local store that serializes exactly like the SQLite backend."""

    def __init__(self, initial: Dict[str, Any] | None = None) -> None:
        self._values: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Optional[Any]:
        raw = self._values.get(key)
        if raw is None:
            return None
        return _deserialize(key, raw)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = _serialize(key, value)

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


__all__ = ["InMemoryKeyValueStore", "SQLiteKeyValueStore"]
