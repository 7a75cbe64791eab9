"""SQLite storage adapter.

Implements the core KeyValueStorePort using a simple SQLite database.
"""

from __future__ import annotations

import json
import sqlite3
from typing import Any, Optional


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the KeyValueStorePort contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=5)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - kv: namespaced JSON values (cursors under last_update, blocks under block)
        """

        with self._connect() as conn:
            # Fields:
            # - namespace: logical bucket, e.g. last_update or block
            # - key: subscriber id or block key within the namespace
            # - value: JSON-encoded value
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    namespace TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    PRIMARY KEY (namespace, key)
                )
                """
            )

    def get(self, namespace: str, key: str) -> Optional[Any]:
        """Return the stored value, or None when the key is absent."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM kv WHERE namespace = ? AND key = ?",
                (namespace, key),
            ).fetchone()
        return json.loads(row["value"]) if row else None

    def set(self, namespace: str, key: str, value: Any) -> None:
        """Upsert a value; the write is committed before returning."""

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO kv (namespace, key, value)
                VALUES (?, ?, ?)
                ON CONFLICT(namespace, key) DO UPDATE SET value = excluded.value
                """,
                (namespace, key, json.dumps(value)),
            )
