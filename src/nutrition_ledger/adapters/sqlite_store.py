"""SQLite-backed key-value store shared by the ledger repositories."""

import asyncio
import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from nutrition_ledger.domain.errors import StorageError

_SCHEMA = """
CREATE TABLE IF NOT EXISTS ledger_kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


@dataclass
class SqliteKeyValueStore:
    """JSON values keyed by namespaced strings such as ``entry:<id>``.

    Each operation opens its own connection and runs off the event loop.
    Writes are atomic per key and last-write-wins.
    """

    path: Path

    def initialize(self) -> None:
        """Create the database file and table if missing."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(_SCHEMA)

    async def get(self, key: str) -> object | None:
        """Return the decoded value stored under a key."""
        return await asyncio.to_thread(self._get, key)

    async def set(self, key: str, value: object) -> None:
        """Store a value under a key, replacing any previous value."""
        await asyncio.to_thread(self._set, key, json.dumps(value))

    async def delete(self, key: str) -> bool:
        """Delete a key and return True if it existed."""
        return await asyncio.to_thread(self._delete, key)

    async def values(self, prefix: str) -> list[object]:
        """Return decoded values for every key starting with a prefix."""
        return await asyncio.to_thread(self._values, prefix)

    async def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with a prefix."""
        return await asyncio.to_thread(self._delete_prefix, prefix)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self.path)
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot open ledger database: {exc}") from exc
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StorageError(f"Ledger storage failure: {exc}") from exc
        finally:
            conn.close()

    def _get(self, key: str) -> object | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM ledger_kv WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        return _decode(key, row[0])

    def _set(self, key: str, encoded: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO ledger_kv (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, encoded),
            )

    def _delete(self, key: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM ledger_kv WHERE key = ?", (key,))
        return cursor.rowcount > 0

    def _values(self, prefix: str) -> list[object]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT key, value FROM ledger_kv WHERE substr(key, 1, ?) = ?",
                (len(prefix), prefix),
            ).fetchall()
        return [_decode(key, value) for key, value in rows]

    def _delete_prefix(self, prefix: str) -> int:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM ledger_kv WHERE substr(key, 1, ?) = ?",
                (len(prefix), prefix),
            )
        return cursor.rowcount


def _decode(key: str, raw: str) -> object:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise StorageError(f"Corrupt ledger record: {key}") from exc
