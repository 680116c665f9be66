"""SQLite row backend."""

import json
import logging
import sqlite3
from typing import Iterable, Iterator, List, Optional

from .base import StorageBackend, StoredRow

logger = logging.getLogger(__name__)


class SQLiteBackend(StorageBackend):
    """SQLite row backend.

    Stores rows in a SQLite database file. Zero configuration required;
    the table is created on connect if it does not exist.

    Example:
        backend = SQLiteBackend()
        backend.connect(path="settings.db")

        # Or in-memory
        backend.connect(path=":memory:")
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._conn: Optional[sqlite3.Connection] = None
        self._path: Optional[str] = None

    def connect(self, path: str = ":memory:", **kwargs) -> None:
        """Connect to SQLite database.

        Args:
            path: Database file path, or ":memory:" for in-memory database
        """
        self._path = path
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._create_table()
        logger.info("Connected to SQLite database %s (table=%s)", path, self.table)

    def _create_table(self) -> None:
        """Create the settings table if it doesn't exist."""
        self._conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS "{self.table}" (
                "{self.key_column}" TEXT PRIMARY KEY,
                "{self.value_column}" TEXT NOT NULL
            )
            """
        )
        self._conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
            logger.info("Closed SQLite database %s", self._path)

    @property
    def connection(self) -> sqlite3.Connection:
        """The underlying sqlite3 connection."""
        if self._conn is None:
            raise RuntimeError("SQLite backend not connected. Call connect() first.")
        return self._conn

    def _row(self, row: sqlite3.Row) -> StoredRow:
        return StoredRow(key=row[self.key_column], value=row[self.value_column])

    def get(self, key: str) -> Optional[StoredRow]:
        """Retrieve row by key."""
        cursor = self.connection.execute(
            f'SELECT "{self.key_column}", "{self.value_column}" '
            f'FROM "{self.table}" WHERE "{self.key_column}" = ?',
            (key,),
        )
        row = cursor.fetchone()
        if row is None:
            return None
        return self._row(row)

    def exists(self, key: str) -> bool:
        """Check if key exists."""
        cursor = self.connection.execute(
            f'SELECT 1 FROM "{self.table}" WHERE "{self.key_column}" = ?', (key,)
        )
        return cursor.fetchone() is not None

    def get_many(self, keys: Iterable[str]) -> List[StoredRow]:
        """Retrieve the rows that exist among keys in one statement.

        The key list is bound as a single JSON array parameter and
        expanded with json_each, so the bound-parameter limit does not
        apply and no chunking is needed.
        """
        keys = list(dict.fromkeys(keys))
        if not keys:
            return []
        cursor = self.connection.execute(
            f'SELECT "{self.key_column}", "{self.value_column}" '
            f'FROM "{self.table}" WHERE "{self.key_column}" IN '
            f"(SELECT value FROM json_each(?))",
            (json.dumps(keys),),
        )
        return [self._row(row) for row in cursor]

    def scan(self) -> Iterator[StoredRow]:
        """Yield every row."""
        cursor = self.connection.execute(
            f'SELECT "{self.key_column}", "{self.value_column}" FROM "{self.table}"'
        )
        for row in cursor:
            yield self._row(row)

    def put(self, key: str, value: str) -> None:
        """Store or update row."""
        self.connection.execute(
            f"""
            INSERT INTO "{self.table}" ("{self.key_column}", "{self.value_column}")
            VALUES (?, ?)
            ON CONFLICT ("{self.key_column}")
            DO UPDATE SET "{self.value_column}" = excluded."{self.value_column}"
            """,
            (key, value),
        )
        self._conn.commit()

    def delete(self, key: str) -> int:
        """Delete row by key."""
        cursor = self.connection.execute(
            f'DELETE FROM "{self.table}" WHERE "{self.key_column}" = ?', (key,)
        )
        self._conn.commit()
        return cursor.rowcount

    def delete_all(self) -> int:
        """Delete every row."""
        cursor = self.connection.execute(f'DELETE FROM "{self.table}"')
        self._conn.commit()
        return cursor.rowcount
