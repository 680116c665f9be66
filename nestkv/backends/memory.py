"""In-memory row backend for testing."""

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from .base import StorageBackend, StoredRow

logger = logging.getLogger(__name__)


class MemoryBackend(StorageBackend):
    """In-memory row backend.

    Useful for testing and temporary storage. Data is lost when the
    backend is closed or the process ends.

    Example:
        backend = MemoryBackend()
        backend.connect()

        backend.put("app", '{"theme":"dark"}')
        row = backend.get("app")
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._rows: Dict[str, str] = {}
        self._connected = False

    def connect(self, **kwargs) -> None:
        """Initialize the in-memory table."""
        self._rows = {}
        self._connected = True
        logger.info("Memory backend ready (table=%s)", self.table)

    def close(self) -> None:
        """Clear the in-memory table."""
        self._rows.clear()
        self._connected = False

    def get(self, key: str) -> Optional[StoredRow]:
        """Retrieve row by key."""
        if key not in self._rows:
            return None
        return StoredRow(key, self._rows[key])

    def exists(self, key: str) -> bool:
        """Check if key exists."""
        return key in self._rows

    def get_many(self, keys: Iterable[str]) -> List[StoredRow]:
        """Retrieve the rows that exist among keys."""
        return [StoredRow(k, self._rows[k]) for k in dict.fromkeys(keys) if k in self._rows]

    def scan(self) -> Iterator[StoredRow]:
        """Yield every row."""
        for key, value in list(self._rows.items()):
            yield StoredRow(key, value)

    def put(self, key: str, value: str) -> None:
        """Store or update row."""
        self._rows[key] = value

    def delete(self, key: str) -> int:
        """Delete row by key."""
        if key in self._rows:
            del self._rows[key]
            return 1
        return 0

    def delete_all(self) -> int:
        """Delete every row."""
        count = len(self._rows)
        self._rows.clear()
        return count
