"""Row backends for nestkv.

PostgresBackend lives in nestkv.backends.postgres and is imported on
demand so that psycopg is only loaded when it is used.
"""

from .base import StorageBackend, StoredRow
from .memory import MemoryBackend
from .sqlite import SQLiteBackend

__all__ = [
    "StorageBackend",
    "StoredRow",
    "MemoryBackend",
    "SQLiteBackend",
]
