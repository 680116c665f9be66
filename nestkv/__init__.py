"""Settings storage with dot-path keys over a flat key/value table.

Each root key is one row holding a JSON-encoded value; nested keys like
``app.ui.theme`` read and write fields inside that value.

Quick Start:
    from nestkv import connect

    db = connect("sqlite:///settings.db")

    db.set("app.ui.theme", "dark")
    db.set("app.ui.font_size", 14)
    db.get("app")                  # {'ui': {'theme': 'dark', 'font_size': 14}}

    db.get_multiple(["app.ui.theme", "mail"])
    # {'app.ui.theme': 'dark', 'mail': None}

    db.forget("app.ui.theme")
    db.flush()

Supported backends:
    - memory://                  In-memory storage (testing)
    - sqlite:///path.db          SQLite file storage
    - sqlite:///:memory:         SQLite in-memory
    - postgresql://user@host/db  PostgreSQL (psycopg)

Key Classes:
    - Store: Main settings interface
    - connect(): Create a Store from a URL

Backend Classes:
    - MemoryBackend: In-memory rows for testing
    - SQLiteBackend: SQLite file storage
    - PostgresBackend: PostgreSQL (nestkv.backends.postgres)

Serialization:
    - JSONCodec: Default value codec
"""

from .core import Store, connect
from .backends import StorageBackend, StoredRow, MemoryBackend, SQLiteBackend
from .serialization import Codec, JSONCodec
from .paths import classify, split_path
from .exceptions import (
    StoreError,
    NotFoundError,
    SerializationError,
    ConfigurationError,
)

__all__ = [
    # Main API
    "Store",
    "connect",
    # Backends
    "StorageBackend",
    "StoredRow",
    "MemoryBackend",
    "SQLiteBackend",
    # Serialization
    "Codec",
    "JSONCodec",
    # Paths
    "classify",
    "split_path",
    # Exceptions
    "StoreError",
    "NotFoundError",
    "SerializationError",
    "ConfigurationError",
]

__version__ = "0.1.0"
