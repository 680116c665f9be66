"""Core Store class: dot-path access over a flat key/value table."""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlparse

from .backends.base import StorageBackend
from .backends.memory import MemoryBackend
from .exceptions import ConfigurationError, NotFoundError
from .paths import MISSING, Value, classify, forget_path, get_path, set_path, split_path
from .serialization import Codec, JSONCodec

logger = logging.getLogger(__name__)


class Store:
    """Settings store with hierarchical dot-path keys.

    Each root key (no ``.``) is one row in the backend holding the whole
    encoded value. A nested key like ``app.ui.theme`` addresses a field
    inside the value stored under ``app``; nested paths never get rows of
    their own.

    Nested set/forget are read-modify-write cycles on the root row with no
    isolation: two writers changing different paths under the same root
    at the same time can lose one of the updates. Callers that need that
    must keep concurrent writers on disjoint roots, or add compare-and-swap
    or row locking in the backend.

    Example:
        from nestkv import connect

        db = connect("sqlite:///settings.db")

        db.set("app.ui.theme", "dark")
        db.get("app")            # {'ui': {'theme': 'dark'}}
        db.get("app.ui.theme")   # 'dark'

        db.forget("app.ui.theme")
        db.get("app")            # {'ui': {}}
    """

    def __init__(
        self,
        backend: StorageBackend,
        codec: Optional[Codec] = None,
        name: Optional[str] = None,
    ):
        """Create a Store over a connected backend.

        Use connect() for convenient URL-based connection.

        Args:
            backend: Connected row backend
            codec: Value codec (defaults to JSONCodec)
            name: Store name, used by registries holding several stores
        """
        self._backend = backend
        self._codec = codec if codec is not None else JSONCodec()
        self._name = name

    # Identity

    @property
    def name(self) -> Optional[str]:
        """The store name."""
        return self._name

    @name.setter
    def name(self, value: Optional[str]) -> None:
        self._name = value

    def get_name(self) -> Optional[str]:
        return self._name

    def set_name(self, name: Optional[str]) -> None:
        self._name = name

    @property
    def backend(self) -> StorageBackend:
        """The underlying row backend."""
        return self._backend

    @property
    def codec(self) -> Codec:
        return self._codec

    # Internal helpers

    def _fetch_root(self, root: str) -> Any:
        """Load and decode one root value, or MISSING if no row exists."""
        row = self._backend.get(root)
        if row is None:
            return MISSING
        return self._codec.decode(row.value)

    def _resolve(self, key: str) -> Any:
        """Resolve a key to its value, or MISSING. One backend read."""
        is_root, root = classify(key)
        value = self._fetch_root(root)
        if is_root:
            return value
        _, segments = split_path(key)
        return get_path(value, segments)

    def _put(self, key: str, value: Value) -> None:
        self._backend.put(key, self._codec.encode(value))

    # Reads

    def get(self, key: str, default: Any = None) -> Any:
        """Get the value at a root or nested key.

        Args:
            key: Root key or dot-path
            default: Value to return if the key does not resolve

        Returns:
            The stored value, or default
        """
        value = self._resolve(key)
        return default if value is MISSING else value

    def has(self, key: str) -> bool:
        """Check whether a key resolves.

        Root keys use an existence query and do not decode the value.
        Nested keys need the root fetched and decoded. Falsy values
        (0, False, "", None) count as present.
        """
        is_root, _ = classify(key)
        if is_root:
            return self._backend.exists(key)
        return self._resolve(key) is not MISSING

    def get_multiple(self, keys: Iterable[str]) -> Dict[str, Any]:
        """Get several keys with as few backend reads as possible.

        Nested keys are grouped by root and each distinct root is fetched
        once. Remaining root keys go out in a single batched lookup.
        Repeated input keys are collapsed.

        Returns:
            Dict with every requested key, in input order; None for keys
            that do not resolve
        """
        keys = list(dict.fromkeys(keys))
        roots: Dict[str, Any] = {}
        nested: Dict[str, Any] = {}
        plain: List[str] = []

        for key in keys:
            is_root, root = classify(key)
            if is_root:
                plain.append(key)
                continue
            if root not in roots:
                roots[root] = self._fetch_root(root)
            _, segments = split_path(key)
            nested[key] = get_path(roots[root], segments)

        pending = [key for key in plain if key not in roots]
        if pending:
            for key in pending:
                roots[key] = MISSING
            for row in self._backend.get_many(pending):
                roots[row.key] = self._codec.decode(row.value)

        logger.debug(
            "get_multiple: %d keys, %d root fetches, %d batched",
            len(keys), len(roots) - len(pending), len(pending),
        )

        result = {}
        for key in keys:
            value = nested[key] if key in nested else roots[key]
            result[key] = None if value is MISSING else value
        return result

    def all(self) -> Dict[str, Value]:
        """Return every root key with its decoded value.

        Nested paths are not expanded into separate entries.
        """
        return {row.key: self._codec.decode(row.value) for row in self._backend.scan()}

    # Writes

    def set(self, key: str, value: Value) -> None:
        """Set the value at a root or nested key.

        A root key is upserted directly. A nested key reads the current
        root value (an empty dict if absent), places value at the path
        while keeping every sibling, and writes the whole root back.

        Raises:
            SerializationError: If the value cannot be encoded
        """
        is_root, root = classify(key)
        if not is_root:
            _, segments = split_path(key)
            current = self._fetch_root(root)
            value = set_path(None if current is MISSING else current, segments, value)
        self._put(root, value)
        logger.debug("Set %s", key)

    def set_multiple(self, values: Mapping[str, Value]) -> None:
        """Set each key in order. Stops at the first failure, with no rollback."""
        for key, value in values.items():
            self.set(key, value)

    def forget(self, key: str) -> bool:
        """Remove a root key or a nested path.

        A root key deletes its row. A nested key removes that subtree from
        the root value and writes the root back; emptied parents remain,
        and the root row is never deleted this way. Forgetting something
        that does not exist is not an error.

        Returns:
            Always True
        """
        is_root, root = classify(key)
        if is_root:
            self._backend.delete(key)
            logger.debug("Forgot %s", key)
            return True

        current = self._fetch_root(root)
        if current is MISSING:
            return True
        _, segments = split_path(key)
        self._put(root, forget_path(current, segments))
        logger.debug("Forgot %s", key)
        return True

    def forget_multiple(self, keys: Iterable[str]) -> bool:
        """Forget each key in order. Stops at the first failure."""
        for key in keys:
            self.forget(key)
        return True

    def flush(self) -> bool:
        """Delete every row.

        Returns:
            True if at least one row was deleted, False if already empty
        """
        count = self._backend.delete_all()
        logger.debug("Flushed %d rows", count)
        return count > 0

    # Dict-like interface

    def __getitem__(self, key: str) -> Value:
        """Get the value at key.

        Raises:
            NotFoundError: If the key does not resolve
        """
        value = self._resolve(key)
        if value is MISSING:
            raise NotFoundError(key)
        return value

    def __setitem__(self, key: str, value: Value) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        self.forget(key)

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    # Lifecycle

    def close(self) -> None:
        """Close the store and its backend."""
        self._backend.close()

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


_TABLE_PARAMS = ("table", "key_column", "value_column")


def connect(url: str, codec: Optional[Codec] = None, name: Optional[str] = None) -> Store:
    """Connect to a store using a URL.

    Supported URL schemes:
        - memory://                     In-memory storage (testing)
        - sqlite:///path.db             SQLite file storage
        - sqlite:///:memory:            SQLite in-memory
        - postgresql://user@host/db     PostgreSQL (also postgres://)

    Query parameters ``table``, ``key_column`` and ``value_column`` name
    the physical table; ``name`` sets the store name. Any other query
    parameters are passed through to PostgreSQL and rejected elsewhere.

    Args:
        url: Connection URL
        codec: Value codec (defaults to JSONCodec)
        name: Store name; overrides the ``name`` query parameter

    Returns:
        Connected Store instance

    Example:
        db = connect("sqlite:///settings.db?table=app_settings")
        db = connect("memory://")
    """
    parsed = urlparse(url)
    scheme = parsed.scheme

    params = dict(parse_qsl(parsed.query, keep_blank_values=True))
    table_kwargs = {k: params.pop(k) for k in _TABLE_PARAMS if k in params}
    url_name = params.pop("name", None)
    if name is None:
        name = url_name

    if scheme in ("memory", "sqlite") and params:
        raise ConfigurationError(
            f"Unknown connection parameters for {scheme}: {', '.join(sorted(params))}"
        )

    if scheme == "memory":
        backend = MemoryBackend(**table_kwargs)
        backend.connect()

    elif scheme == "sqlite":
        from .backends.sqlite import SQLiteBackend

        # Handle sqlite:///path and sqlite:///:memory:
        path = parsed.path
        if path.startswith("/"):
            path = path[1:]

        backend = SQLiteBackend(**table_kwargs)
        backend.connect(path=path if path else ":memory:")

    elif scheme == "postgresql" or scheme == "postgres":
        from .backends.postgres import PostgresBackend

        dsn = parsed._replace(query=urlencode(params)).geturl()
        backend = PostgresBackend(**table_kwargs)
        backend.connect(dsn=dsn)

    else:
        raise ConfigurationError(f"Unknown storage scheme: {scheme}")

    return Store(backend, codec=codec, name=name)
