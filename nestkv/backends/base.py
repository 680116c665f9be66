"""Abstract base class for row backends."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional

from ..exceptions import ConfigurationError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass
class StoredRow:
    """One persisted (key, value) row. The value is codec-encoded text."""

    key: str
    value: str


def validate_identifier(name: str, what: str) -> str:
    """Check that a table or column name is a plain SQL identifier."""
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ConfigurationError(f"Invalid {what} name: {name!r}")
    return name


class StorageBackend(ABC):
    """Abstract base class for row backends.

    A backend stores rows of (key, value) with a unique key, and knows
    nothing about dot-paths or value encoding; the Store class handles
    those. All methods are synchronous and let driver errors propagate.

    Args:
        table: Name of the settings table
        key_column: Name of the unique key column
        value_column: Name of the encoded value column
    """

    def __init__(
        self,
        table: str = "settings",
        key_column: str = "key",
        value_column: str = "value",
    ):
        self.table = validate_identifier(table, "table")
        self.key_column = validate_identifier(key_column, "key column")
        self.value_column = validate_identifier(value_column, "value column")

    @abstractmethod
    def connect(self, **kwargs) -> None:
        """Establish connection to storage.

        Args:
            **kwargs: Backend-specific connection parameters
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close connection and release resources."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[StoredRow]:
        """Point lookup.

        Returns:
            StoredRow if found, None otherwise
        """
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Existence check that does not fetch the value."""
        pass

    @abstractmethod
    def get_many(self, keys: Iterable[str]) -> List[StoredRow]:
        """Batched lookup.

        Returns:
            Rows for the keys that exist; absent keys are omitted
        """
        pass

    @abstractmethod
    def scan(self) -> Iterator[StoredRow]:
        """Yield every row in the table."""
        pass

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        """Insert the row, or update its value if the key exists."""
        pass

    @abstractmethod
    def delete(self, key: str) -> int:
        """Delete the row for key.

        Returns:
            Number of rows deleted (0 or 1)
        """
        pass

    @abstractmethod
    def delete_all(self) -> int:
        """Delete every row.

        Returns:
            Number of rows deleted
        """
        pass
