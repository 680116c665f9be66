"""Exceptions for the nestkv package."""


class StoreError(Exception):
    """Base exception for all store errors."""

    pass


class NotFoundError(StoreError, KeyError):
    """No value resolves at the specified key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No value at key: {key}")


class SerializationError(StoreError):
    """Failed to encode or decode a stored value."""

    pass


class ConfigurationError(StoreError, ValueError):
    """Invalid connection URL or table/column configuration."""

    pass
