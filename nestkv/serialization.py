"""Codecs that turn setting values into stored text and back."""

import json
import math
from abc import ABC, abstractmethod
from typing import Any, Union

from .exceptions import SerializationError
from .paths import Value


class Codec(ABC):
    """Encode/decode pair between in-memory values and stored scalars.

    Implementations must be deterministic and lossless for the value
    domain (None, bool, int, float, str, list, dict with str keys), and
    must raise SerializationError rather than guess on malformed input.
    """

    @abstractmethod
    def encode(self, value: Value) -> str:
        """Encode a value for storage.

        Raises:
            SerializationError: If the value is outside the supported domain
        """
        pass

    @abstractmethod
    def decode(self, stored: Union[str, bytes]) -> Value:
        """Decode a stored scalar back to a value.

        Raises:
            SerializationError: If the stored text is malformed
        """
        pass


class JSONCodec(Codec):
    """JSON codec.

    Mapping key order is preserved through a round trip. Tuples are
    accepted on encode and come back as lists.

    Example:
        codec = JSONCodec()
        codec.encode({"theme": "dark"})   # '{"theme":"dark"}'
        codec.decode('{"theme":"dark"}')  # {'theme': 'dark'}
    """

    def __init__(self, sort_keys: bool = False):
        """Initialize the codec.

        Args:
            sort_keys: If True, emit mapping keys sorted instead of in
                insertion order
        """
        self.sort_keys = sort_keys

    def encode(self, value: Value) -> str:
        """Encode a value as compact JSON text."""
        try:
            self._check(value)
            return json.dumps(
                value,
                ensure_ascii=False,
                allow_nan=False,
                separators=(",", ":"),
                sort_keys=self.sort_keys,
            )
        except RecursionError as e:
            raise SerializationError("Value is nested too deeply to encode") from e
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to encode value: {e}") from e

    def decode(self, stored: Union[str, bytes]) -> Value:
        """Decode JSON text (or UTF-8 bytes).

        NaN and Infinity tokens are rejected, since encode never writes them.
        """
        if isinstance(stored, (bytes, bytearray, memoryview)):
            try:
                stored = bytes(stored).decode("utf-8")
            except UnicodeDecodeError as e:
                raise SerializationError(f"Stored value is not UTF-8: {e}") from e
        if not isinstance(stored, str):
            raise SerializationError(
                f"Cannot decode stored value of type {type(stored).__name__}"
            )
        try:
            return json.loads(stored, parse_constant=_reject_constant)
        except RecursionError as e:
            raise SerializationError("Stored value is nested too deeply to decode") from e
        except json.JSONDecodeError as e:
            raise SerializationError(f"Malformed stored value: {e}") from e

    def _check(self, value: Any) -> None:
        """Reject values json would silently coerce or cannot represent."""
        if value is None or isinstance(value, (str, bool, int)):
            return
        if isinstance(value, float):
            if math.isnan(value) or math.isinf(value):
                raise SerializationError(f"Cannot encode non-finite float: {value}")
            return
        if isinstance(value, (list, tuple)):
            for item in value:
                self._check(item)
            return
        if isinstance(value, dict):
            for key, item in value.items():
                if not isinstance(key, str):
                    raise SerializationError(
                        f"Mapping keys must be strings, got {type(key).__name__}"
                    )
                self._check(item)
            return
        raise SerializationError(f"Cannot encode type: {type(value).__name__}")


def _reject_constant(token: str) -> None:
    raise SerializationError(f"Malformed stored value: non-finite number {token}")
