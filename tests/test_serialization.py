"""Tests for value codecs."""

import pytest

from nestkv import JSONCodec, SerializationError


def deeply_nested(depth):
    value = []
    for _ in range(depth):
        value = [value]
    return value


class TestJSONCodec:
    """Tests for JSONCodec."""

    @pytest.fixture
    def codec(self):
        return JSONCodec()

    @pytest.mark.parametrize(
        "value",
        [
            None,
            True,
            False,
            0,
            -17,
            3.5,
            "",
            "héllo ✓",
            [],
            [1, "two", None, [3]],
            {},
            {"b": 1, "a": {"c": [True, None]}},
        ],
    )
    def test_roundtrip(self, codec, value):
        """Decoding an encoded value gives it back."""
        assert codec.decode(codec.encode(value)) == value

    def test_preserves_key_order(self, codec):
        """Mapping key order survives a round trip."""
        value = {"z": 1, "a": 2, "m": 3}
        assert list(codec.decode(codec.encode(value))) == ["z", "a", "m"]

    def test_sort_keys(self):
        """sort_keys emits keys in sorted order."""
        codec = JSONCodec(sort_keys=True)
        assert codec.encode({"b": 1, "a": 2}) == '{"a":2,"b":1}'

    def test_compact_encoding(self, codec):
        """Output has no whitespace between tokens."""
        assert codec.encode({"theme": "dark", "n": [1, 2]}) == '{"theme":"dark","n":[1,2]}'

    def test_tuple_encodes_as_list(self, codec):
        """Tuples are stored as JSON arrays."""
        assert codec.decode(codec.encode((1, 2))) == [1, 2]

    def test_decode_bytes(self, codec):
        """UTF-8 bytes from a driver are accepted."""
        assert codec.decode(b'{"a": 1}') == {"a": 1}

    def test_malformed_input_raises(self, codec):
        """Malformed stored text fails loudly."""
        with pytest.raises(SerializationError):
            codec.decode("{not json")

    def test_non_text_input_raises(self, codec):
        """Stored values must be text or bytes."""
        with pytest.raises(SerializationError):
            codec.decode(12)

    def test_invalid_utf8_raises(self, codec):
        """Bytes that are not UTF-8 are rejected."""
        with pytest.raises(SerializationError):
            codec.decode(b"\xff\xfe")

    @pytest.mark.parametrize("stored", ["NaN", "Infinity", "-Infinity", '{"a": [NaN]}'])
    def test_non_finite_tokens_rejected(self, codec, stored):
        """Decode refuses the non-finite tokens encode never writes."""
        with pytest.raises(SerializationError):
            codec.decode(stored)

    @pytest.mark.parametrize(
        "value",
        [
            {1: "int key"},
            {"nested": {(1, 2): "tuple key"}},
            {1, 2},
            object(),
            float("nan"),
            [float("inf")],
        ],
    )
    def test_unsupported_values_raise(self, codec, value):
        """Values json would coerce or reject raise SerializationError."""
        with pytest.raises(SerializationError):
            codec.encode(value)

    def test_deep_nesting_encode_raises(self, codec):
        """Excessive nesting on encode is a SerializationError."""
        with pytest.raises(SerializationError):
            codec.encode(deeply_nested(100000))

    def test_deep_nesting_decode_raises(self, codec):
        """Excessive nesting on decode is a SerializationError."""
        with pytest.raises(SerializationError):
            codec.decode("[" * 100000 + "]" * 100000)
