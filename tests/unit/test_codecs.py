"""Unit tests for key and value codecs."""

from __future__ import annotations

import math

import pytest

from flash_store.adapters.outbound.key_codecs import BytesKeyCodec, Utf8KeyCodec
from flash_store.adapters.outbound.value_codecs import (
    JsonValueCodec,
    MsgpackValueCodec,
    get_value_codec,
)
from flash_store.domain.errors import CodecError, EngineError, ValidationError


class TestJsonValueCodec:
    """Tests for JsonValueCodec."""

    @pytest.fixture
    def codec(self) -> JsonValueCodec:
        return JsonValueCodec()

    def test_nested_structure(self, codec: JsonValueCodec) -> None:
        """Nested JSON structures survive the round trip."""
        value = {"name": "Alice", "tags": ["a", "b"], "age": 30, "score": 1.5, "admin": False, "boss": None}

        assert codec.decode(codec.encode(value)) == value

    def test_compact_utf8(self, codec: JsonValueCodec) -> None:
        """Values are stored as compact UTF-8 text."""
        assert codec.encode({"k": "日本"}) == '{"k":"日本"}'.encode("utf-8")

    def test_tuple_becomes_list(self, codec: JsonValueCodec) -> None:
        """Tuples are written as arrays."""
        assert codec.decode(codec.encode((1, 2))) == [1, 2]

    def test_unsupported_type(self, codec: JsonValueCodec) -> None:
        """Values outside JSON's type system are rejected."""
        with pytest.raises(CodecError):
            codec.encode({1, 2, 3})

    def test_nan_rejected(self, codec: JsonValueCodec) -> None:
        """NaN has no JSON representation."""
        with pytest.raises(CodecError):
            codec.encode(math.nan)

    def test_cycle_rejected(self, codec: JsonValueCodec) -> None:
        """Cyclic structures are rejected."""
        cyclic: list[object] = []
        cyclic.append(cyclic)

        with pytest.raises(CodecError):
            codec.encode(cyclic)

    @pytest.mark.parametrize("data", [b"{not json", b"\x81\xa1a\x01", b""])
    def test_invalid_bytes(self, codec: JsonValueCodec, data: bytes) -> None:
        """Undecodable bytes raise CodecError, not EngineError."""
        with pytest.raises(CodecError) as exc_info:
            codec.decode(data)

        assert not isinstance(exc_info.value, EngineError)
        assert isinstance(exc_info.value, ValueError)


class TestMsgpackValueCodec:
    """Tests for MsgpackValueCodec."""

    @pytest.fixture
    def codec(self) -> MsgpackValueCodec:
        return MsgpackValueCodec()

    def test_bytes_and_str_stay_distinct(self, codec: MsgpackValueCodec) -> None:
        """msgpack keeps bytes and str apart."""
        value = {"raw": b"\x00\x01", "text": "hi", "items": [1, 2.5, None]}

        assert codec.decode(codec.encode(value)) == value

    def test_unsupported_type(self, codec: MsgpackValueCodec) -> None:
        """Arbitrary objects are rejected."""
        with pytest.raises(CodecError):
            codec.encode(object())

    def test_truncated_bytes(self, codec: MsgpackValueCodec) -> None:
        """Truncated data raises CodecError."""
        data = codec.encode({"a": "long enough string"})

        with pytest.raises(CodecError):
            codec.decode(data[:-3])


class TestGetValueCodec:
    """Tests for codec lookup by format name."""

    def test_known_formats(self) -> None:
        assert isinstance(get_value_codec("json"), JsonValueCodec)
        assert isinstance(get_value_codec("MSGPACK"), MsgpackValueCodec)

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError, match="Unknown value format"):
            get_value_codec("yaml")


class TestKeyCodecs:
    """Tests for key codecs."""

    def test_utf8_round_trip(self) -> None:
        codec = Utf8KeyCodec()

        assert codec.encode("ключ") == "ключ".encode("utf-8")
        assert codec.decode(codec.encode("ключ")) == "ключ"

    def test_utf8_preserves_code_point_order(self) -> None:
        """Encoded order matches str order."""
        codec = Utf8KeyCodec()
        keys = ["b", "a", "é", "Z", "a1", "\U0001f600", "~"]

        assert sorted(keys) == sorted(keys, key=codec.encode)

    def test_utf8_rejects_bytes(self) -> None:
        with pytest.raises(CodecError):
            Utf8KeyCodec().encode(b"key")  # type: ignore[arg-type]

    def test_utf8_rejects_lone_surrogate(self) -> None:
        with pytest.raises(CodecError):
            Utf8KeyCodec().encode("\ud800")

    def test_utf8_rejects_invalid_stored_key(self) -> None:
        with pytest.raises(CodecError):
            Utf8KeyCodec().decode(b"\xff")

    def test_empty_keys_rejected(self) -> None:
        """Empty keys cannot be stored."""
        with pytest.raises(ValidationError):
            Utf8KeyCodec().encode("")
        with pytest.raises(ValidationError):
            BytesKeyCodec().encode(b"")

    def test_bytes_codec(self) -> None:
        codec = BytesKeyCodec()

        assert codec.encode(bytearray(b"\x00k")) == b"\x00k"
        assert codec.decode(b"\x00k") == b"\x00k"

        with pytest.raises(CodecError):
            codec.encode("key")  # type: ignore[arg-type]
