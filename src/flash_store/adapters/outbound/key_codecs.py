"""Key codec implementations."""

from __future__ import annotations

from flash_store.domain.errors import CodecError, ValidationError


class Utf8KeyCodec:
    """KeyCodec for str keys, stored as UTF-8.

    UTF-8 byte order matches code point order, so string keys iterate in
    code point order.
    """

    def encode(self, key: str) -> bytes:
        if not isinstance(key, str):
            raise CodecError(f"Expected a str key, got {type(key).__name__}")
        if not key:
            raise ValidationError("Key cannot be empty")
        try:
            return key.encode("utf-8")
        except UnicodeEncodeError as e:
            raise CodecError(f"Key is not encodable as UTF-8: {e}") from e

    def decode(self, data: bytes) -> str:
        try:
            return bytes(data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise CodecError(f"Stored key is not valid UTF-8: {e}") from e

    def __repr__(self) -> str:
        return "Utf8KeyCodec()"


class BytesKeyCodec:
    """KeyCodec for raw bytes keys, stored unchanged."""

    def encode(self, key: bytes) -> bytes:
        if not isinstance(key, (bytes, bytearray, memoryview)):
            raise CodecError(f"Expected a bytes key, got {type(key).__name__}")
        data = bytes(key)
        if not data:
            raise ValidationError("Key cannot be empty")
        return data

    def decode(self, data: bytes) -> bytes:
        return bytes(data)

    def __repr__(self) -> str:
        return "BytesKeyCodec()"
