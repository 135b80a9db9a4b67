"""Value codec implementations.

JSON is the default format: values are stored as compact UTF-8 JSON text.
msgpack is available as a denser binary alternative that also carries raw
bytes values.

Both formats only represent trees of their own node kinds. Cyclic structures,
NaN/Infinity (JSON) and arbitrary objects are rejected with CodecError when
encoding, not written half-way.
"""

from __future__ import annotations

import json
from typing import Any

import msgpack

from flash_store.domain.errors import CodecError
from flash_store.ports.outbound.codec import ValueCodec


class JsonValueCodec:
    """ValueCodec storing values as UTF-8 JSON.

    Supports dict (string keys), list, str, int, float, bool and None.
    Tuples are written as JSON arrays and read back as lists.
    """

    @property
    def name(self) -> str:
        return "json"

    def encode(self, value: Any) -> bytes:
        try:
            text = json.dumps(
                value,
                ensure_ascii=False,
                allow_nan=False,
                separators=(",", ":"),
            )
        except (TypeError, ValueError, RecursionError) as e:
            raise CodecError(f"Cannot encode value as JSON: {e}") from e
        return text.encode("utf-8")

    def decode(self, data: bytes) -> Any:
        try:
            return json.loads(bytes(data).decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CodecError(f"Stored bytes are not valid JSON: {e}") from e

    def __repr__(self) -> str:
        return "JsonValueCodec()"


class MsgpackValueCodec:
    """ValueCodec storing values as msgpack.

    Supports everything JsonValueCodec does plus bytes. str and bytes stay
    distinct on the round trip.
    """

    @property
    def name(self) -> str:
        return "msgpack"

    def encode(self, value: Any) -> bytes:
        try:
            return msgpack.packb(value, use_bin_type=True)
        except (TypeError, ValueError, OverflowError, RecursionError) as e:
            raise CodecError(f"Cannot encode value as msgpack: {e}") from e

    def decode(self, data: bytes) -> Any:
        try:
            return msgpack.unpackb(bytes(data), raw=False)
        except (ValueError, TypeError, msgpack.UnpackException) as e:
            raise CodecError(f"Stored bytes are not valid msgpack: {e}") from e

    def __repr__(self) -> str:
        return "MsgpackValueCodec()"


_VALUE_CODECS: dict[str, type] = {
    "json": JsonValueCodec,
    "msgpack": MsgpackValueCodec,
}


def get_value_codec(name: str) -> ValueCodec[Any]:
    """Build a value codec by format name.

    Args:
        name: "json" or "msgpack".

    Raises:
        ValueError: If the format is unknown.
    """
    try:
        codec_cls = _VALUE_CODECS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown value format: {name!r} (expected one of {sorted(_VALUE_CODECS)})"
        ) from None
    return codec_cls()
