"""Outbound adapters - implementations of outbound ports.

These adapters implement the storage engine and the codecs.
"""

from flash_store.adapters.outbound.key_codecs import BytesKeyCodec, Utf8KeyCodec
from flash_store.adapters.outbound.lmdb_engine import LmdbCursor, LmdbEngine
from flash_store.adapters.outbound.value_codecs import (
    JsonValueCodec,
    MsgpackValueCodec,
    get_value_codec,
)

__all__ = [
    "BytesKeyCodec",
    "JsonValueCodec",
    "LmdbCursor",
    "LmdbEngine",
    "MsgpackValueCodec",
    "Utf8KeyCodec",
    "get_value_codec",
]
