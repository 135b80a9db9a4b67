"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Inbound adapters: Handle incoming requests (REST)
- Outbound adapters: Implement external dependencies (LMDB, codecs)
"""

from flash_store.adapters.outbound import (
    BytesKeyCodec,
    JsonValueCodec,
    LmdbEngine,
    MsgpackValueCodec,
    Utf8KeyCodec,
)

__all__ = [
    # Outbound adapters
    "BytesKeyCodec",
    "JsonValueCodec",
    "LmdbEngine",
    "MsgpackValueCodec",
    "Utf8KeyCodec",
]
