"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for the systems the store depends on:
the ordered storage engine and the key/value codecs.
"""

from flash_store.ports.outbound.codec import KeyCodec, ValueCodec
from flash_store.ports.outbound.ordered_engine import EngineCursor, EngineFactory, OrderedEngine

__all__ = [
    "EngineCursor",
    "EngineFactory",
    "KeyCodec",
    "OrderedEngine",
    "ValueCodec",
]
