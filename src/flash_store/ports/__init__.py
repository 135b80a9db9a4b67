"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts. The store
has outbound ports only: the ordered engine it writes to and the codecs that
translate keys and values to bytes.

Adapters implement these ports with concrete functionality.
"""

from flash_store.ports.outbound import EngineCursor, EngineFactory, KeyCodec, OrderedEngine, ValueCodec

__all__ = [
    "EngineCursor",
    "EngineFactory",
    "KeyCodec",
    "OrderedEngine",
    "ValueCodec",
]
