"""Application layer for the key-value store.

The application layer composes ports, adapters and domain services into the
operations callers use.

Exports:
    - FlashStore: Typed async facade (get/put/delete/keys/values/count/destroy)
    - EntryStream: Lazy, single-pass async iterator over one engine cursor
    - Projection: What an EntryStream yields (items, keys or values)
    - StoreHandle: Engine ownership and working-directory lifecycle
    - HandleState: PENDING, OPEN or CLOSED
"""

from flash_store.application.flash_store import FlashStore, lmdb_engine_factory
from flash_store.application.iterator_bridge import EntryStream, Projection
from flash_store.application.store_lifecycle import HandleState, StoreHandle

__all__ = [
    "EntryStream",
    "FlashStore",
    "HandleState",
    "Projection",
    "StoreHandle",
    "lmdb_engine_factory",
]
