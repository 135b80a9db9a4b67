"""Flash Store - typed async key-value store over LMDB.

A small facade giving CRUD access, range-bounded async iteration, counting
and working-directory lifecycle management on top of an ordered on-disk
key-value engine.
"""

__version__ = "0.1.0"

from flash_store.application import EntryStream, FlashStore
from flash_store.domain.errors import (
    CodecError,
    EngineError,
    FlashStoreError,
    NotFoundError,
    StoreClosedError,
    ValidationError,
)
from flash_store.domain.value_objects import RangeOptions

__all__ = [
    "CodecError",
    "EngineError",
    "EntryStream",
    "FlashStore",
    "FlashStoreError",
    "NotFoundError",
    "RangeOptions",
    "StoreClosedError",
    "ValidationError",
    "__version__",
]
