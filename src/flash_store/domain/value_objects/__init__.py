"""Value objects for the key-value store domain.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Range Types:
        - BoundKind: UNBOUNDED, INCLUSIVE or EXCLUSIVE
        - Bound: One tagged side of a key range over encoded keys
        - ScanRange: Engine-native bounds plus reverse flag and limit
        - RangeOptions: Caller-facing gt/gte/lt/lte/reverse/limit/prefix options
        - FULL_SCAN: Unbounded forward ScanRange
"""

from flash_store.domain.value_objects.range_types import (
    FULL_SCAN,
    Bound,
    BoundKind,
    RangeOptions,
    ScanRange,
)

__all__ = [
    "Bound",
    "BoundKind",
    "FULL_SCAN",
    "RangeOptions",
    "ScanRange",
]
