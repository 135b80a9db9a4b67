"""Domain services for the key-value store.

Exports:
    - normalize_range: RangeOptions -> ScanRange, with validation
    - prefix_range: Bound pair matching every key with a given prefix
    - validate_options: Option combination checks
"""

from flash_store.domain.services.range_query import (
    normalize_range,
    prefix_range,
    validate_options,
)

__all__ = [
    "normalize_range",
    "prefix_range",
    "validate_options",
]
