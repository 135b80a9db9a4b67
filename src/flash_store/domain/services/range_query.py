"""Range normalization for key scans.

Turns caller-facing RangeOptions into an engine-native ScanRange:

    gt  -> lower EXCLUSIVE      gte -> lower INCLUSIVE
    lt  -> upper EXCLUSIVE      lte -> upper INCLUSIVE
    prefix p -> [p, p + 0xff)

An empty bound (`gte=""`, `lt=b""`) is ignored and leaves that side
unbounded, so `keys(gte="")` scans every key.

The prefix upper bound appends the maximal byte value. UTF-8 never produces
0xff, so for string keys the range holds exactly the keys that start with
the prefix. For raw byte keys, a key whose byte right after the prefix is
0xff falls outside the range.

All checks run before any engine access.
"""

from __future__ import annotations

from typing import Any

from flash_store.domain.errors import ValidationError
from flash_store.domain.value_objects import Bound, RangeOptions, ScanRange
from flash_store.ports.outbound.codec import KeyCodec

MAX_BYTE = b"\xff"


def prefix_range(prefix: bytes) -> tuple[Bound, Bound]:
    """Derive the bound pair matching every key that starts with prefix.

    Args:
        prefix: Encoded prefix. An empty prefix matches every key.

    Returns:
        (lower, upper) bounds: [prefix, prefix + 0xff).
    """
    if not prefix:
        return Bound.unbounded(), Bound.unbounded()
    return Bound.inclusive(prefix), Bound.exclusive(prefix + MAX_BYTE)


def validate_options(options: RangeOptions[Any]) -> None:
    """Reject option combinations that have no single meaning.

    Raises:
        ValidationError: If prefix is mixed with explicit bounds, both the
            inclusive and exclusive form of one side are given, or limit is
            not a non-negative integer.
    """
    if options.prefix is not None and options.has_explicit_bounds:
        raise ValidationError(
            "Cannot specify `prefix` together with `gt`/`gte`/`lt`/`lte`"
        )

    if options.gt is not None and options.gte is not None:
        raise ValidationError("Cannot specify both `gt` and `gte`")

    if options.lt is not None and options.lte is not None:
        raise ValidationError("Cannot specify both `lt` and `lte`")

    if options.limit is not None:
        if isinstance(options.limit, bool) or not isinstance(options.limit, int):
            raise ValidationError(f"limit must be an integer, got {options.limit!r}")
        if options.limit < 0:
            raise ValidationError(f"limit must be non-negative, got {options.limit}")


def normalize_range(options: RangeOptions[Any] | None, key_codec: KeyCodec[Any]) -> ScanRange:
    """Normalize range options into engine-native bounds.

    Args:
        options: Caller options; None means a full forward scan.
        key_codec: Codec used to encode bound keys.

    Returns:
        The ScanRange to hand to the engine cursor.

    Raises:
        ValidationError: On invalid option combinations.
        CodecError: If a bound key has the wrong type for the codec.
    """
    if options is None:
        return ScanRange()

    validate_options(options)

    if options.prefix is not None:
        lower, upper = prefix_range(_encode_prefix(options.prefix, key_codec))
    else:
        lower = _lower_bound(options, key_codec)
        upper = _upper_bound(options, key_codec)

    return ScanRange(
        lower=lower,
        upper=upper,
        reverse=bool(options.reverse),
        limit=options.limit,
    )


def _is_empty(value: Any) -> bool:
    return isinstance(value, (str, bytes, bytearray, memoryview)) and len(value) == 0


def _encode_prefix(prefix: Any, key_codec: KeyCodec[Any]) -> bytes:
    # An empty prefix is legal here even though empty keys are not.
    if _is_empty(prefix):
        return b""
    return key_codec.encode(prefix)


def _encode_bound(value: Any, key_codec: KeyCodec[Any]) -> bytes | None:
    # Empty bounds are ignored, as levelup does.
    if value is None or _is_empty(value):
        return None
    return key_codec.encode(value)


def _lower_bound(options: RangeOptions[Any], key_codec: KeyCodec[Any]) -> Bound:
    gt = _encode_bound(options.gt, key_codec)
    if gt is not None:
        return Bound.exclusive(gt)
    gte = _encode_bound(options.gte, key_codec)
    if gte is not None:
        return Bound.inclusive(gte)
    return Bound.unbounded()


def _upper_bound(options: RangeOptions[Any], key_codec: KeyCodec[Any]) -> Bound:
    lt = _encode_bound(options.lt, key_codec)
    if lt is not None:
        return Bound.exclusive(lt)
    lte = _encode_bound(options.lte, key_codec)
    if lte is not None:
        return Bound.inclusive(lte)
    return Bound.unbounded()
