"""Range types for bounded key scans.

RangeOptions is what callers pass to keys()/values()/items(). It speaks in
terms of typed keys and loosely mirrors the gt/gte/lt/lte/reverse/limit/prefix
option bag of ordered key-value stores.

ScanRange is what the engine consumes: one tagged Bound per side, already
encoded to bytes, plus the reverse flag and the item limit. RangeOptions is
turned into a ScanRange by domain.services.range_query.normalize_range().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Generic, TypeVar

K = TypeVar("K")


class BoundKind(Enum):
    """How one side of a key range is constrained."""

    UNBOUNDED = auto()
    """No constraint on this side."""

    INCLUSIVE = auto()
    """Keys equal to the bound value are part of the range."""

    EXCLUSIVE = auto()
    """Keys equal to the bound value are not part of the range."""


@dataclass(frozen=True, slots=True)
class Bound:
    """One side of a key range over encoded keys.

    Use the constructors instead of building instances by hand:

        >>> Bound.inclusive(b"a")
        Bound(INCLUSIVE, b'a')
        >>> Bound.unbounded().is_unbounded
        True
    """

    kind: BoundKind
    value: bytes | None = None

    def __post_init__(self) -> None:
        """Validate that value is present exactly when the side is bounded."""
        if self.kind is BoundKind.UNBOUNDED:
            if self.value is not None:
                raise ValueError("Unbounded side cannot carry a value")
        elif self.value is None:
            raise ValueError(f"{self.kind.name} bound requires a value")

    @classmethod
    def unbounded(cls) -> Bound:
        return cls(BoundKind.UNBOUNDED)

    @classmethod
    def inclusive(cls, value: bytes) -> Bound:
        return cls(BoundKind.INCLUSIVE, bytes(value))

    @classmethod
    def exclusive(cls, value: bytes) -> Bound:
        return cls(BoundKind.EXCLUSIVE, bytes(value))

    @property
    def is_unbounded(self) -> bool:
        return self.kind is BoundKind.UNBOUNDED

    @property
    def is_inclusive(self) -> bool:
        return self.kind is BoundKind.INCLUSIVE

    def admits_above(self, key: bytes) -> bool:
        """Check a key against this bound used as a lower bound."""
        if self.kind is BoundKind.UNBOUNDED:
            return True
        assert self.value is not None
        if self.kind is BoundKind.INCLUSIVE:
            return key >= self.value
        return key > self.value

    def admits_below(self, key: bytes) -> bool:
        """Check a key against this bound used as an upper bound."""
        if self.kind is BoundKind.UNBOUNDED:
            return True
        assert self.value is not None
        if self.kind is BoundKind.INCLUSIVE:
            return key <= self.value
        return key < self.value

    def __repr__(self) -> str:
        if self.kind is BoundKind.UNBOUNDED:
            return "Bound(UNBOUNDED)"
        return f"Bound({self.kind.name}, {self.value!r})"


@dataclass(frozen=True, slots=True)
class ScanRange:
    """Engine-native description of one traversal.

    Attributes:
        lower: Lower bound on encoded keys.
        upper: Upper bound on encoded keys.
        reverse: Walk from the upper end down to the lower end.
        limit: Maximum number of entries to produce, None for no limit.
    """

    lower: Bound = field(default_factory=Bound.unbounded)
    upper: Bound = field(default_factory=Bound.unbounded)
    reverse: bool = False
    limit: int | None = None

    def contains(self, key: bytes) -> bool:
        """Check whether an encoded key falls inside both bounds."""
        return self.lower.admits_above(key) and self.upper.admits_below(key)


FULL_SCAN = ScanRange()
"""Unbounded forward scan over every entry."""


@dataclass(frozen=True, slots=True)
class RangeOptions(Generic[K]):
    """Caller-facing range options.

    Attributes:
        gt: Keys strictly greater than this.
        gte: Keys greater than or equal to this.
        lt: Keys strictly less than this.
        lte: Keys less than or equal to this.
        reverse: Produce keys in descending order.
        limit: Produce at most this many entries.
        prefix: Keys starting with this. Cannot be combined with gt/gte/lt/lte.

    Example:
        >>> RangeOptions(prefix="user:", limit=10)
    """

    gt: K | None = None
    gte: K | None = None
    lt: K | None = None
    lte: K | None = None
    reverse: bool = False
    limit: int | None = None
    prefix: K | None = None

    @property
    def has_explicit_bounds(self) -> bool:
        return any(
            bound is not None for bound in (self.gt, self.gte, self.lt, self.lte)
        )
