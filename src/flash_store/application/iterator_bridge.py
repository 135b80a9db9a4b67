"""Async iteration over engine cursors.

EntryStream turns a blocking, pull-style EngineCursor into a lazy async
iterator:

    async for key, value in store.items(prefix="user:"):
        ...

Each pull advances the cursor once in a worker thread. The cursor is opened
on the first pull and released on every exit path:

    - normal exhaustion (the cursor returns None)
    - an error raised while reading or decoding
    - aclose(), or leaving an `async with stream:` block
    - the stream object being garbage-collected after an early `break`

Streams are single-pass. Once released they stay exhausted; call the store
method again for a fresh cursor.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Any, Awaitable, Callable, Generic, TypeVar

from flash_store.application.worker import run_blocking
from flash_store.infrastructure.metrics import MetricsRegistry
from flash_store.ports.outbound.codec import KeyCodec, ValueCodec
from flash_store.ports.outbound.ordered_engine import EngineCursor

T = TypeVar("T")


class Projection(Enum):
    """Which part of each entry a stream yields."""

    ITEMS = auto()
    """(key, value) tuples."""

    KEYS = auto()
    """Keys only. Values are not decoded."""

    VALUES = auto()
    """Values only."""


class EntryStream(Generic[T]):
    """Lazy, single-pass async iterator over one engine cursor.

    Attributes:
        projection: What each step yields.
    """

    def __init__(
        self,
        open_cursor: Callable[[], Awaitable[EngineCursor]],
        key_codec: KeyCodec[Any],
        value_codec: ValueCodec[Any],
        projection: Projection = Projection.ITEMS,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the stream without touching the engine.

        Args:
            open_cursor: Coroutine factory opening the cursor on first pull.
            key_codec: Decodes stored keys.
            value_codec: Decodes stored values.
            projection: What each step yields.
            metrics: Optional metrics for cursor accounting.
        """
        self._open_cursor = open_cursor
        self._key_codec = key_codec
        self._value_codec = value_codec
        self._metrics = metrics
        self.projection = projection
        self._cursor: EngineCursor | None = None
        self._done = False

    @property
    def exhausted(self) -> bool:
        """Whether the stream has finished and released its cursor."""
        return self._done

    @property
    def cursor_open(self) -> bool:
        """Whether the stream currently holds an open engine cursor."""
        return self._cursor is not None

    def __aiter__(self) -> EntryStream[T]:
        return self

    async def __anext__(self) -> T:
        if self._done:
            raise StopAsyncIteration

        if self._cursor is None:
            await self._acquire()

        assert self._cursor is not None
        try:
            pair = await run_blocking(self._cursor.next)
            if pair is None:
                raise StopAsyncIteration
            item = self._project(pair)
        except BaseException:
            self._release()
            raise

        if self._metrics is not None:
            self._metrics.entries_scanned_total.inc()
        return item

    async def aclose(self) -> None:
        """Release the cursor now. Safe to call more than once."""
        self._release()

    async def to_list(self) -> list[T]:
        """Drain the stream into a list."""
        async with self:
            return [item async for item in self]

    async def __aenter__(self) -> EntryStream[T]:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self._release()

    def __del__(self) -> None:
        # Early `break` drops the last reference without calling aclose().
        if not getattr(self, "_done", True):
            self._release()

    async def _acquire(self) -> None:
        try:
            self._cursor = await self._open_cursor()
        except BaseException:
            self._done = True
            raise

        if self._metrics is not None:
            self._metrics.cursors_opened_total.inc()
            self._metrics.open_cursors.inc()

    def _release(self) -> None:
        if self._done:
            return
        self._done = True

        cursor, self._cursor = self._cursor, None
        if cursor is None:
            return

        if self._metrics is not None:
            self._metrics.open_cursors.dec()
        cursor.close()

    def _project(self, pair: tuple[bytes, bytes]) -> Any:
        raw_key, raw_value = pair
        if self.projection is Projection.KEYS:
            return self._key_codec.decode(raw_key)
        if self.projection is Projection.VALUES:
            return self._value_codec.decode(raw_value)
        return self._key_codec.decode(raw_key), self._value_codec.decode(raw_value)

    def __repr__(self) -> str:
        if self._done:
            state = "exhausted"
        elif self._cursor is not None:
            state = "open"
        else:
            state = "pending"
        return f"EntryStream({self.projection.name}, {state})"
