"""FlashStore - typed async facade over an ordered key-value engine.

Usage:
    from flash_store import FlashStore

    async with FlashStore("/tmp/users.workdir") as store:
        await store.put("user:1", {"name": "Alice"})
        print(await store.get("user:1"))

        async for key in store.keys(prefix="user:"):
            print(key)

        print(await store.count())

    # Remove the store and its files
    await FlashStore("/tmp/users.workdir").destroy()

Keys are str by default (Utf8KeyCodec) and values are JSON by default
(JsonValueCodec). Both codecs can be swapped per store.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Generic, TypeVar

from flash_store.adapters.outbound.key_codecs import Utf8KeyCodec
from flash_store.adapters.outbound.lmdb_engine import LmdbEngine
from flash_store.adapters.outbound.value_codecs import get_value_codec
from flash_store.application.iterator_bridge import EntryStream, Projection
from flash_store.application.store_lifecycle import HandleState, StoreHandle
from flash_store.application.worker import run_blocking, run_blocking_owned
from flash_store.domain.errors import NotFoundError, ValidationError
from flash_store.domain.services.range_query import normalize_range
from flash_store.domain.value_objects import RangeOptions, ScanRange
from flash_store.infrastructure.config import Config, StorageConfig, get_config
from flash_store.infrastructure.logging import get_logger
from flash_store.infrastructure.metrics import MetricsRegistry, get_metrics
from flash_store.infrastructure.tracing import trace_span
from flash_store.ports.outbound.codec import KeyCodec, ValueCodec
from flash_store.ports.outbound.ordered_engine import EngineCursor, EngineFactory

K = TypeVar("K")
V = TypeVar("V")


def lmdb_engine_factory(storage: StorageConfig) -> EngineFactory:
    """Build an EngineFactory producing LMDB engines from storage settings."""

    def factory(path: Path) -> LmdbEngine:
        return LmdbEngine(
            path,
            map_size=storage.map_size,
            sync=storage.sync,
            max_readers=storage.max_readers,
        )

    return factory


class FlashStore(Generic[K, V]):
    """Key-value store with CRUD, range scans and directory lifecycle.

    The store is bound to one working directory. The directory and the
    engine are created on open(), or on the first operation if open() was
    never called.

    Concurrency:
        Point operations (put/get/delete) may run concurrently. Each
        traversal uses its own cursor. A traversal may or may not observe
        writes made while it is running; no isolation is promised.

    Limits:
        With the default LMDB engine an encoded key may be at most 511
        bytes; put() raises EngineError for longer keys.
    """

    def __init__(
        self,
        workdir: str | Path | None = None,
        *,
        value_codec: ValueCodec[V] | None = None,
        key_codec: KeyCodec[K] | None = None,
        engine_factory: EngineFactory | None = None,
        metrics: MetricsRegistry | None = None,
        config: Config | None = None,
    ) -> None:
        """Initialize the store without touching the filesystem.

        Args:
            workdir: Working directory. Defaults to storage.workdir from config.
            value_codec: Value encoding. Defaults to codec.value_format from config.
            key_codec: Key encoding. Defaults to UTF-8 str keys.
            engine_factory: Builds the engine. Defaults to LMDB.
            metrics: Metrics registry. Defaults to the global one.
            config: Configuration. Defaults to get_config().
        """
        config = config or get_config()
        path = Path(workdir) if workdir is not None else config.storage.workdir

        self._handle = StoreHandle(path, engine_factory or lmdb_engine_factory(config.storage))
        self._value_codec: ValueCodec[Any] = value_codec or get_value_codec(
            config.codec.value_format
        )
        self._key_codec: KeyCodec[Any] = key_codec or Utf8KeyCodec()
        self._metrics = metrics or get_metrics()
        self._logger = get_logger(__name__, workdir=str(path))

    @property
    def workdir(self) -> Path:
        """The working directory holding the engine's files."""
        return self._handle.workdir

    @property
    def is_open(self) -> bool:
        return self._handle.is_open

    @property
    def state(self) -> HandleState:
        return self._handle.state

    @property
    def open_cursors(self) -> int:
        """Engine cursors currently held by unfinished traversals."""
        return self._handle.open_cursors

    async def open(self) -> FlashStore[K, V]:
        """Create the working directory if needed and open the engine.

        Returns:
            The store itself.

        Raises:
            StoreClosedError: If the store was closed or destroyed.
            EngineError: If the engine cannot be opened.
        """
        await self._handle.open()
        return self

    async def put(self, key: K, value: V) -> None:
        """Store a value under a key, replacing any previous value.

        Resolves once the engine has committed the write.

        Raises:
            CodecError: If the key or value cannot be encoded.
            EngineError: If the write fails.
        """
        self._logger.debug("store_put", key=key)
        with self._metrics.track("put"), trace_span("flash_store.put", {"key": str(key)}):
            raw_key = self._key_codec.encode(key)
            raw_value = self._value_codec.encode(value)
            engine = await self._handle.engine()
            await run_blocking(engine.put, raw_key, raw_value)

    async def get(self, key: K) -> V | None:
        """Read the value stored under a key.

        Returns:
            The decoded value, or None if the key has no entry.

        Raises:
            CodecError: If the stored bytes cannot be decoded.
            EngineError: If the read fails.
        """
        self._logger.debug("store_get", key=key)
        with self._metrics.track("get"), trace_span("flash_store.get", {"key": str(key)}):
            raw_key = self._key_codec.encode(key)
            engine = await self._handle.engine()
            try:
                data = await run_blocking(engine.get, raw_key)
            except NotFoundError:
                self._metrics.get_misses_total.inc()
                return None
            return self._value_codec.decode(data)

    async def delete(self, key: K) -> None:
        """Delete a key. Deleting an absent key succeeds.

        Raises:
            EngineError: If the delete fails.
        """
        self._logger.debug("store_delete", key=key)
        with self._metrics.track("delete"), trace_span("flash_store.delete", {"key": str(key)}):
            raw_key = self._key_codec.encode(key)
            engine = await self._handle.engine()
            await run_blocking(engine.delete, raw_key)

    def keys(self, options: RangeOptions[K] | None = None, /, **fields: Any) -> EntryStream[K]:
        """Stream keys in byte order, honoring range options.

        Options are given either as a RangeOptions or as keyword fields:

            store.keys(RangeOptions(prefix="a"))
            store.keys(prefix="a", limit=10)

        Raises:
            ValidationError: Immediately, for invalid option combinations.
        """
        self._logger.debug("store_keys")
        return self._stream(Projection.KEYS, options, fields)

    def values(self, options: RangeOptions[K] | None = None, /, **fields: Any) -> EntryStream[V]:
        """Stream values in key order, honoring range options.

        Raises:
            ValidationError: Immediately, for invalid option combinations.
        """
        self._logger.debug("store_values")
        return self._stream(Projection.VALUES, options, fields)

    def items(
        self, options: RangeOptions[K] | None = None, /, **fields: Any
    ) -> EntryStream[tuple[K, V]]:
        """Stream (key, value) pairs in key order, honoring range options.

        Raises:
            ValidationError: Immediately, for invalid option combinations.
        """
        self._logger.debug("store_items")
        return self._stream(Projection.ITEMS, options, fields)

    async def count(self) -> int:
        """Count all entries with a full scan.

        Cost is proportional to the number of stored entries.
        """
        self._logger.debug("store_count")
        with self._metrics.track("count"), trace_span("flash_store.count"):
            total = 0
            async with self.keys() as stream:
                async for _ in stream:
                    total += 1
            return total

    def __aiter__(self) -> EntryStream[tuple[K, V]]:
        """Iterate over every (key, value) pair in forward key order."""
        return self.items()

    async def close(self) -> None:
        """Close the engine and keep the data on disk. Idempotent."""
        await self._handle.close()

    async def destroy(self) -> None:
        """Close the engine and delete the working directory.

        The directory is gone once this coroutine returns.

        Raises:
            StoreClosedError: If the store was already destroyed.
            EngineError: If closing the engine fails.
            OSError: If the directory cannot be removed.
        """
        self._logger.debug("store_destroy")
        with self._metrics.track("destroy"), trace_span("flash_store.destroy"):
            await self._handle.destroy()

    async def __aenter__(self) -> FlashStore[K, V]:
        return await self.open()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _stream(
        self,
        projection: Projection,
        options: RangeOptions[K] | None,
        fields: dict[str, Any],
    ) -> EntryStream[Any]:
        self._handle.ensure_not_closed()
        scan_range = normalize_range(self._resolve_options(options, fields), self._key_codec)

        async def open_cursor() -> EngineCursor:
            return await self._open_cursor(scan_range)

        return EntryStream(
            open_cursor,
            self._key_codec,
            self._value_codec,
            projection=projection,
            metrics=self._metrics,
        )

    async def _open_cursor(self, scan_range: ScanRange) -> EngineCursor:
        engine = await self._handle.engine()
        return await run_blocking_owned(
            engine.cursor, scan_range, release=lambda cursor: cursor.close()
        )

    @staticmethod
    def _resolve_options(
        options: RangeOptions[K] | None, fields: dict[str, Any]
    ) -> RangeOptions[K] | None:
        if not fields:
            return options
        if options is not None:
            raise ValidationError("Pass range options either as RangeOptions or as keywords, not both")
        try:
            return RangeOptions(**fields)
        except TypeError as e:
            raise ValidationError(f"Invalid range option: {e}") from e

    def __repr__(self) -> str:
        return f"FlashStore({str(self.workdir)!r}, {self.state.name})"
