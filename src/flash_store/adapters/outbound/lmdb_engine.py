"""LMDB-backed ordered engine.

This adapter implements the OrderedEngine protocol on top of an LMDB
environment stored in a single directory. LMDB keeps keys in byte order and
commits every write transaction durably (unless sync is disabled), which is
all the store needs.

Key size:
    LMDB caps keys at max_key_size bytes (511 in a stock build). Longer keys
    are rejected by put() with EngineError; LevelDB had no such limit.

Cursors:
    Each cursor owns a read-only transaction. LMDB read transactions see the
    snapshot taken when they began, so a traversal does not observe writes
    committed after its cursor opened. Every open cursor holds one reader
    slot; opening more than max_readers at once fails with EngineError.

Thread Safety:
    The py-lmdb binding opens environments without thread-local reader
    slots, so a read transaction may be advanced from any worker thread as
    long as only one thread touches it at a time. Each cursor serializes
    its own calls with a lock.
"""

from __future__ import annotations

import threading
from pathlib import Path

import lmdb

from flash_store.domain.errors import EngineError, NotFoundError
from flash_store.domain.value_objects import ScanRange

DEFAULT_MAP_SIZE = 1024 * 1024 * 1024  # 1GB
DEFAULT_MAX_READERS = 126


class LmdbCursor:
    """EngineCursor walking one ScanRange inside a read transaction."""

    def __init__(self, engine: LmdbEngine, txn: lmdb.Transaction, scan_range: ScanRange) -> None:
        self._engine = engine
        self._txn = txn
        self._cursor = txn.cursor()
        self._range = scan_range
        self._lock = threading.Lock()
        self._positioned = False
        self._exhausted = False
        self._closed = False
        self._produced = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def scan_range(self) -> ScanRange:
        return self._range

    def next(self) -> tuple[bytes, bytes] | None:
        """Return the next pair in range, or None when done."""
        with self._lock:
            if self._closed:
                raise EngineError("Cursor is closed", operation="next")

            if self._exhausted:
                return None

            limit = self._range.limit
            if limit is not None and self._produced >= limit:
                self._exhausted = True
                return None

            try:
                found = self._step()
                if not found:
                    self._exhausted = True
                    return None

                key = self._cursor.key()
                if not self._within_far_bound(key):
                    self._exhausted = True
                    return None

                value = self._cursor.value()
            except lmdb.Error as e:
                raise EngineError(f"Cursor read failed: {e}", operation="next") from e

            self._produced += 1
            return key, value

    def close(self) -> None:
        """Abort the read transaction and release the reader slot."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            try:
                self._cursor.close()
                self._txn.abort()
            except lmdb.Error as e:
                raise EngineError(f"Cursor close failed: {e}", operation="close") from e
            finally:
                self._engine._forget_cursor(self)

    def _step(self) -> bool:
        if self._positioned:
            return self._cursor.prev() if self._range.reverse else self._cursor.next()

        self._positioned = True
        if self._range.reverse:
            return self._seek_last()
        return self._seek_first()

    def _seek_first(self) -> bool:
        """Position on the smallest key admitted by the lower bound."""
        lower = self._range.lower
        if lower.is_unbounded:
            return self._cursor.first()

        if not self._cursor.set_range(lower.value):
            return False

        if not lower.is_inclusive and self._cursor.key() == lower.value:
            return self._cursor.next()
        return True

    def _seek_last(self) -> bool:
        """Position on the largest key admitted by the upper bound."""
        upper = self._range.upper
        if upper.is_unbounded:
            return self._cursor.last()

        if not self._cursor.set_range(upper.value):
            # Every key is below the upper bound.
            return self._cursor.last()

        if upper.admits_below(self._cursor.key()):
            return True
        return self._cursor.prev()

    def _within_far_bound(self, key: bytes) -> bool:
        if self._range.reverse:
            return self._range.lower.admits_above(key)
        return self._range.upper.admits_below(key)


class LmdbEngine:
    """OrderedEngine implementation backed by an LMDB environment.

    Attributes:
        path: Directory holding data.mdb and lock.mdb.
    """

    def __init__(
        self,
        path: str | Path,
        map_size: int = DEFAULT_MAP_SIZE,
        sync: bool = True,
        max_readers: int = DEFAULT_MAX_READERS,
    ) -> None:
        """Initialize the engine without opening it.

        Args:
            path: Working directory for the environment.
            map_size: Maximum size the database may grow to, in bytes.
            sync: Flush to disk on every commit.
            max_readers: Maximum number of concurrently open cursors.
        """
        self._path = Path(path)
        self._map_size = map_size
        self._sync = sync
        self._max_readers = max_readers
        self._env: lmdb.Environment | None = None
        self._cursors: set[LmdbCursor] = set()
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._env is not None

    @property
    def open_cursors(self) -> int:
        with self._lock:
            return len(self._cursors)

    @property
    def max_key_size(self) -> int:
        """Longest key the environment accepts, in bytes (511 for stock LMDB)."""
        return self._require_env("max_key_size").max_key_size()

    def open(self) -> None:
        if self._env is not None:
            raise EngineError(f"Engine already open: {self._path}", operation="open")

        try:
            self._env = lmdb.open(
                str(self._path),
                map_size=self._map_size,
                subdir=True,
                create=False,
                sync=self._sync,
                max_readers=self._max_readers,
                max_dbs=0,
                lock=True,
            )
        except lmdb.Error as e:
            raise EngineError(f"Cannot open LMDB at {self._path}: {e}", operation="open") from e

    def get(self, key: bytes) -> bytes:
        env = self._require_env("get")
        try:
            with env.begin(write=False) as txn:
                value = txn.get(key)
        except lmdb.Error as e:
            raise EngineError(f"Read failed: {e}", operation="get") from e

        if value is None:
            raise NotFoundError(key)
        return value

    def put(self, key: bytes, value: bytes) -> None:
        env = self._require_env("put")
        try:
            with env.begin(write=True) as txn:
                txn.put(key, value)
        except lmdb.Error as e:
            raise EngineError(f"Write failed: {e}", operation="put") from e

    def delete(self, key: bytes) -> None:
        env = self._require_env("delete")
        try:
            with env.begin(write=True) as txn:
                txn.delete(key)
        except lmdb.Error as e:
            raise EngineError(f"Delete failed: {e}", operation="delete") from e

    def cursor(self, scan_range: ScanRange) -> LmdbCursor:
        env = self._require_env("cursor")
        try:
            txn = env.begin(write=False)
        except lmdb.Error as e:
            raise EngineError(f"Cannot begin read transaction: {e}", operation="cursor") from e

        try:
            cursor = LmdbCursor(self, txn, scan_range)
        except lmdb.Error as e:
            txn.abort()
            raise EngineError(f"Cannot open cursor: {e}", operation="cursor") from e

        with self._lock:
            self._cursors.add(cursor)
        return cursor

    def close(self) -> None:
        """Close open cursors, flush, and close the environment."""
        if self._env is None:
            return

        with self._lock:
            cursors = list(self._cursors)
        for cursor in cursors:
            cursor.close()

        env = self._env
        self._env = None
        try:
            env.sync(True)
            env.close()
        except lmdb.Error as e:
            raise EngineError(f"Close failed: {e}", operation="close") from e

    def _require_env(self, operation: str) -> lmdb.Environment:
        if self._env is None:
            raise EngineError(f"Engine is not open: {self._path}", operation=operation)
        return self._env

    def _forget_cursor(self, cursor: LmdbCursor) -> None:
        with self._lock:
            self._cursors.discard(cursor)

    def __repr__(self) -> str:
        state = "open" if self._env is not None else "closed"
        return f"LmdbEngine({str(self._path)!r}, {state})"
