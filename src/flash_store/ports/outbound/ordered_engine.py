"""Ordered engine port for persistent byte-keyed storage.

This outbound port defines the contract the store expects from an on-disk
ordered key-value engine. The engine is assumed to provide:
- Durable point writes
- Byte-lexicographic key ordering
- Cursor-based range scans

All methods are blocking. The application layer runs them in a worker
thread so the event loop never waits on disk.
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import Callable, Protocol

from flash_store.domain.value_objects import ScanRange


class EngineCursor(Protocol):
    """Stateful, single-pass walk over one ScanRange.

    A cursor is owned by exactly one traversal. It holds engine resources
    (for LMDB, a read transaction) until close() is called.

    Thread Safety:
        A cursor may be advanced from different worker threads, but never
        from two threads at the same time.
    """

    @abstractmethod
    def next(self) -> tuple[bytes, bytes] | None:
        """Advance and return the next (key, value) pair.

        Returns:
            The next pair, or None once the range is exhausted or the limit
            has been reached.

        Raises:
            EngineError: If the engine fails while reading.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the cursor's engine resources.

        Idempotent. Calling next() after close() raises EngineError.
        """
        ...

    @property
    @abstractmethod
    def closed(self) -> bool:
        """Whether close() has run."""
        ...


class OrderedEngine(Protocol):
    """Protocol for an ordered key-value engine bound to one directory.

    Thread Safety:
        Point operations may be called concurrently from several threads.
        The engine serializes writes internally.
    """

    @property
    @abstractmethod
    def path(self) -> Path:
        """The directory holding the engine's files."""
        ...

    @abstractmethod
    def open(self) -> None:
        """Open the engine against its directory.

        The directory must exist.

        Raises:
            EngineError: If the engine cannot be opened.
        """
        ...

    @abstractmethod
    def get(self, key: bytes) -> bytes:
        """Read the value stored under a key.

        Raises:
            NotFoundError: If the key has no entry.
            EngineError: If the read fails.
        """
        ...

    @abstractmethod
    def put(self, key: bytes, value: bytes) -> None:
        """Write a value under a key; returns once the write is committed.

        Raises:
            EngineError: If the write fails.
        """
        ...

    @abstractmethod
    def delete(self, key: bytes) -> None:
        """Delete a key. Deleting an absent key is not an error.

        Raises:
            EngineError: If the delete fails.
        """
        ...

    @abstractmethod
    def cursor(self, scan_range: ScanRange) -> EngineCursor:
        """Open a new cursor positioned before the first entry of a range.

        Raises:
            EngineError: If the cursor cannot be opened.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Flush and close the engine, invalidating any open cursors.

        Raises:
            EngineError: If flushing or closing fails.
        """
        ...

    @property
    @abstractmethod
    def open_cursors(self) -> int:
        """Number of cursors opened and not yet closed."""
        ...


EngineFactory = Callable[[Path], OrderedEngine]
"""Builds an unopened engine for a working directory."""
