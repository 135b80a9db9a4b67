"""Lifecycle of the engine handle bound to a working directory.

State machine:

    PENDING ──open()──> OPEN ──close()──> CLOSED
       │                  │
       │                  └──destroy()──> CLOSED (directory removed)
       └──destroy()/close()─────────────> CLOSED

PENDING and CLOSED are both "not open". A data operation on a PENDING handle
opens the engine first; on a CLOSED handle it fails fast with
StoreClosedError.

destroy() closes the engine (flush + close) and only then deletes the
working directory tree. A second destroy() raises StoreClosedError.
close() keeps the directory and is idempotent.

Calling destroy() while other operations are still in flight is not
supported: those operations may fail with EngineError or StoreClosedError.
"""

from __future__ import annotations

import asyncio
import shutil
from enum import Enum, auto
from pathlib import Path

from flash_store.application.worker import run_blocking
from flash_store.domain.errors import StoreClosedError
from flash_store.infrastructure.logging import get_logger
from flash_store.ports.outbound.ordered_engine import EngineFactory, OrderedEngine


class HandleState(Enum):
    """Store handle lifecycle states."""

    PENDING = auto()
    """Constructed; the engine has not been opened yet."""

    OPEN = auto()
    """The engine is open and serving operations."""

    CLOSED = auto()
    """The engine has been closed; no further operations are accepted."""


class StoreHandle:
    """Owns the engine for one working directory.

    The engine is exclusively owned by the handle: nothing else opens or
    closes it.
    """

    def __init__(self, workdir: str | Path, engine_factory: EngineFactory) -> None:
        """Initialize the handle without touching the filesystem.

        Args:
            workdir: Working directory for the engine's files.
            engine_factory: Builds an unopened engine for the directory.
        """
        self._workdir = Path(workdir)
        self._engine_factory = engine_factory
        self._engine: OrderedEngine | None = None
        self._opening: asyncio.Future | None = None
        self._state = HandleState.PENDING
        self._destroyed = False
        self._lock = asyncio.Lock()
        self._logger = get_logger(__name__, workdir=str(self._workdir))

    @property
    def workdir(self) -> Path:
        return self._workdir

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is HandleState.OPEN

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    @property
    def open_cursors(self) -> int:
        """Cursors currently open against the engine (0 when not open)."""
        if self._engine is None:
            return 0
        return self._engine.open_cursors

    async def open(self) -> OrderedEngine:
        """Create the working directory if needed and open the engine.

        Concurrent callers share a single opening. If every caller is
        cancelled, the opening still completes and the engine is kept.

        Returns:
            The open engine. Calling open() on an OPEN handle returns the
            same engine.

        Raises:
            StoreClosedError: If the handle is CLOSED.
            EngineError: If the engine cannot be opened; the handle stays
                PENDING.
            OSError: If the directory cannot be created.
        """
        if self._state is HandleState.CLOSED:
            raise StoreClosedError(f"Store at {self._workdir} is closed")
        if self._engine is not None:
            return self._engine

        # One opening per handle: LMDB forbids opening a directory twice per process.
        if self._opening is None:
            loop = asyncio.get_running_loop()
            self._opening = loop.run_in_executor(None, self._open_engine)
            self._opening.add_done_callback(self._adopt_engine)
        return await asyncio.shield(self._opening)

    async def engine(self) -> OrderedEngine:
        """Return the open engine, opening a PENDING handle first.

        Raises:
            StoreClosedError: If the handle is CLOSED.
        """
        if self._state is HandleState.CLOSED:
            raise StoreClosedError(f"Store at {self._workdir} is closed")
        if self._engine is not None:
            return self._engine
        return await self.open()

    def ensure_not_closed(self) -> None:
        """Fail fast if the handle can no longer serve operations.

        Raises:
            StoreClosedError: If the handle is CLOSED.
        """
        if self._state is HandleState.CLOSED:
            raise StoreClosedError(f"Store at {self._workdir} is closed")

    async def close(self) -> None:
        """Close the engine and keep the working directory. Idempotent."""
        async with self._lock:
            if self._state is HandleState.CLOSED:
                return

            await self._wait_for_opening()
            engine, self._engine = self._engine, None
            self._state = HandleState.CLOSED
            if engine is not None:
                await run_blocking(engine.close)
            self._logger.info("store_closed")

    async def destroy(self) -> None:
        """Close the engine, then delete the working directory tree.

        Raises:
            StoreClosedError: If the handle was already destroyed.
            EngineError: If closing the engine fails; the directory is
                left in place.
            OSError: If the directory cannot be removed.
        """
        async with self._lock:
            if self._destroyed:
                raise StoreClosedError(f"Store at {self._workdir} already destroyed")

            await self._wait_for_opening()
            engine, self._engine = self._engine, None
            self._state = HandleState.CLOSED
            if engine is not None:
                await run_blocking(engine.close)

            await run_blocking(self._remove_workdir)
            self._destroyed = True
            self._logger.info("store_destroyed")

    def _open_engine(self) -> OrderedEngine:
        self._workdir.mkdir(parents=True, exist_ok=True)
        engine = self._engine_factory(self._workdir)
        engine.open()
        return engine

    def _adopt_engine(self, future: asyncio.Future) -> None:
        self._opening = None
        if future.cancelled() or future.exception() is not None:
            return
        self._engine = future.result()
        self._state = HandleState.OPEN
        self._logger.info("store_opened")

    async def _wait_for_opening(self) -> None:
        if self._opening is not None:
            await asyncio.wait([self._opening])

    def _remove_workdir(self) -> None:
        if self._workdir.exists():
            shutil.rmtree(self._workdir)

    def __repr__(self) -> str:
        return f"StoreHandle({str(self._workdir)!r}, {self._state.name})"
