"""Unit tests for StoreHandle."""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from flash_store.adapters.outbound.lmdb_engine import LmdbEngine
from flash_store.application.store_lifecycle import HandleState, StoreHandle
from flash_store.application.worker import run_blocking
from flash_store.domain.errors import EngineError, StoreClosedError


def lmdb_factory(path: Path) -> LmdbEngine:
    return LmdbEngine(path, map_size=16 * 1024 * 1024, sync=False)


class RecordingEngine:
    """Engine double recording lifecycle calls into a shared journal."""

    def __init__(self, path: Path, journal: list[str]) -> None:
        self.path = path
        self.open_cursors = 0
        self._journal = journal

    def open(self) -> None:
        self._journal.append(f"open:{self.path.exists()}")

    def close(self) -> None:
        self._journal.append(f"close:{self.path.exists()}")


class GatedEngine:
    """Engine double whose open() blocks until the gate is set."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.open_cursors = 0
        self.entered = threading.Event()
        self.gate = threading.Event()
        self.open_calls = 0
        self.closed = False

    def open(self) -> None:
        self.entered.set()
        self.gate.wait(5)
        self.open_calls += 1

    def close(self) -> None:
        self.closed = True


def gated_factory(engines: list[GatedEngine]):
    """Engine factory that records every engine it builds."""

    def factory(path: Path) -> GatedEngine:
        engine = GatedEngine(path)
        engines.append(engine)
        return engine

    return factory


async def start_gated_open(handle: StoreHandle, engines: list[GatedEngine]) -> asyncio.Task:
    """Start open() and wait until the worker thread is inside engine.open()."""
    task = asyncio.ensure_future(handle.open())
    while not engines:
        await asyncio.sleep(0.01)
    await run_blocking(engines[0].entered.wait, 5)
    return task


class TestStoreHandle:
    """Tests for the store handle state machine."""

    def test_construction_is_lazy(self, workdir: Path) -> None:
        """Constructing a handle touches neither disk nor engine."""
        factory = MagicMock()
        handle = StoreHandle(workdir, factory)

        assert handle.state is HandleState.PENDING
        assert not handle.is_open
        assert not workdir.exists()
        factory.assert_not_called()

    async def test_open_creates_directory(self, workdir: Path) -> None:
        handle = StoreHandle(workdir, lmdb_factory)

        engine = await handle.open()

        assert handle.state is HandleState.OPEN
        assert workdir.is_dir()
        assert engine.path == workdir
        await handle.close()

    async def test_open_twice_returns_same_engine(self, workdir: Path) -> None:
        handle = StoreHandle(workdir, lmdb_factory)

        first = await handle.open()
        second = await handle.open()

        assert first is second
        await handle.close()

    async def test_concurrent_first_use_opens_once(self, workdir: Path) -> None:
        """Racing first operations share a single engine."""
        factory = MagicMock(side_effect=lmdb_factory)
        handle = StoreHandle(workdir, factory)

        engines = await asyncio.gather(*(handle.engine() for _ in range(10)))

        assert factory.call_count == 1
        assert all(engine is engines[0] for engine in engines)
        await handle.close()

    async def test_failed_open_stays_pending(self, workdir: Path) -> None:
        engine = MagicMock()
        engine.open.side_effect = EngineError("Cannot open", operation="open")
        handle = StoreHandle(workdir, lambda path: engine)

        with pytest.raises(EngineError):
            await handle.open()

        assert handle.state is HandleState.PENDING

    async def test_close_keeps_directory(self, workdir: Path) -> None:
        handle = StoreHandle(workdir, lmdb_factory)
        await handle.open()

        await handle.close()
        await handle.close()

        assert handle.state is HandleState.CLOSED
        assert workdir.is_dir()

    async def test_operations_after_close_fail_fast(self, workdir: Path) -> None:
        handle = StoreHandle(workdir, lmdb_factory)
        await handle.open()
        await handle.close()

        with pytest.raises(StoreClosedError):
            await handle.engine()
        with pytest.raises(StoreClosedError):
            await handle.open()
        with pytest.raises(StoreClosedError):
            handle.ensure_not_closed()

    async def test_destroy_closes_engine_before_deleting(self, workdir: Path) -> None:
        """The engine is closed while its files still exist."""
        journal: list[str] = []
        handle = StoreHandle(workdir, lambda path: RecordingEngine(path, journal))
        await handle.open()

        await handle.destroy()

        assert journal == ["open:True", "close:True"]
        assert not workdir.exists()
        assert handle.is_destroyed
        assert handle.state is HandleState.CLOSED

    async def test_destroy_twice_raises(self, workdir: Path) -> None:
        handle = StoreHandle(workdir, lmdb_factory)
        await handle.open()
        await handle.destroy()

        with pytest.raises(StoreClosedError, match="already destroyed"):
            await handle.destroy()

    async def test_destroy_pending_handle(self, workdir: Path) -> None:
        """Destroying a never-opened handle removes a leftover directory."""
        workdir.mkdir()
        (workdir / "leftover").write_text("x")
        factory = MagicMock()
        handle = StoreHandle(workdir, factory)

        await handle.destroy()

        assert not workdir.exists()
        factory.assert_not_called()

    async def test_destroy_after_close(self, workdir: Path) -> None:
        handle = StoreHandle(workdir, lmdb_factory)
        await handle.open()
        await handle.close()

        await handle.destroy()

        assert not workdir.exists()

    async def test_destroy_propagates_close_failure(self, workdir: Path) -> None:
        """A failing engine close leaves the directory in place."""
        engine = MagicMock()
        engine.close.side_effect = EngineError("Close failed", operation="close")
        handle = StoreHandle(workdir, lambda path: engine)
        await handle.open()

        with pytest.raises(EngineError, match="Close failed"):
            await handle.destroy()

        assert workdir.exists()
        assert not handle.is_destroyed

    async def test_cancelled_open_keeps_engine(self, workdir: Path) -> None:
        """An opening whose caller was cancelled is adopted, not repeated."""
        engines: list[GatedEngine] = []
        handle = StoreHandle(workdir, gated_factory(engines))
        task = await start_gated_open(handle, engines)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        engines[0].gate.set()

        engine = await handle.engine()

        assert engine is engines[0]
        assert len(engines) == 1
        assert engines[0].open_calls == 1
        assert handle.state is HandleState.OPEN
        await handle.close()
        assert engines[0].closed

    async def test_close_waits_for_cancelled_open(self, workdir: Path) -> None:
        """close() closes an engine whose opening was still running."""
        engines: list[GatedEngine] = []
        handle = StoreHandle(workdir, gated_factory(engines))
        task = await start_gated_open(handle, engines)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        closing = asyncio.ensure_future(handle.close())
        await asyncio.sleep(0.05)
        assert not closing.done()

        engines[0].gate.set()
        await closing

        assert engines[0].closed
        assert handle.state is HandleState.CLOSED
