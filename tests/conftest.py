"""Pytest configuration and fixtures for flash_store tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any, AsyncGenerator, Generator

import pytest
import pytest_asyncio
from prometheus_client import CollectorRegistry

from flash_store.application import FlashStore
from flash_store.infrastructure.config import Config, StorageConfig
from flash_store.infrastructure.metrics import MetricsRegistry


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def workdir(temp_dir: Path) -> Path:
    """Provide a store working directory that does not exist yet."""
    return temp_dir / "flash-store.workdir"


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration with a temporary working directory."""
    return Config(
        storage=StorageConfig(
            workdir=temp_dir / "default.workdir",
            map_size=16 * 1024 * 1024,  # 16MB for tests
            sync=False,  # Faster for tests
        ),
    )


@pytest.fixture
def collector_registry() -> CollectorRegistry:
    """Provide an isolated Prometheus registry."""
    return CollectorRegistry(auto_describe=True)


@pytest.fixture
def metrics_registry(collector_registry: CollectorRegistry) -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    return MetricsRegistry(registry=collector_registry)


@pytest_asyncio.fixture
async def store(
    workdir: Path, test_config: Config, metrics_registry: MetricsRegistry
) -> AsyncGenerator[FlashStore[str, Any], None]:
    """Provide a FlashStore with str keys and JSON values."""
    flash_store: FlashStore[str, Any] = FlashStore(
        workdir, config=test_config, metrics=metrics_registry
    )
    yield flash_store
    await flash_store.close()


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
