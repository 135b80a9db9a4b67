"""Infrastructure layer - cross-cutting concerns."""

from flash_store.infrastructure.config import Config, get_config
from flash_store.infrastructure.logging import setup_logging, get_logger
from flash_store.infrastructure.metrics import setup_metrics, MetricsRegistry
from flash_store.infrastructure.tracing import setup_tracing, get_tracer

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
]
