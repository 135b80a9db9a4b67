"""Inbound adapters - entry points into the store.

Exports:
    - create_app: FastAPI application exposing a FlashStore over HTTP
    - run_server: Serve the application with uvicorn
"""

from flash_store.adapters.inbound.rest_api import create_app, run_server

__all__ = [
    "create_app",
    "run_server",
]
