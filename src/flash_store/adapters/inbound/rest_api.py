"""REST API adapter for the key-value store.

This module provides a FastAPI-based REST API over a FlashStore with
str keys.

Endpoints:
    GET /health - Health check
    GET /stats - Store statistics
    GET /count - Number of entries
    GET /keys - List keys (range options as query parameters)
    GET /values - List values (range options as query parameters)
    GET /keys/{key} - Read one value
    PUT /keys/{key} - Write one value
    DELETE /keys/{key} - Delete one key

Keys may contain "/" (`/keys/user:1/profile`). A stored JSON null cannot be
told apart from a missing key, so reading it answers 404.

Usage:
    from flash_store import FlashStore
    from flash_store.adapters.inbound.rest_api import create_app

    store = FlashStore("/path/to/workdir")
    app = create_app(store)
    # Run with uvicorn: uvicorn app:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query, Response
from pydantic import BaseModel, Field

from flash_store import __version__
from flash_store.application import FlashStore, HandleState
from flash_store.domain.errors import CodecError, StoreClosedError, ValidationError
from flash_store.domain.value_objects import RangeOptions


class ValueRequest(BaseModel):
    """Request model for writing a value."""

    value: Any = Field(..., description="Value to store")


class EntryResponse(BaseModel):
    """Response model for a single entry."""

    key: str = Field(..., description="The key")
    value: Any = Field(None, description="The stored value")


class KeysResponse(BaseModel):
    """Response model for key listings."""

    keys: list[str] = Field(default_factory=list, description="Keys in scan order")


class ValuesResponse(BaseModel):
    """Response model for value listings."""

    values: list[Any] = Field(default_factory=list, description="Values in scan order")


class CountResponse(BaseModel):
    """Response model for entry counts."""

    count: int = Field(..., description="Number of stored entries")


class StatsResponse(BaseModel):
    """Response model for store statistics."""

    workdir: str = Field(..., description="Working directory path")
    open: bool = Field(..., description="Whether the engine is open")
    state: str = Field(..., description="Handle state")
    open_cursors: int = Field(0, description="Cursors held by unfinished scans")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")


def range_options(
    gt: str | None = Query(None, description="Keys greater than"),
    gte: str | None = Query(None, description="Keys greater than or equal to"),
    lt: str | None = Query(None, description="Keys less than"),
    lte: str | None = Query(None, description="Keys less than or equal to"),
    reverse: bool = Query(False, description="Descending key order"),
    limit: int | None = Query(None, ge=0, description="Maximum number of entries"),
    prefix: str | None = Query(None, description="Keys starting with"),
) -> RangeOptions[str]:
    """Collect range options from query parameters."""
    return RangeOptions(
        gt=gt, gte=gte, lt=lt, lte=lte, reverse=reverse, limit=limit, prefix=prefix
    )


def create_app(store: FlashStore[str, Any]) -> FastAPI:
    """Create a FastAPI application for a store.

    Args:
        store: The store to expose.

    Returns:
        A configured FastAPI application.
    """
    app = FastAPI(
        title="Flash Store API",
        description="REST API for a typed key-value store",
        version=__version__,
    )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="unhealthy" if store.state is HandleState.CLOSED else "healthy",
            version=__version__,
        )

    @app.get("/stats", response_model=StatsResponse, tags=["Stats"])
    async def get_stats() -> StatsResponse:
        """Get store statistics."""
        return StatsResponse(
            workdir=str(store.workdir),
            open=store.is_open,
            state=store.state.name,
            open_cursors=store.open_cursors,
        )

    @app.get("/count", response_model=CountResponse, tags=["Stats"])
    async def count_entries() -> CountResponse:
        """Count all entries."""
        try:
            return CountResponse(count=await store.count())
        except StoreClosedError as e:
            raise HTTPException(status_code=503, detail=str(e))

    @app.get("/keys", response_model=KeysResponse, tags=["Scan"])
    async def list_keys(options: RangeOptions[str] = Depends(range_options)) -> KeysResponse:
        """List keys matching the range options."""
        try:
            keys = await store.keys(options).to_list()
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except StoreClosedError as e:
            raise HTTPException(status_code=503, detail=str(e))
        return KeysResponse(keys=keys)

    @app.get("/values", response_model=ValuesResponse, tags=["Scan"])
    async def list_values(options: RangeOptions[str] = Depends(range_options)) -> ValuesResponse:
        """List values matching the range options."""
        try:
            values = await store.values(options).to_list()
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except StoreClosedError as e:
            raise HTTPException(status_code=503, detail=str(e))
        return ValuesResponse(values=values)

    @app.get("/keys/{key:path}", response_model=EntryResponse, tags=["Entries"])
    async def get_entry(key: str) -> EntryResponse:
        """Read the value stored under a key.

        Answers 404 for a missing key and for a stored null.
        """
        try:
            value = await store.get(key)
        except StoreClosedError as e:
            raise HTTPException(status_code=503, detail=str(e))
        except CodecError as e:
            raise HTTPException(status_code=500, detail=f"Stored value is unreadable: {e}")

        if value is None:
            raise HTTPException(status_code=404, detail=f"Key not found: {key}")
        return EntryResponse(key=key, value=value)

    @app.put("/keys/{key:path}", status_code=204, tags=["Entries"])
    async def put_entry(key: str, request: ValueRequest) -> Response:
        """Write a value under a key."""
        try:
            await store.put(key, request.value)
        except (ValidationError, CodecError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        except StoreClosedError as e:
            raise HTTPException(status_code=503, detail=str(e))
        return Response(status_code=204)

    @app.delete("/keys/{key:path}", status_code=204, tags=["Entries"])
    async def delete_entry(key: str) -> Response:
        """Delete a key. Deleting an absent key succeeds."""
        try:
            await store.delete(key)
        except StoreClosedError as e:
            raise HTTPException(status_code=503, detail=str(e))
        return Response(status_code=204)

    return app


def run_server(
    store: FlashStore[str, Any],
    host: str = "0.0.0.0",
    port: int = 8000,
) -> None:
    """Run the REST API server.

    Args:
        store: The store to serve.
        host: Host to bind to.
        port: Port to bind to.
    """
    import uvicorn

    app = create_app(store)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    from flash_store.infrastructure.config import get_config
    from flash_store.infrastructure.logging import setup_logging_from_config

    config = get_config()
    setup_logging_from_config(config.observability)
    run_server(FlashStore(config=config), host=config.server.host, port=config.server.port)
