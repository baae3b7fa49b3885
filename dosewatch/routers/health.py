"""Health check endpoints for container orchestration."""

import asyncio
from typing import Any

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from dosewatch.dependencies import Store

router = APIRouter(tags=["Health"])


async def _store_response(store, ok_status: str, failed_status: str) -> Response:
    if await asyncio.to_thread(store.ping):
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"status": ok_status, "store": "connected"},
        )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": failed_status, "store": "disconnected"},
    )


@router.get("/health", response_model=None)
async def health_check(store: Store) -> Response:
    """
    Health check endpoint with durable store status.

    Returns:
        {"status": "healthy", "store": "connected"} when the store answers
        {"status": "degraded", "store": "disconnected"} otherwise

    The engine keeps working without the store (records are simply not
    persisted), hence "degraded" rather than failed.
    """
    return await _store_response(store, "healthy", "degraded")


@router.get("/health/live")
async def liveness_probe() -> dict[str, Any]:
    """
    Liveness probe.

    Returns success if the application process is running. Does NOT
    check the durable store.
    """
    return {"status": "alive"}


@router.get("/health/ready", response_model=None)
async def readiness_probe(store: Store) -> Response:
    """
    Readiness probe.

    Ready once the durable store answers, so restored state is trustworthy.
    """
    return await _store_response(store, "ready", "not_ready")
