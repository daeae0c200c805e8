import asyncio
import os
import time

import psutil  # type: ignore[import-untyped]
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

router = APIRouter()


async def _store_status(request: Request) -> str:
    database = getattr(request.app.state, "reaction_database", None)
    if database is None or not database.initialized:
        return "initializing"
    # ping() queries SQLite under a thread lock
    healthy = await asyncio.to_thread(database.ping)
    return "healthy" if healthy else "unavailable"


@router.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint that monitors system resources and store status.
    Includes build metadata for cache invalidation troubleshooting.

    Returns "initializing" until the reaction store is open, and "degraded"
    if it stops answering.
    """
    cpu_percent = psutil.cpu_percent()
    memory = psutil.virtual_memory()
    disk = psutil.disk_usage("/")

    store_status = await _store_status(request)
    overall_status = {
        "healthy": "healthy",
        "initializing": "initializing",
    }.get(store_status, "degraded")

    # BUILD_ID is injected at image build time (e.g. build-a3f2c1b)
    build_id = os.getenv("BUILD_ID", "unknown")

    return {
        "status": overall_status,
        "timestamp": int(time.time()),
        "build_id": build_id,
        "system": {
            "cpu_percent": cpu_percent,
            "memory_percent": memory.percent,
            "disk_percent": disk.percent,
        },
        "services": {"store": store_status},
    }


@router.get("/health/ready")
async def readiness_check(request: Request):
    """
    Readiness probe that checks if the store can serve requests.
    """
    if await _store_status(request) != "healthy":
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready"},
        )
    return {"status": "ready"}


@router.get("/health/live")
async def liveness_check():
    """
    Liveness probe that checks if the service is running.
    """
    return {"status": "alive"}
