"""Health check endpoint."""

import datetime as dt
from typing import Any

from fastapi import APIRouter

from refunds.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/api/ping")
async def ping() -> dict[str, Any]:
    """Liveness check."""
    return {
        "status": "ok",
        "timestamp": dt.datetime.now(dt.UTC).isoformat(),
        "service": get_settings().service_name,
    }
