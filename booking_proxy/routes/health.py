"""Liveness and service info routes. No upstream call, no auth."""

from __future__ import annotations

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from booking_proxy import __version__
from booking_proxy.config import Settings
from booking_proxy.dependencies import get_settings

router = APIRouter(tags=["health"])

_START_TIME = time.time()

SERVICE_NAME = "Spa Booking Proxy"


@router.get("/")
async def index(settings: Settings = Depends(get_settings)) -> dict:
    return {
        "service": SERVICE_NAME,
        "version": __version__,
        "status": "ok",
        "siteId": settings.mindbody_site_id,
    }


@router.get("/health")
@router.get("/api/health")
async def health(settings: Settings = Depends(get_settings)) -> dict:
    """Lightweight health check; confirms the event loop is responsive."""
    return {
        "status": "ok",
        "message": SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "siteId": settings.mindbody_site_id,
        "uptime": round(time.time() - _START_TIME, 1),
    }
