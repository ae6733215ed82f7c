"""FastAPI dependencies shared by every router."""

from __future__ import annotations

from fastapi import Request

from booking_proxy.config import Settings
from booking_proxy.errors import ConfigurationError
from booking_proxy.upstream import MindbodyClient


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_upstream(request: Request) -> MindbodyClient:
    """The shared upstream client created in the app lifespan."""
    upstream = getattr(request.app.state, "upstream", None)
    if upstream is None:
        raise ConfigurationError("Booking service client is not configured")
    return upstream
