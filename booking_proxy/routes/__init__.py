"""HTTP routes exposed to the front end."""

from fastapi import APIRouter

from . import appointments, auth, clients, health
from .table import ROUTES, RouteSpec, build_router


def api_router() -> APIRouter:
    router = APIRouter()
    router.include_router(health.router)
    router.include_router(auth.router)
    router.include_router(clients.router)
    router.include_router(appointments.router)
    router.include_router(build_router(ROUTES))
    return router


__all__ = ["ROUTES", "RouteSpec", "api_router"]
