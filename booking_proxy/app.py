"""FastAPI application: REST surface for the spa-booking front end.

Endpoints (all JSON, all wrapped in ``{"success": ...}``):

  GET  /, /health, /api/health              Service info / liveness
  POST /api/auth/login                      User token from username/password
  POST /api/auth/auto-login                 Cached site token
  POST /api/auth/register, /api/clients     Create a client
  POST /api/clients/login                   Client login
  POST /api/clients/forgot-password         Password reset email
  POST /api/book, /api/appointments/book    Book an appointment
  GET  /api/locations, /api/session-types, /api/staff,
       /api/bookable-items, /api/staff-with-availability,
       /api/available-slots, /api/available-dates,
       /api/clients, /api/clients/{clientId}/appointments
                                            Table-driven reads (routes/table.py)

Upstream credentials are validated in the lifespan: missing values abort
startup instead of serving requests with blank credentials.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

# Configure root logger early so all app loggers have a handler and are
# visible when run via `uvicorn booking_proxy.app:app`.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)-28s %(levelname)-7s %(message)s",
)

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from booking_proxy import __version__
from booking_proxy.config import Settings, settings as default_settings
from booking_proxy.errors import ProxyError
from booking_proxy.routes import api_router
from booking_proxy.upstream import MindbodyClient

log = logging.getLogger("booking_proxy.app")


def create_app(
    settings: Settings | None = None,
    upstream: MindbodyClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``upstream`` may be injected (tests); otherwise one is built from
    ``settings`` when the app starts and closed when it stops.
    """
    cfg = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned: MindbodyClient | None = None
        if app.state.upstream is None:
            for warning in cfg.validate_startup():
                log.warning(warning)
            owned = MindbodyClient.from_settings(cfg)
            app.state.upstream = owned
            log.info("Booking proxy ready for site %s", cfg.mindbody_site_id)

        yield

        if owned is not None:
            await owned.aclose()
            app.state.upstream = None

    app = FastAPI(
        title="Spa Booking Proxy",
        description="Credential-injecting proxy for a Mindbody-style booking API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.upstream = upstream

    # ── Error envelope ─────────────────────────────────────────

    @app.exception_handler(ProxyError)
    async def proxy_error(request: Request, exc: ProxyError) -> JSONResponse:
        if exc.status_code >= 500:
            log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            log.info(
                "%s %s -> %d: %s",
                request.method, request.url.path, exc.status_code, exc.message,
            )
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
        return JSONResponse(
            {"success": False, "error": "Invalid request", "fields": fields},
            status_code=400,
        )

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        log.error(
            "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
        )
        return JSONResponse(
            {"success": False, "error": "Internal server error"}, status_code=500
        )

    app.include_router(api_router())
    return app


# ── Module-level app instance for uvicorn ──────────────────────

app = create_app()


if __name__ == "__main__":
    import uvicorn

    log_config = uvicorn.config.LOGGING_CONFIG
    log_config["formatters"]["default"]["fmt"] = (
        "%(asctime)s %(name)-12s %(levelname)-8s %(message)s"
    )

    uvicorn.run(
        "booking_proxy.app:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
        log_config=log_config,
    )
