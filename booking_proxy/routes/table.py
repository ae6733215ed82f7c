"""Table-driven read routes.

Each ``RouteSpec`` describes one GET endpoint: the upstream path it wraps,
which inbound parameters are required, how inbound names map onto the
upstream's names, the default date window, and a reshaper that turns the
upstream body into the response payload.  ``run_route`` does the rest:

  1. presence check on required parameters (400, no upstream call)
  2. parameter translation and date-window defaults
  3. one upstream call, or the bookable-items pagination walker
  4. reshape, then wrap in ``{"success": true, ...}``
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Optional

from fastapi import APIRouter, Depends, Request

from booking_proxy.auth import user_token
from booking_proxy.config import Settings
from booking_proxy.dependencies import get_settings, get_upstream
from booking_proxy.enrichment import (
    category_names,
    enrich_session_types,
    fetch_programs,
    fetch_service_prices,
    is_bookable_type,
)
from booking_proxy.errors import MissingParameterError, NotFoundError, ResponseShapeError
from booking_proxy.pagination import walk_bookable_items
from booking_proxy.reshape import (
    appointment_summary,
    group_slots_by_date,
    match_client_email,
    summarize_staff,
    upcoming_appointments,
)
from booking_proxy.upstream import MindbodyClient

log = logging.getLogger("booking_proxy.routes")


@dataclass
class RouteContext:
    """Per-request state handed to a reshaper."""

    upstream: MindbodyClient
    settings: Settings
    user_token: Optional[str]
    inbound: dict[str, str]
    params: dict[str, Any]
    date_range: Optional[dict[str, str]] = None
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Reshaper = Callable[[RouteContext, Any], Awaitable[dict]]


@dataclass(frozen=True)
class RouteSpec:
    """One table-driven GET route."""

    name: str
    path: str
    upstream_path: str
    reshape: Reshaper
    summary: str = ""
    required: tuple[str, ...] = ()
    # inbound name -> upstream name; the first inbound name present wins
    params: dict[str, str] = field(default_factory=dict)
    fixed_params: dict[str, Any] = field(default_factory=dict)
    # days ahead of today used when startDate / endDate are omitted
    window_days: Optional[int] = None
    window_params: tuple[str, str] = ("startDate", "endDate")
    paginate: bool = False


def _today() -> date:
    return datetime.now(timezone.utc).date()


def missing_parameters(route: RouteSpec, inbound: dict[str, str]) -> list[str]:
    return [name for name in route.required if not (inbound.get(name) or "").strip()]


def translate_params(
    route: RouteSpec, inbound: dict[str, str], today: date | None = None
) -> tuple[dict[str, Any], Optional[dict[str, str]]]:
    """Map inbound parameters onto upstream names.

    Returns the upstream params and, for windowed routes, the resolved
    ``{"start", "end"}`` date range.
    """
    params: dict[str, Any] = dict(route.fixed_params)
    for inbound_name, upstream_name in route.params.items():
        value = inbound.get(inbound_name)
        if value and upstream_name not in params:
            params[upstream_name] = value

    date_range = None
    if route.window_days is not None:
        today = today or _today()
        start = inbound.get("startDate") or today.isoformat()
        end = inbound.get("endDate") or (today + timedelta(days=route.window_days)).isoformat()
        start_name, end_name = route.window_params
        params[start_name] = start
        params[end_name] = end
        date_range = {"start": start, "end": end}
    return params, date_range


async def run_route(
    route: RouteSpec,
    inbound: dict[str, str],
    upstream: MindbodyClient,
    settings: Settings,
    token: Optional[str],
) -> dict:
    missing = missing_parameters(route, inbound)
    if missing:
        raise MissingParameterError(missing)

    params, date_range = translate_params(route, inbound)
    ctx = RouteContext(
        upstream=upstream,
        settings=settings,
        user_token=token,
        inbound=inbound,
        params=params,
        date_range=date_range,
    )

    if route.paginate:
        data = await walk_bookable_items(
            upstream,
            params,
            user_token=token,
            page_size=settings.bookable_items_page_size,
            max_offset=settings.bookable_items_max_offset,
        )
    else:
        data = await upstream.get(route.upstream_path, params=params, user_token=token)
        if not isinstance(data, dict):
            log.error(
                "%s returned %s instead of an object",
                route.upstream_path, type(data).__name__,
            )
            raise ResponseShapeError(
                "Unexpected response from the booking service", keys=[]
            )

    body = await route.reshape(ctx, data)
    return {"success": True, **body}


# ── Reshapers ──────────────────────────────────────────────────


async def _locations(ctx: RouteContext, data: dict) -> dict:
    return {"locations": data.get("Locations") or []}


async def _staff(ctx: RouteContext, data: dict) -> dict:
    return {"staff": data.get("StaffMembers") or []}


async def _session_types(ctx: RouteContext, data: dict) -> dict:
    all_types = data.get("SessionTypes") or []
    programs = await fetch_programs(ctx.upstream, ctx.user_token)
    prices = await fetch_service_prices(ctx.upstream, ctx.user_token)

    enriched = enrich_session_types(
        [st for st in all_types if is_bookable_type(st)], programs, prices
    )
    with_prices = sum(1 for st in enriched if st.get("Price") is not None)
    log.info("Session types: %d bookable, %d priced", len(enriched), with_prices)
    return {
        "sessionTypes": enriched,
        "categories": category_names(enriched),
        "programs": programs.value or {},
        "priceStats": {"withPrices": with_prices, "total": len(enriched)},
        "enrichment": {"programs": programs.status(), "prices": prices.status()},
    }


async def _bookable_items(ctx: RouteContext, page) -> dict:
    return {
        "availabilities": page.items,
        "staffWithAvailability": summarize_staff(page.items),
        "totalSlots": len(page.items),
        "dateRange": ctx.date_range,
        "pagination": page.to_dict(),
    }


async def _staff_with_availability(ctx: RouteContext, page) -> dict:
    staff = summarize_staff(page.items)
    if staff:
        message = (
            f"Found {len(staff)} therapists with {len(page.items)} "
            "total available slots."
        )
    else:
        message = (
            "No therapists have availability in the selected date range. "
            "Try a different date range."
        )
    return {
        "staff": staff,
        "totalStaffWithAvailability": len(staff),
        "totalAvailableSlots": len(page.items),
        "dateRange": ctx.date_range,
        "message": message,
    }


async def _available_slots(ctx: RouteContext, page) -> dict:
    return {
        "slots": page.items,
        "slotsByDate": group_slots_by_date(page.items),
        "totalSlots": len(page.items),
        "dateRange": ctx.date_range,
    }


async def _available_dates(ctx: RouteContext, data: dict) -> dict:
    return {
        "availableDates": data.get("AvailableDates") or [],
        "dateRange": ctx.date_range,
    }


async def _clients(ctx: RouteContext, data: dict) -> dict:
    clients = data.get("Clients") or []
    email = (ctx.inbound.get("email") or "").strip()
    if email:
        clients = match_client_email(clients, email)
        if not clients:
            raise NotFoundError("No client found with that email")
    return {"clients": clients}


async def _client_appointments(ctx: RouteContext, data: dict) -> dict:
    upcoming = upcoming_appointments(data.get("Appointments") or [], ctx.now)
    log.info(
        "Client %s has %d upcoming appointments",
        ctx.inbound.get("clientId"), len(upcoming),
    )
    return {"appointments": [appointment_summary(apt) for apt in upcoming]}


# ── The table ──────────────────────────────────────────────────

_BOOKABLE_FILTERS = {
    "sessionTypeIds": "sessionTypeIds",
    "locationIds": "locationIds",
    "staffIds": "staffIds",
}

ROUTES: list[RouteSpec] = [
    RouteSpec(
        name="list_locations",
        path="/api/locations",
        upstream_path="/site/locations",
        reshape=_locations,
        summary="Site locations",
    ),
    RouteSpec(
        name="list_session_types",
        path="/api/session-types",
        upstream_path="/site/sessiontypes",
        reshape=_session_types,
        summary="Bookable services with category, price and description",
        params={"locationId": "LocationIds"},
        fixed_params={"OnlineOnly": "true"},
    ),
    RouteSpec(
        name="list_staff",
        path="/api/staff",
        upstream_path="/staff/staff",
        reshape=_staff,
        summary="Staff directory (not availability)",
        params={"locationId": "LocationId", "sessionTypeIds": "SessionTypeIds"},
    ),
    RouteSpec(
        name="bookable_items",
        path="/api/bookable-items",
        upstream_path="/appointment/bookableitems",
        reshape=_bookable_items,
        summary="Bookable slots plus per-staff availability",
        required=("sessionTypeIds",),
        params=_BOOKABLE_FILTERS,
        window_days=14,
        paginate=True,
    ),
    RouteSpec(
        name="staff_with_availability",
        path="/api/staff-with-availability",
        upstream_path="/appointment/bookableitems",
        reshape=_staff_with_availability,
        summary="Staff who have at least one bookable slot",
        required=("sessionTypeIds",),
        params={"sessionTypeIds": "sessionTypeIds", "locationIds": "locationIds"},
        window_days=14,
        paginate=True,
    ),
    RouteSpec(
        name="available_slots",
        path="/api/available-slots",
        upstream_path="/appointment/bookableitems",
        reshape=_available_slots,
        summary="Bookable slots grouped by date",
        required=("sessionTypeIds",),
        params={**_BOOKABLE_FILTERS, "staffId": "staffIds"},
        window_days=14,
        paginate=True,
    ),
    RouteSpec(
        name="available_dates",
        path="/api/available-dates",
        upstream_path="/appointment/availabledates",
        reshape=_available_dates,
        summary="Dates with scheduled availability",
        required=("sessionTypeIds",),
        params={
            "sessionTypeIds": "sessionTypeId",
            "locationIds": "locationId",
            "staffIds": "staffId",
        },
        window_days=60,
    ),
    RouteSpec(
        name="search_clients",
        path="/api/clients",
        upstream_path="/client/clients",
        reshape=_clients,
        summary="Search clients, optionally by exact email",
        params={"searchText": "SearchText", "email": "SearchText"},
    ),
    RouteSpec(
        name="client_appointments",
        path="/api/clients/{clientId}/appointments",
        upstream_path="/appointment/clientappointments",
        reshape=_client_appointments,
        summary="A client's upcoming, non-cancelled appointments",
        required=("clientId",),
        params={"clientId": "ClientId"},
        window_days=60,
        window_params=("StartDate", "EndDate"),
    ),
]


def inbound_params(request: Request) -> dict[str, str]:
    """Query and path parameters; a repeated query key is comma-joined."""
    query = request.query_params
    inbound = {key: ",".join(query.getlist(key)) for key in query.keys()}
    inbound.update(request.path_params)
    return inbound


def _endpoint(route: RouteSpec):
    async def endpoint(
        request: Request,
        upstream: MindbodyClient = Depends(get_upstream),
        settings: Settings = Depends(get_settings),
        token: Optional[str] = Depends(user_token),
    ) -> dict:
        inbound = inbound_params(request)
        return await run_route(route, inbound, upstream, settings, token)

    endpoint.__name__ = route.name
    return endpoint


def build_router(routes: list[RouteSpec] = ROUTES) -> APIRouter:
    router = APIRouter()
    for route in routes:
        router.add_api_route(
            route.path,
            _endpoint(route),
            methods=["GET"],
            name=route.name,
            summary=route.summary or None,
        )
    return router
