"""Optional enrichment lookups for session types.

Programs (category names) and sale services (prices) come from separate
upstream endpoints.  Either may fail without failing the request: the
lookup then returns an unavailable ``Enrichment`` carrying the error, one
warning is logged, and the response reports which enrichments were used.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from booking_proxy.errors import ProxyError
from booking_proxy.reshape import (
    BOOKABLE_SESSION_TYPES,
    EXCLUDED_CATEGORIES,
    describe,
    normalize_name,
    pre_tax_price,
)

log = logging.getLogger("booking_proxy.enrichment")

T = TypeVar("T")


@dataclass
class Enrichment(Generic[T]):
    """Result of one best-effort lookup."""

    name: str
    value: T | None = None
    error: str | None = None

    @property
    def available(self) -> bool:
        return self.error is None and self.value is not None

    def status(self) -> dict[str, Any]:
        if self.available:
            return {"available": True}
        return {"available": False, "error": self.error}


def _unavailable(name: str, exc: ProxyError) -> Enrichment:
    log.warning("%s enrichment unavailable: %s", name, exc.message)
    return Enrichment(name=name, error=exc.message)


async def fetch_programs(upstream, user_token: str | None = None) -> Enrichment[dict]:
    """Program id -> program name, used as the treatment category."""
    try:
        data = await upstream.get("/site/programs", user_token=user_token)
    except ProxyError as exc:
        return _unavailable("programs", exc)
    programs = {
        prog["Id"]: prog.get("Name")
        for prog in data.get("Programs") or []
        if prog.get("Id") is not None
    }
    log.info("Loaded %d programs", len(programs))
    return Enrichment(name="programs", value=programs)


async def fetch_service_prices(upstream, user_token: str | None = None) -> Enrichment[dict]:
    """Normalised sale service name -> sale service record."""
    try:
        data = await upstream.get("/sale/services", user_token=user_token)
    except ProxyError as exc:
        return _unavailable("prices", exc)
    services: dict[str, dict] = {}
    for svc in data.get("Services") or []:
        key = normalize_name(svc.get("Name"))
        if key and key not in services:
            services[key] = svc
    log.info("Loaded %d priced services", len(services))
    return Enrichment(name="prices", value=services)


def is_bookable_type(session_type: dict) -> bool:
    """Appointment-style session types only; classes and enrollments are dropped."""
    return session_type.get("Type") in BOOKABLE_SESSION_TYPES


def _own_price(session_type: dict) -> Any:
    for key in ("OnlinePrice", "DefaultPrice", "Price"):
        if session_type.get(key):
            return session_type[key]
    return None


def enrich_session_types(
    session_types: list[dict],
    programs: Enrichment[dict],
    prices: Enrichment[dict],
) -> list[dict]:
    """Attach ``CategoryName``, ``Price`` and ``Description`` to each type.

    Types whose category is one of ``EXCLUDED_CATEGORIES`` are dropped.
    When the program lookup succeeded, types without any category are
    dropped too; when it failed every type is kept with a ``None``
    category.
    """
    program_names = programs.value if programs.available else {}
    services = prices.value if prices.available else {}

    enriched = []
    for st in session_types:
        category = program_names.get(st.get("ProgramId"))
        if category in EXCLUDED_CATEGORIES:
            continue
        if programs.available and not category:
            continue

        service = services.get(normalize_name(st.get("Name")))
        price = pre_tax_price(service) if service else None
        if price is None:
            price = _own_price(st)

        enriched.append(
            {
                **st,
                "CategoryName": category,
                "Price": price,
                "Description": describe(st, service),
            }
        )
    return enriched


def category_names(session_types: list[dict]) -> list[str]:
    """Distinct category names in first-seen order, generic names excluded."""
    seen: list[str] = []
    for st in session_types:
        name = st.get("CategoryName")
        if name and name not in EXCLUDED_CATEGORIES and name not in seen:
            seen.append(name)
    return seen
