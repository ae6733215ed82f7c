"""Reshape upstream records into front-end payloads.

The upstream returns PascalCase records with nested ``Staff`` /
``SessionType`` / ``Location`` objects.  These helpers are pure functions
over plain dicts so they can be tested without any HTTP in the way.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from booking_proxy.errors import ResponseShapeError

log = logging.getLogger("booking_proxy.reshape")

# Known container keys for bookable slots, in priority order.  Current API
# versions answer with ``Availabilities``; the others are older shapes.
AVAILABILITY_KEYS = ("Availabilities", "ScheduleItems", "BookableItems")

# Generic program names that are not real treatment categories.
EXCLUDED_CATEGORIES = frozenset({"Appointment", "Appointments", "Service", "Services"})

BOOKABLE_SESSION_TYPES = frozenset({"Appointment", "Service"})


def extract_availabilities(data: Any) -> list[dict]:
    """Return the slot list from a bookable-items response.

    Tries each of ``AVAILABILITY_KEYS`` in order and returns the first one
    holding a list.

    Raises:
        ResponseShapeError: none of the known keys is present.
    """
    if isinstance(data, dict):
        for key in AVAILABILITY_KEYS:
            items = data.get(key)
            if isinstance(items, list):
                return items
        keys = sorted(data.keys())
    else:
        keys = []
    log.error("Unrecognised bookable-items response, keys=%s", keys)
    raise ResponseShapeError(
        "Unrecognised availability response from the booking service", keys=keys
    )


def full_name(record: dict | None) -> str:
    """``FirstName LastName`` with missing parts dropped."""
    if not record:
        return ""
    first = record.get("FirstName") or ""
    last = record.get("LastName") or ""
    return f"{first} {last}".strip()


def _slot(item: dict) -> dict:
    return {
        "startDateTime": item.get("StartDateTime"),
        "endDateTime": item.get("EndDateTime"),
        "sessionType": item.get("SessionType"),
        "location": item.get("Location"),
    }


def summarize_staff(items: Iterable[dict]) -> list[dict]:
    """Deduplicate slots by staff id.

    Slots without a ``Staff`` record are skipped.  The result is sorted by
    number of available slots, most first; ties keep first-seen order.
    """
    by_id: dict[Any, dict] = {}
    for item in items:
        staff = item.get("Staff")
        if not staff:
            continue
        staff_id = staff.get("Id")
        entry = by_id.get(staff_id)
        if entry is None:
            entry = by_id[staff_id] = {
                "id": staff_id,
                "firstName": staff.get("FirstName"),
                "lastName": staff.get("LastName"),
                "name": full_name(staff),
                "gender": staff.get("Gender"),
                "imageUrl": staff.get("ImageUrl"),
                "bio": staff.get("Bio"),
                "slots": [],
            }
        entry["slots"].append(_slot(item))

    summary = [
        {**entry, "availableSlots": len(entry["slots"])} for entry in by_id.values()
    ]
    summary.sort(key=lambda s: s["availableSlots"], reverse=True)
    return summary


def group_slots_by_date(items: Iterable[dict]) -> dict[str, list[dict]]:
    """Group slots under their ``YYYY-MM-DD`` start date, in arrival order."""
    grouped: dict[str, list[dict]] = {}
    for item in items:
        start = item.get("StartDateTime") or ""
        day = start.split("T")[0]
        if not day:
            continue
        grouped.setdefault(day, []).append(
            {
                "startDateTime": item.get("StartDateTime"),
                "endDateTime": item.get("EndDateTime"),
                "staff": item.get("Staff"),
                "sessionType": item.get("SessionType"),
            }
        )
    return grouped


def _as_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def pre_tax_price(service: dict) -> float | None:
    """Gross price of a sale service minus its included tax.

    ``Price`` falls back to ``OnlinePrice``.  When ``TaxIncluded`` is a
    positive amount below the gross price it is subtracted; otherwise the
    gross price is returned unchanged.
    """
    gross = _as_number(service.get("Price")) or _as_number(service.get("OnlinePrice"))
    if gross is None:
        return None
    tax = _as_number(service.get("TaxIncluded"))
    if tax and 0 < tax < gross:
        return round(gross - tax, 2)
    return gross


def describe(session_type: dict, service: dict | None = None) -> str:
    """Description fallback chain: online text, session text, sale service text."""
    for candidate in (
        session_type.get("OnlineDescription"),
        session_type.get("Description"),
        (service or {}).get("Description"),
    ):
        if candidate and str(candidate).strip():
            return str(candidate).strip()
    return ""


def normalize_name(name: Any) -> str:
    return " ".join(str(name or "").split()).casefold()


def parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def upcoming_appointments(items: Iterable[dict], now: datetime) -> list[dict]:
    """Keep appointments starting at or after ``now`` that are not cancelled.

    Naive upstream timestamps are compared against a naive ``now``; aware
    ones against ``now`` converted to UTC.
    """
    upcoming = []
    naive_now = now.replace(tzinfo=None) if now.tzinfo else now
    aware_now = now if now.tzinfo else now.replace(tzinfo=timezone.utc)
    for item in items:
        if item.get("Status") == "Cancelled":
            continue
        start = parse_timestamp(item.get("StartDateTime"))
        if start is None:
            continue
        reference = aware_now if start.tzinfo else naive_now
        if start >= reference:
            upcoming.append(item)
    return upcoming


def appointment_summary(item: dict) -> dict:
    staff = item.get("Staff") or {}
    return {
        "id": item.get("Id"),
        "startDateTime": item.get("StartDateTime"),
        "endDateTime": item.get("EndDateTime"),
        "serviceName": (item.get("SessionType") or {}).get("Name")
        or item.get("ServiceName")
        or "Service",
        "staffName": staff.get("Name") or full_name(staff) or "Therapist",
        "locationName": (item.get("Location") or {}).get("Name") or "Location",
        "status": item.get("Status"),
    }


def client_summary(client: dict | None) -> dict:
    client = client or {}
    return {
        "id": client.get("Id"),
        "uniqueId": client.get("UniqueId"),
        "firstName": client.get("FirstName"),
        "lastName": client.get("LastName"),
        "name": full_name(client),
        "email": client.get("Email"),
        "mobilePhone": client.get("MobilePhone"),
    }


def match_client_email(clients: Iterable[dict], email: str) -> list[dict]:
    """Clients whose email equals ``email`` ignoring case."""
    wanted = email.strip().casefold()
    return [c for c in clients if c.get("Email") and c["Email"].strip().casefold() == wanted]
