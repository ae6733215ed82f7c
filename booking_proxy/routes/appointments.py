"""Appointment booking route."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from booking_proxy.auth import user_token
from booking_proxy.dependencies import get_upstream
from booking_proxy.models import BookingRequest
from booking_proxy.upstream import MindbodyClient

log = logging.getLogger("booking_proxy.routes.appointments")

router = APIRouter(tags=["appointments"])


@router.post("/api/appointments/book")
@router.post("/api/book")
async def book_appointment(
    body: Optional[BookingRequest] = None,
    upstream: MindbodyClient = Depends(get_upstream),
    token: Optional[str] = Depends(user_token),
) -> dict:
    """Create an appointment for an existing client.

    ``applyPayment`` defaults to false and ``sendEmail`` to true.
    """
    body = body or BookingRequest()
    body.require(*BookingRequest.REQUIRED)

    log.info(
        "Booking session type %s with staff %s at %s",
        body.session_type_id, body.staff_id, body.start_date_time,
    )
    data = await upstream.post(
        "/appointment/addappointment", body.to_upstream(), user_token=token
    )
    appointment = data.get("Appointment")
    log.info("Appointment booked: %s", (appointment or {}).get("Id"))
    return {
        "success": True,
        "appointment": appointment,
        "message": "Appointment booked successfully!",
    }
