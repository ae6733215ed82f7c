"""Pydantic model for appointment booking requests."""

from typing import Any, ClassVar, Optional, Union

from .base import RequestBody, camel_or_pascal

Identifier = Union[int, str]


class BookingRequest(RequestBody):
    """Appointment to create for an existing client."""

    client_id: Optional[Identifier] = camel_or_pascal("clientId", "ClientId")
    session_type_id: Optional[Identifier] = camel_or_pascal("sessionTypeId", "SessionTypeId")
    staff_id: Optional[Identifier] = camel_or_pascal("staffId", "StaffId")
    location_id: Optional[Identifier] = camel_or_pascal("locationId", "LocationId")
    start_date_time: Optional[str] = camel_or_pascal("startDateTime", "StartDateTime")
    apply_payment: Optional[Any] = camel_or_pascal("applyPayment", "ApplyPayment")
    send_email: Optional[Any] = camel_or_pascal("sendEmail", "SendEmail")
    notes: Optional[str] = camel_or_pascal("notes", "Notes")

    REQUIRED: ClassVar[tuple[str, ...]] = (
        "client_id",
        "session_type_id",
        "staff_id",
        "location_id",
        "start_date_time",
    )

    def to_upstream(self) -> dict:
        """Build the ``/appointment/addappointment`` body."""
        body = {
            "StartDateTime": self.start_date_time,
            "LocationId": self.location_id,
            "StaffId": self.staff_id,
            "ClientId": self.client_id,
            "SessionTypeId": self.session_type_id,
            "ApplyPayment": self.apply_payment or False,
            "SendEmail": True if self.send_email is None else self.send_email,
        }
        if self.notes:
            body["Notes"] = self.notes
        return body
