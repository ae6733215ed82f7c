"""Pydantic models for client account routes.

Bodies accept both the front end's camelCase names and the upstream's
PascalCase names.
"""

from typing import Optional

from .base import RequestBody, camel_or_pascal


class ClientCreateRequest(RequestBody):
    """New client account."""

    first_name: Optional[str] = camel_or_pascal("firstName", "FirstName")
    last_name: Optional[str] = camel_or_pascal("lastName", "LastName")
    email: Optional[str] = camel_or_pascal("email", "Email")
    phone: Optional[str] = camel_or_pascal("phone", "MobilePhone", "mobilePhone")
    birth_date: Optional[str] = camel_or_pascal("birthDate", "BirthDate")
    gender: Optional[str] = camel_or_pascal("gender", "Gender")
    address: Optional[str] = camel_or_pascal("address", "AddressLine1")
    referred_by: Optional[str] = camel_or_pascal("referredBy", "ReferredBy")
    password: Optional[str] = camel_or_pascal("password", "Password")

    def to_upstream(
        self,
        default_address: str,
        default_gender: str,
        default_referred_by: str,
    ) -> dict:
        """Build the ``/client/addclient`` body, filling site-required defaults."""
        body = {
            "FirstName": self.first_name,
            "LastName": self.last_name,
            "Email": self.email,
            "AddressLine1": self.address or default_address,
            "Gender": self.gender or default_gender,
            "ReferredBy": self.referred_by or default_referred_by,
            "SendAccountEmails": True,
        }
        if self.phone:
            body["MobilePhone"] = self.phone
        if self.birth_date:
            body["BirthDate"] = self.birth_date
        if self.password:
            body["Password"] = self.password
        return body


class ClientLoginRequest(RequestBody):
    username: Optional[str] = camel_or_pascal("username", "Username", "email", "Email")
    password: Optional[str] = camel_or_pascal("password", "Password")


class ForgotPasswordRequest(RequestBody):
    email: Optional[str] = camel_or_pascal("email", "Email")
