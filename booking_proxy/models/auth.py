"""Pydantic model for the user login route."""

from typing import Optional

from .base import RequestBody, camel_or_pascal


class LoginRequest(RequestBody):
    """Upstream username/password exchanged for a user token."""

    username: Optional[str] = camel_or_pascal("username", "Username")
    password: Optional[str] = camel_or_pascal("password", "Password")
