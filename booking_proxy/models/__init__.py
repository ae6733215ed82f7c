"""Request models for the proxy's write routes."""

from .auth import LoginRequest
from .booking import BookingRequest
from .client import ClientCreateRequest, ClientLoginRequest, ForgotPasswordRequest

__all__ = [
    "BookingRequest",
    "ClientCreateRequest",
    "ClientLoginRequest",
    "ForgotPasswordRequest",
    "LoginRequest",
]
