"""Client account routes.

  POST /api/clients                  create a client
  POST /api/auth/register            same, under the auth prefix
  POST /api/clients/login            client login (see CLIENT_LOGIN_MODE)
  POST /api/clients/forgot-password  request a password reset email

Client login has two modes.  ``validate`` asks the upstream to check the
email/password pair.  ``email_match`` searches clients by email and
accepts a case-insensitive exact match WITHOUT checking the password, so
only the email is required; it is the deployed behaviour and is reported
as ``passwordVerified: false``.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends

from booking_proxy.auth import user_token
from booking_proxy.config import Settings
from booking_proxy.dependencies import get_settings, get_upstream
from booking_proxy.errors import (
    AuthenticationError,
    ConflictError,
    ProxyError,
    UpstreamAuthError,
    UpstreamRequestError,
)
from booking_proxy.models import (
    ClientCreateRequest,
    ClientLoginRequest,
    ForgotPasswordRequest,
)
from booking_proxy.reshape import client_summary, match_client_email
from booking_proxy.upstream import MindbodyClient

log = logging.getLogger("booking_proxy.routes.clients")

router = APIRouter(tags=["clients"])

CONFLICT_MARKERS = ("duplicate", "already exists")


def is_conflict(exc: UpstreamRequestError) -> bool:
    """Upstream 409, or an error response that says the client exists.

    The markers are searched in the message and in the whole upstream
    payload, which also covers codes such as ``DuplicateClient``.
    """
    if exc.upstream_status == 409:
        return True
    text = exc.message.lower()
    if exc.payload is not None:
        text += " " + json.dumps(exc.payload, default=str).lower()
    return any(marker in text for marker in CONFLICT_MARKERS)


@router.post("/api/clients")
@router.post("/api/auth/register")
async def create_client(
    body: Optional[ClientCreateRequest] = None,
    upstream: MindbodyClient = Depends(get_upstream),
    settings: Settings = Depends(get_settings),
    token: Optional[str] = Depends(user_token),
) -> dict:
    body = body or ClientCreateRequest()
    body.require("first_name", "last_name", "email")

    payload = body.to_upstream(
        default_address=settings.client_default_address,
        default_gender=settings.client_default_gender,
        default_referred_by=settings.client_default_referred_by,
    )
    try:
        data = await upstream.post("/client/addclient", payload, user_token=token)
    except UpstreamRequestError as exc:
        if is_conflict(exc):
            log.info("Client creation conflict: %s", exc.message)
            raise ConflictError(
                "An account with this email already exists", details=exc.payload
            ) from exc
        raise

    client = data.get("Client") or {}
    log.info("Created client %s", client.get("Id"))
    return {"success": True, "client": client_summary(client)}


async def _login_by_validation(
    upstream: MindbodyClient, body: ClientLoginRequest, token: Optional[str]
) -> dict:
    try:
        data = await upstream.post(
            "/client/validateclientcredentials",
            {"Username": body.username, "Password": body.password},
            user_token=token,
        )
    except UpstreamRequestError as exc:
        status = exc.upstream_status
        if status is not None and 400 <= status < 500:
            raise UpstreamAuthError("Invalid email or password") from exc
        raise
    client = data.get("Client")
    if not client:
        raise UpstreamAuthError("Invalid email or password")
    return {"success": True, "client": client, "passwordVerified": True}


async def _login_by_email_match(
    upstream: MindbodyClient, body: ClientLoginRequest, token: Optional[str]
) -> dict:
    data = await upstream.get(
        "/client/clients", params={"SearchText": body.username}, user_token=token
    )
    matches = match_client_email(data.get("Clients") or [], body.username)
    if not matches:
        raise AuthenticationError(
            "No account found with this email. Do you need to create one?",
            notFound=True,
        )
    log.warning("Client %s logged in on email match only", matches[0].get("Id"))
    return {"success": True, "client": matches[0], "passwordVerified": False}


@router.post("/api/clients/login")
async def client_login(
    body: Optional[ClientLoginRequest] = None,
    upstream: MindbodyClient = Depends(get_upstream),
    settings: Settings = Depends(get_settings),
    token: Optional[str] = Depends(user_token),
) -> dict:
    body = body or ClientLoginRequest()
    if settings.client_login_mode == "validate":
        body.require("username", "password")
        return await _login_by_validation(upstream, body, token)
    body.require("username")
    return await _login_by_email_match(upstream, body, token)


@router.post("/api/clients/forgot-password")
async def forgot_password(
    body: Optional[ForgotPasswordRequest] = None,
    upstream: MindbodyClient = Depends(get_upstream),
    token: Optional[str] = Depends(user_token),
) -> dict:
    """Always answers success so the response never reveals whether the
    email has an account."""
    body = body or ForgotPasswordRequest()
    body.require("email")
    try:
        await upstream.post(
            "/client/sendpasswordresetemail",
            {"UserEmail": body.email, "UserFirstName": "", "UserLastName": ""},
            user_token=token,
        )
        log.info("Password reset email requested")
    except ProxyError as exc:
        log.warning("Password reset request failed upstream: %s", exc.message)
    return {
        "success": True,
        "message": "If the email is registered, a recovery link has been sent.",
    }
