"""Upstream token routes.

  POST /api/auth/login        user credentials -> user token
  POST /api/auth/auto-login   site credentials (server-held) -> site token
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from booking_proxy.dependencies import get_upstream
from booking_proxy.errors import ProxyError, UpstreamAuthError
from booking_proxy.models import LoginRequest
from booking_proxy.upstream import MindbodyClient

log = logging.getLogger("booking_proxy.routes.auth")

router = APIRouter(prefix="/api/auth", tags=["auth"])

GENERIC_AUTH_FAILURE = "Authentication failed"


@router.post("/login")
async def login(
    body: Optional[LoginRequest] = None,
    upstream: MindbodyClient = Depends(get_upstream),
) -> dict:
    """Exchange a username/password for an upstream user token.

    Any failure, including transport errors, is reported as a 401 with a
    generic message.
    """
    body = body or LoginRequest()
    body.require("username", "password")
    try:
        data = await upstream.issue_token(body.username, body.password)
    except ProxyError as exc:
        log.warning("Login rejected: %s", exc.message)
        raise UpstreamAuthError(GENERIC_AUTH_FAILURE) from exc
    return {"success": True, "token": data["AccessToken"], "user": data.get("User")}


@router.post("/auto-login")
async def auto_login(upstream: MindbodyClient = Depends(get_upstream)) -> dict:
    """Hand the front end the cached site-level token."""
    if upstream.tokens is None:
        raise UpstreamAuthError(GENERIC_AUTH_FAILURE)
    try:
        token = await upstream.tokens.get_token()
    except ProxyError as exc:
        log.warning("Site login failed: %s", exc.message)
        raise UpstreamAuthError(GENERIC_AUTH_FAILURE) from exc
    return {"success": True, "token": token}
