"""Mindbody-style booking API client.

Wraps an ``httpx.AsyncClient`` and adds the headers every upstream call
needs: ``Api-Key`` and ``SiteId`` identify the site, ``Authorization``
carries either the caller's own user token (passed through verbatim) or
the cached site-level token from a ``TokenProvider``.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

import httpx

from booking_proxy.errors import (
    ConfigurationError,
    UpstreamAuthError,
    UpstreamRequestError,
)

from .base import TokenProvider
from .token_cache import TokenCache

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.mindbodyonline.com/public/v6"


def upstream_error_message(payload: Any, default: str) -> str:
    """Pull the human-readable message out of an upstream error payload."""
    if isinstance(payload, dict):
        error = payload.get("Error")
        if isinstance(error, dict) and error.get("Message"):
            return str(error["Message"])
        if payload.get("Message"):
            return str(payload["Message"])
    if isinstance(payload, str) and payload.strip():
        return payload.strip()[:200]
    return default


class MindbodyClient:
    """Thin async client for the upstream booking API."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str,
        site_id: str,
        base_url: str = DEFAULT_BASE_URL,
        tokens: TokenProvider | None = None,
    ) -> None:
        self._http = http
        self._api_key = api_key
        self._site_id = site_id
        self._base_url = base_url.rstrip("/")
        self.tokens = tokens

    @classmethod
    def from_settings(cls, settings) -> "MindbodyClient":
        """Build a client, its HTTP session and its site token cache."""
        timeout = settings.upstream_timeout_seconds
        http = httpx.AsyncClient(timeout=timeout if timeout > 0 else None)
        client = cls(
            http,
            api_key=settings.mindbody_api_key,
            site_id=settings.mindbody_site_id,
            base_url=settings.mindbody_base_url,
        )
        client.use_site_credentials(
            settings.mindbody_username,
            settings.mindbody_password,
            ttl=timedelta(hours=settings.token_ttl_hours),
            refresh_buffer=timedelta(minutes=settings.token_refresh_buffer_minutes),
        )
        return client

    def use_site_credentials(
        self,
        username: str,
        password: str,
        ttl: timedelta = timedelta(hours=24),
        refresh_buffer: timedelta = timedelta(minutes=5),
    ) -> TokenCache:
        """Attach a TokenCache that logs in with the site's own credentials."""

        async def issue() -> str:
            data = await self.issue_token(username, password)
            return data["AccessToken"]

        cache = TokenCache(issue, ttl=ttl, refresh_buffer=refresh_buffer)
        self.tokens = cache
        return cache

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _headers(self, token: str | None = None) -> dict[str, str]:
        headers = {
            "Api-Key": self._api_key,
            "SiteId": self._site_id,
            "Content-Type": "application/json",
        }
        if token:
            headers["Authorization"] = token
        return headers

    async def _send(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        url = f"{self._base_url}{path}"
        logger.info("%s %s", method, path)
        try:
            return await self._http.request(
                method, url, params=params, json=json, headers=headers
            )
        except httpx.HTTPError as exc:
            logger.error("Upstream %s %s failed: %s", method, path, exc)
            raise UpstreamRequestError(
                f"Could not reach the booking service: {exc.__class__.__name__}"
            ) from exc

    @staticmethod
    def _payload(response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return response.text

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def issue_token(self, username: str, password: str) -> dict[str, Any]:
        """Exchange username/password for an upstream access token.

        Returns the raw upstream body, which holds at least ``AccessToken``
        and usually ``User``.
        """
        response = await self._send(
            "POST",
            "/usertoken/issue",
            self._headers(),
            json={"Username": username, "Password": password},
        )
        payload = self._payload(response)
        if not response.is_success:
            logger.warning("Token issue rejected (status %d)", response.status_code)
            raise UpstreamAuthError(
                upstream_error_message(payload, "Authentication failed")
            )
        if not isinstance(payload, dict) or not payload.get("AccessToken"):
            raise UpstreamAuthError("Authentication failed: no access token returned")
        return payload

    async def request(
        self,
        path: str,
        method: str = "GET",
        params: dict[str, Any] | None = None,
        json: Any = None,
        user_token: str | None = None,
    ) -> Any:
        """Issue one upstream call and return its parsed JSON body.

        The caller's ``user_token`` takes precedence over the site token.

        Raises:
            UpstreamRequestError: non-2xx status or transport failure.
            UpstreamAuthError: the site token could not be obtained.
        """
        token = user_token
        if not token:
            if self.tokens is None:
                raise ConfigurationError("No site credentials configured")
            token = await self.tokens.get_token()

        response = await self._send(
            method, path, self._headers(token), params=params, json=json
        )
        payload = self._payload(response)
        if not response.is_success:
            logger.warning(
                "Upstream %s %s returned %d", method, path, response.status_code
            )
            raise UpstreamRequestError(
                upstream_error_message(
                    payload, f"Booking service error ({response.status_code})"
                ),
                upstream_status=response.status_code,
                payload=payload,
            )
        if isinstance(payload, str):
            raise UpstreamRequestError(
                "Booking service returned a non-JSON response",
                upstream_status=response.status_code,
            )
        return payload

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        user_token: str | None = None,
    ) -> Any:
        return await self.request(path, "GET", params=params, user_token=user_token)

    async def post(
        self,
        path: str,
        json: Any = None,
        user_token: str | None = None,
    ) -> Any:
        return await self.request(path, "POST", json=json, user_token=user_token)

    async def aclose(self) -> None:
        await self._http.aclose()
