"""In-memory cache for the site-level access token.

The token is exchanged for the configured username/password and reused
until ``expiry - refresh_buffer``.  Expiry is always ``issued + ttl``
(24 hours by default), independent of whatever lifetime the upstream
declares for the token.

Concurrent callers that find the cache stale may each issue a login
request; the last one to finish wins.  Token issue is idempotent, so no
lock is taken.
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import Awaitable, Callable

from .base import CachedToken, TokenProvider

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)
DEFAULT_REFRESH_BUFFER = timedelta(minutes=5)


class TokenCache(TokenProvider):
    """TokenProvider that caches one token in process memory."""

    def __init__(
        self,
        issuer: Callable[[], Awaitable[str]],
        ttl: timedelta = DEFAULT_TTL,
        refresh_buffer: timedelta = DEFAULT_REFRESH_BUFFER,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._issuer = issuer
        self._ttl = ttl
        self._refresh_buffer = refresh_buffer
        self._clock = clock
        self._cached: CachedToken | None = None

    @property
    def cached(self) -> CachedToken | None:
        return self._cached

    def is_fresh(self) -> bool:
        if self._cached is None:
            return False
        deadline = self._cached.expires_at - self._refresh_buffer.total_seconds()
        return self._clock() < deadline

    async def get_token(self) -> str:
        if self.is_fresh():
            return self._cached.value

        logger.info("Requesting new site access token")
        value = await self._issuer()
        self._cached = CachedToken(
            value=value,
            expires_at=self._clock() + self._ttl.total_seconds(),
        )
        logger.info("Site access token cached for %s", self._ttl)
        return value

    def invalidate(self) -> None:
        self._cached = None
