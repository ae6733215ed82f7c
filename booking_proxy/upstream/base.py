"""Abstract base class for site-level token sources.

Anything that can hand out a bearer token for server-to-server upstream
calls implements this ABC.  The production implementation is
``TokenCache``; tests substitute their own.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class CachedToken:
    """A bearer token and the wall-clock time (epoch seconds) it expires."""

    value: str
    expires_at: float


class TokenProvider(ABC):
    """Source of the site-level bearer token."""

    @abstractmethod
    async def get_token(self) -> str:
        """Return a token usable right now.

        Raises:
            ProxyError: if a new token had to be issued and the exchange
                failed.  Callers are not expected to retry.
        """

    @abstractmethod
    def invalidate(self) -> None:
        """Forget any cached token so the next ``get_token`` re-issues."""
