"""User token passthrough.

The front end may hold its own upstream token (from ``/api/auth/login``)
and send it in the ``Authorization`` header.  When present it is forwarded
verbatim and takes precedence over the site-level token; when absent the
upstream client falls back to the cached site token.

Nothing here validates the token.  The upstream does that, and a rejected
token surfaces as an upstream request error.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Header


async def user_token(
    authorization: Optional[str] = Header(default=None),
) -> Optional[str]:
    """FastAPI dependency: the caller's own upstream token, if any."""
    if authorization is None:
        return None
    token = authorization.strip()
    return token or None
