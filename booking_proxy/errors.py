"""Error taxonomy for the booking proxy.

Every error a route can produce is a ``ProxyError`` subclass carrying the
HTTP status it maps to.  ``app.py`` registers one exception handler that
renders them into the ``{"success": false, "error": ...}`` envelope, so
route code raises instead of building error responses by hand.

  ConfigurationError     missing credentials           (fatal at startup)
  AuthenticationError    login refused                 401
  UpstreamAuthError      token exchange rejected       401
  UpstreamRequestError   non-2xx / transport failure   500
  ResponseShapeError     unrecognised upstream payload 500
  MissingParameterError  required input absent         400
  NotFoundError          lookup found nothing          404
  ConflictError          duplicate resource            409
"""

from __future__ import annotations

from typing import Any

from fastapi import status


class ProxyError(Exception):
    """Base class; subclasses set ``status_code``."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict[str, Any]:
        """Error envelope body."""
        body: dict[str, Any] = {"success": False, "error": self.message}
        body.update({k: v for k, v in self.extra.items() if v is not None})
        return body


class ConfigurationError(ProxyError):
    pass


class AuthenticationError(ProxyError):
    status_code = status.HTTP_401_UNAUTHORIZED


class UpstreamAuthError(AuthenticationError):
    """The upstream refused a token exchange or credential check."""


class UpstreamRequestError(ProxyError):
    """The upstream answered with a non-2xx status or could not be reached.

    ``upstream_status`` is ``None`` for transport failures.  The upstream
    payload is kept for diagnostics and attached to the error envelope.
    """

    def __init__(
        self,
        message: str,
        upstream_status: int | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message, upstreamStatus=upstream_status, details=payload)
        self.upstream_status = upstream_status
        self.payload = payload


class ResponseShapeError(ProxyError):
    def __init__(self, message: str, keys: list[str] | None = None) -> None:
        super().__init__(message, responseKeys=keys)
        self.keys = keys or []


class MissingParameterError(ProxyError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, fields: list[str]) -> None:
        noun = "parameter" if len(fields) == 1 else "parameters"
        super().__init__(
            f"Missing required {noun}: {', '.join(fields)}",
            missing=list(fields),
        )
        self.fields = list(fields)


class NotFoundError(ProxyError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ProxyError):
    status_code = status.HTTP_409_CONFLICT
