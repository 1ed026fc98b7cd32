"""
API error taxonomy.

Every error a client can observe is an ``ApiError`` subclass. The global
handlers in ``country_explorer.middleware.error_handler`` render them into the
shared envelope ``{success, error, details?, statusCode}``.
"""

from __future__ import annotations

from typing import Any


class ApiError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, error: str | None = None, details: Any = None) -> None:  # noqa: ANN401
        self.error = error or self.default_message
        self.details = details
        super().__init__(self.error)


class ValidationError(ApiError):
    """Malformed or missing input."""

    status_code = 400
    default_message = "Validation error"


class Unauthenticated(ApiError):
    """Missing or wrong credentials, or the token's user no longer exists."""

    status_code = 401
    default_message = "Authentication required"


class InvalidToken(Unauthenticated):
    """Token signature, issuer or structure is invalid."""

    default_message = "Invalid token"


class ExpiredToken(Unauthenticated):
    """Token is validly signed but past its expiry."""

    default_message = "Token expired"


class WrongTokenKind(Unauthenticated):
    """An access token was presented where a refresh token is required, or vice versa."""

    default_message = "Invalid token type"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not Found"


class Conflict(ApiError):
    status_code = 409
    default_message = "Conflict"


class RateLimited(ApiError):
    status_code = 429
    default_message = "Too many requests from this IP, please try again later."


class InternalError(ApiError):
    status_code = 500


class UpstreamUnavailable(Exception):
    """The country provider could not be reached or answered garbage.

    Never rendered to clients: callers recover with the built-in sample data.
    """


def error_body(status_code: int, error: str, details: Any = None) -> dict[str, Any]:  # noqa: ANN401
    """Build the uniform error envelope."""
    body: dict[str, Any] = {"success": False, "error": error, "statusCode": status_code}
    if details is not None:
        body["details"] = details
    return body
