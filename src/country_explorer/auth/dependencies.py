"""FastAPI authentication dependencies."""

from __future__ import annotations

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from country_explorer.auth.service import AuthService
from country_explorer.db.models import User
from country_explorer.dependencies import get_auth_service
from country_explorer.errors import Unauthenticated

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),  # noqa: B008
    auth: AuthService = Depends(get_auth_service),  # noqa: B008
) -> User:
    """
    Extract and verify the bearer access token, return the User model.

    Raises 401 when the header is missing, the token is invalid, expired or of
    the wrong kind, or its user no longer exists.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Access denied. No token provided.")
    return await auth.authenticate(credentials.credentials)
