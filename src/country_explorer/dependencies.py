"""Shared FastAPI dependencies.

Collaborators live on ``app.state`` (see ``country_explorer.main.create_app``);
these helpers hand them to route handlers.
"""

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from country_explorer.auth.service import AuthService
from country_explorer.auth.store import UserStore
from country_explorer.config import Settings
from country_explorer.countries.service import CountryService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session (FastAPI dependency)."""
    async for session in request.app.state.database.session():
        yield session


def get_country_service(request: Request) -> CountryService:
    return CountryService(request.app.state.upstream, request.app.state.result_cache)


def get_auth_service(
    session: AsyncSession = Depends(get_session),  # noqa: B008
    settings: Settings = Depends(get_app_settings),  # noqa: B008
) -> AuthService:
    return AuthService(UserStore(session), settings)
