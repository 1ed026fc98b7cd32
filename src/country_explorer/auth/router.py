"""Authentication router for /api/v1/auth/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from country_explorer.auth.dependencies import get_current_user
from country_explorer.auth.schemas import (
    AuthPayload,
    AuthResponse,
    ChangePasswordRequest,
    FavoritesEnvelope,
    LoginRequest,
    MessageResponse,
    ProfileUpdateRequest,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
    TokenResponse,
    UserEnvelope,
    UserResponse,
)
from country_explorer.auth.service import AuthService
from country_explorer.db.models import User
from country_explorer.dependencies import get_auth_service

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


def _user_response(user: User) -> UserResponse:
    """Build a UserResponse from a User model."""
    return UserResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        full_name=user.full_name,
        favorites=list(user.favorites),
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def _auth_response(user: User, tokens: TokenPair, message: str) -> AuthResponse:
    return AuthResponse(data=AuthPayload(user=_user_response(user), tokens=tokens), message=message)


# ---------------------------------------------------------------------------
# Registration / login / tokens
# ---------------------------------------------------------------------------


@router.post("/register", response_model=AuthResponse, status_code=201, response_model_exclude_none=True)
async def register(
    body: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),  # noqa: B008
) -> AuthResponse:
    """Register with email + password + names."""
    user, tokens = await auth.register(body.email, body.password, body.first_name, body.last_name)
    return _auth_response(user, tokens, "User registered successfully")


@router.post("/login", response_model=AuthResponse, response_model_exclude_none=True)
async def login(
    body: LoginRequest,
    auth: AuthService = Depends(get_auth_service),  # noqa: B008
) -> AuthResponse:
    """Login with email + password."""
    user, tokens = await auth.login(body.email, body.password)
    return _auth_response(user, tokens, "Login successful")


@router.post("/refresh", response_model=TokenResponse, response_model_exclude_none=True)
async def refresh(
    body: RefreshRequest,
    auth: AuthService = Depends(get_auth_service),  # noqa: B008
) -> TokenResponse:
    """Exchange a refresh token for a new token pair."""
    _user, tokens = await auth.refresh(body.refresh_token)
    return TokenResponse(data={"tokens": tokens}, message="Token refreshed successfully")


@router.post("/logout", response_model=MessageResponse)
async def logout() -> MessageResponse:
    """Tokens are stateless; the client discards them."""
    return MessageResponse(message="Logged out successfully. Please remove token from client.")


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


@router.get("/profile", response_model=UserEnvelope, response_model_exclude_none=True)
async def get_profile(user: User = Depends(get_current_user)) -> UserEnvelope:  # noqa: B008
    """Current user's profile."""
    return UserEnvelope(data=_user_response(user), message="Profile retrieved successfully")


@router.put("/profile", response_model=UserEnvelope, response_model_exclude_none=True)
async def update_profile(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),  # noqa: B008
    auth: AuthService = Depends(get_auth_service),  # noqa: B008
) -> UserEnvelope:
    """Update first and/or last name."""
    updated = await auth.update_profile(user.id, body.first_name, body.last_name)
    return UserEnvelope(data=_user_response(updated), message="Profile updated successfully")


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),  # noqa: B008
    auth: AuthService = Depends(get_auth_service),  # noqa: B008
) -> MessageResponse:
    """Change password (requires the current one)."""
    await auth.change_password(user.id, body.current_password, body.new_password)
    return MessageResponse(message="Password changed successfully")


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------


@router.post("/favorites/{country_id}", response_model=FavoritesEnvelope, response_model_exclude_none=True)
async def add_favorite(
    country_id: str,
    user: User = Depends(get_current_user),  # noqa: B008
    auth: AuthService = Depends(get_auth_service),  # noqa: B008
) -> FavoritesEnvelope:
    """Add a country to the user's favorites (no-op if already present)."""
    favorites = await auth.add_favorite(user.id, country_id)
    return FavoritesEnvelope(data={"favorites": favorites}, message="Country added to favorites")


@router.delete("/favorites/{country_id}", response_model=FavoritesEnvelope, response_model_exclude_none=True)
async def remove_favorite(
    country_id: str,
    user: User = Depends(get_current_user),  # noqa: B008
    auth: AuthService = Depends(get_auth_service),  # noqa: B008
) -> FavoritesEnvelope:
    """Remove a country from the user's favorites (no-op if absent)."""
    favorites = await auth.remove_favorite(user.id, country_id)
    return FavoritesEnvelope(data={"favorites": favorites}, message="Country removed from favorites")
