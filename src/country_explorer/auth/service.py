"""
Authentication business logic.

Handles registration, login, token verification and refresh, profile edits,
favorites and password changes. Tokens are stateless: nothing about a session
is stored server-side, so logout is the client discarding its tokens.
"""

from __future__ import annotations

from functools import lru_cache

import structlog

from country_explorer.auth.jwt import TokenType, create_access_token, create_refresh_token, verify_token
from country_explorer.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from country_explorer.auth.schemas import TokenPair
from country_explorer.auth.store import DuplicateEmailError, UserStore
from country_explorer.config import Settings
from country_explorer.db.models import User
from country_explorer.errors import Conflict, Unauthenticated, ValidationError

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid email or password"
MAX_COUNTRY_ID_LENGTH = 100


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Compared against on unknown emails so both login failures cost one hash verification.
    return hash_password("dummy-password-for-timing")


class AuthService:
    """Account operations over a ``UserStore``."""

    def __init__(self, store: UserStore, settings: Settings) -> None:
        self.store = store
        self.settings = settings

    # ---------------------------------------------------------------------------
    # Tokens
    # ---------------------------------------------------------------------------

    def issue_tokens(self, user: User) -> TokenPair:
        """Create a fresh access + refresh token pair for ``user``."""
        return TokenPair(
            access_token=create_access_token(user.id, self.settings),
            refresh_token=create_refresh_token(user.id, self.settings),
            token_type="bearer",
            expires_in=self.settings.jwt_access_token_expire_minutes * 60,
        )

    def verify(self, token: str, expected_type: TokenType = "access") -> str:
        """Return the user id encoded in a valid token.

        Raises InvalidToken, ExpiredToken or WrongTokenKind.
        """
        payload = verify_token(token, self.settings, expected_type=expected_type)
        return str(payload["sub"])

    async def authenticate(self, token: str) -> User:
        """Verify an access token and re-resolve its user."""
        user = await self.store.get_by_id(self.verify(token, "access"))
        if user is None:
            raise Unauthenticated("Invalid token. User not found.")
        return user

    async def refresh(self, refresh_token: str) -> tuple[User, TokenPair]:
        """Exchange a refresh token for a new pair.

        The presented refresh token stays valid until it expires; there is no
        server-side revocation list.
        """
        user = await self.store.get_by_id(self.verify(refresh_token, "refresh"))
        if user is None:
            raise Unauthenticated("User not found")
        logger.info("token_refreshed", user_id=user.id)
        return user, self.issue_tokens(user)

    # ---------------------------------------------------------------------------
    # Registration / login
    # ---------------------------------------------------------------------------

    async def register(self, email: str, password: str, first_name: str, last_name: str) -> tuple[User, TokenPair]:
        """
        Register a new user with email + password.

        Raises:
            ValidationError: If the password is too weak.
            Conflict: If the email is already registered (any letter case).
        """
        try:
            validate_password_strength(password)
        except PasswordStrengthError as e:
            raise ValidationError("Validation error", details=str(e)) from e

        if await self.store.get_by_email(email) is not None:
            raise Conflict("User already exists with this email")

        try:
            user = await self.store.create(
                email=email,
                password_hash=hash_password(password),
                first_name=first_name,
                last_name=last_name,
            )
        except DuplicateEmailError as e:
            raise Conflict("User already exists with this email") from e

        logger.info("user_registered", user_id=user.id)
        return user, self.issue_tokens(user)

    async def login(self, email: str, password: str) -> tuple[User, TokenPair]:
        """
        Authenticate with email + password.

        Unknown email and wrong password raise the same Unauthenticated error.
        """
        user = await self.store.get_by_email(email)
        if user is None:
            verify_password(password, _dummy_hash())
            raise Unauthenticated(INVALID_CREDENTIALS)

        if not verify_password(password, user.password_hash):
            logger.info("login_failed", user_id=user.id)
            raise Unauthenticated(INVALID_CREDENTIALS)

        if check_needs_rehash(user.password_hash):
            user.password_hash = hash_password(password)
            logger.info("password_rehashed", user_id=user.id)

        await self.store.save(user)
        logger.info("user_logged_in", user_id=user.id)
        return user, self.issue_tokens(user)

    # ---------------------------------------------------------------------------
    # Profile
    # ---------------------------------------------------------------------------

    async def _require_user(self, user_id: str) -> User:
        user = await self.store.get_by_id(user_id)
        if user is None:
            raise Unauthenticated("User not found")
        return user

    async def get_profile(self, user_id: str) -> User:
        return await self._require_user(user_id)

    async def update_profile(self, user_id: str, first_name: str | None = None, last_name: str | None = None) -> User:
        """Update first/last name. At least one must be given."""
        if not first_name and not last_name:
            raise ValidationError("No valid fields to update")

        user = await self._require_user(user_id)
        if first_name:
            user.first_name = first_name
        if last_name:
            user.last_name = last_name
        await self.store.save(user)
        logger.info("profile_updated", user_id=user.id)
        return user

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> User:
        """Replace the password after checking the current one."""
        user = await self._require_user(user_id)
        if not verify_password(current_password, user.password_hash):
            raise Unauthenticated("Current password is incorrect")

        try:
            validate_password_strength(new_password)
        except PasswordStrengthError as e:
            raise ValidationError("Validation error", details=str(e)) from e

        user.password_hash = hash_password(new_password)
        await self.store.save(user)
        logger.info("password_changed", user_id=user.id)
        return user

    # ---------------------------------------------------------------------------
    # Favorites
    # ---------------------------------------------------------------------------

    @staticmethod
    def _clean_country_id(country_id: str) -> str:
        cleaned = country_id.strip()
        if not cleaned or len(cleaned) > MAX_COUNTRY_ID_LENGTH:
            raise ValidationError("Invalid country identifier")
        return cleaned

    async def add_favorite(self, user_id: str, country_id: str) -> list[str]:
        """Append ``country_id`` unless already present. Idempotent."""
        country_id = self._clean_country_id(country_id)
        user = await self._require_user(user_id)
        if country_id not in user.favorites:
            # Assign a new list so the JSON column is flagged dirty.
            user.favorites = [*user.favorites, country_id]
            await self.store.save(user)
        return list(user.favorites)

    async def remove_favorite(self, user_id: str, country_id: str) -> list[str]:
        """Remove ``country_id`` if present. Idempotent."""
        country_id = self._clean_country_id(country_id)
        user = await self._require_user(user_id)
        if country_id in user.favorites:
            user.favorites = [f for f in user.favorites if f != country_id]
            await self.store.save(user)
        return list(user.favorites)
