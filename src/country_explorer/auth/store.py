"""User persistence.

Emails are stored lower-cased and looked up case-insensitively; the unique
index on ``users.email`` is the final guard against duplicate registration.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from country_explorer.db.models import User


class DuplicateEmailError(ValueError):
    """Raised when inserting a user whose email is already taken."""


class UserStore:
    """Credential store over one database session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, user_id: str) -> User | None:
        """Fetch a user by ID."""
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive)."""
        result = await self.session.execute(select(User).where(func.lower(User.email) == email.strip().lower()))
        return result.scalar_one_or_none()

    async def create(self, *, email: str, password_hash: str, first_name: str, last_name: str) -> User:
        """Insert a new user and commit.

        Raises:
            DuplicateEmailError: If the email is already registered.
        """
        now = datetime.now(timezone.utc)
        user = User(
            email=email.strip().lower(),
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            favorites=[],
            created_at=now,
            updated_at=now,
        )
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            msg = "Email already registered"
            raise DuplicateEmailError(msg) from e
        return user

    async def save(self, user: User) -> User:
        """Touch ``updated_at`` and commit pending changes to ``user``."""
        user.updated_at = datetime.now(timezone.utc)
        await self.session.commit()
        return user
