"""
JWT token management.

Tokens carry a ``type`` claim (``access`` or ``refresh``) so one kind can never
stand in for the other. HS* algorithms sign with ``jwt_secret_key``; RS*/ES*
algorithms read PEM keys from the configured paths.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import jwt

from country_explorer.config import Settings
from country_explorer.errors import ExpiredToken, InvalidToken, WrongTokenKind

TokenType = Literal["access", "refresh"]


@lru_cache
def _read_key(path: str) -> str:
    return Path(path).read_text()


def _signing_key(settings: Settings) -> str:
    if settings.jwt_algorithm.startswith("HS"):
        return settings.jwt_secret_key
    return _read_key(settings.jwt_private_key_path)


def _verification_key(settings: Settings) -> str:
    if settings.jwt_algorithm.startswith("HS"):
        return settings.jwt_secret_key
    return _read_key(settings.jwt_public_key_path)


def _encode(user_id: str, token_type: TokenType, lifetime: timedelta, settings: Settings) -> str:
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "type": token_type,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + lifetime,
        "iss": settings.jwt_issuer,
    }
    return jwt.encode(payload, _signing_key(settings), algorithm=settings.jwt_algorithm)


def create_access_token(user_id: str, settings: Settings) -> str:
    """Create a short-lived access token (15 minutes by default)."""
    return _encode(user_id, "access", timedelta(minutes=settings.jwt_access_token_expire_minutes), settings)


def create_refresh_token(user_id: str, settings: Settings) -> str:
    """Create a long-lived refresh token (7 days by default)."""
    return _encode(user_id, "refresh", timedelta(days=settings.jwt_refresh_token_expire_days), settings)


def verify_token(token: str, settings: Settings, expected_type: TokenType = "access") -> dict[str, Any]:
    """
    Verify and decode a JWT token.

    Args:
        token: The encoded JWT string.
        settings: Settings holding the key material and issuer.
        expected_type: Expected token type ("access" or "refresh").

    Returns:
        Decoded payload dictionary.

    Raises:
        ExpiredToken: If the token is validly signed but expired.
        InvalidToken: If the signature, issuer or structure is invalid.
        WrongTokenKind: If the token's type claim is not ``expected_type``.
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            _verification_key(settings),
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "sub", "iss"]},
        )
    except jwt.ExpiredSignatureError:
        raise ExpiredToken("Token expired") from None
    except jwt.InvalidTokenError:
        raise InvalidToken("Invalid token") from None

    if payload.get("type") != expected_type:
        msg = f"Expected token type '{expected_type}', got '{payload.get('type')}'"
        raise WrongTokenKind(msg)

    return payload
