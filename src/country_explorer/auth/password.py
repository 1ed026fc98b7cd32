"""
Account password hashing (argon2id) and the password policy.

Hashes are self-describing ``$argon2id$...`` strings, so parameters can be
raised later; ``check_needs_rehash`` tells login when to upgrade a stored hash.
"""

from __future__ import annotations

from collections.abc import Callable

import argon2

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128
PASSWORD_SYMBOLS = "@$!%*?&"

_hasher = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,  # KiB
    parallelism=1,
    hash_len=32,
    salt_len=16,
    type=argon2.Type.ID,
)


class PasswordStrengthError(ValueError):
    """The password violates the policy. The message names the first failed rule."""


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """True when ``password`` matches. Mismatches and unreadable hashes give False."""
    try:
        return _hasher.verify(password_hash, password)
    except (argon2.exceptions.VerifyMismatchError, argon2.exceptions.InvalidHashError):
        return False


def check_needs_rehash(password_hash: str) -> bool:
    return _hasher.check_needs_rehash(password_hash)


_POLICY: list[tuple[Callable[[str], bool], str]] = [
    (lambda p: bool(p.strip()), "Password cannot be empty"),
    (lambda p: len(p) >= PASSWORD_MIN_LENGTH, f"Password must be at least {PASSWORD_MIN_LENGTH} characters"),
    (lambda p: len(p) <= PASSWORD_MAX_LENGTH, f"Password must not exceed {PASSWORD_MAX_LENGTH} characters"),
    (lambda p: any(c.isupper() for c in p), "Password must contain at least one uppercase letter"),
    (lambda p: any(c.islower() for c in p), "Password must contain at least one lowercase letter"),
    (lambda p: any(c.isdigit() for c in p), "Password must contain at least one digit"),
    (
        lambda p: any(c in PASSWORD_SYMBOLS for c in p),
        f"Password must contain at least one special character ({PASSWORD_SYMBOLS})",
    ),
]


def validate_password_strength(password: str) -> None:
    """Check ``password`` against the policy rules in order.

    Raises:
        PasswordStrengthError: On the first rule the password fails.
    """
    for passes, message in _POLICY:
        if not passes(password):
            raise PasswordStrengthError(message)
