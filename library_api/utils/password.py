"""
Password hashing for locally provisioned accounts (bcrypt).

Passwords are pre-hashed with SHA-256 so inputs longer than bcrypt's
72-byte limit are not silently truncated.
"""

import base64
import hashlib

import bcrypt

from library_api.settings import app_settings


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str, rounds: int | None = None) -> str:
    """
    Return the bcrypt hash of password.

    Args:
        password: Plain-text password.
        rounds: bcrypt cost factor (default: PASSWORD_HASH_ROUNDS setting).
    """
    salt = bcrypt.gensalt(rounds=rounds or app_settings.PASSWORD_HASH_ROUNDS)
    return bcrypt.hashpw(_prehash(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if plain_password matches hashed_password."""
    try:
        return bool(
            bcrypt.checkpw(
                _prehash(plain_password), hashed_password.encode("utf-8")
            )
        )
    except (ValueError, TypeError):
        return False
