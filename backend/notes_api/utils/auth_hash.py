"""Password hashes for accounts of the built-in identity provider.

bcrypt through passlib. The cost comes from ``BCRYPT_ROUNDS``; raising it
makes stored hashes with a lower cost count as outdated, and login replaces
them (see ``verify_password``).
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from passlib.context import CryptContext

from notes_api.config import load_settings


@lru_cache(maxsize=None)
def _context(rounds: Optional[int]) -> CryptContext:
    if rounds is None:
        return CryptContext(schemes=["bcrypt"], deprecated="auto")
    return CryptContext(
        schemes=["bcrypt"],
        deprecated="auto",
        bcrypt__default_rounds=rounds,
        bcrypt__min_rounds=rounds,
    )


def password_context() -> CryptContext:
    return _context(load_settings().bcrypt_rounds)


def hash_password(plain: str) -> str:
    return password_context().hash(plain)


def verify_password(plain: str, hashed: str) -> tuple[bool, Optional[str]]:
    """Check ``plain`` against ``hashed``.

    Returns ``(matches, replacement)``. ``replacement`` is a fresh hash when
    the stored one matched but was made with a cost below the current
    setting, else None. Unrecognised hashes never match.
    """
    try:
        return password_context().verify_and_update(plain, hashed)
    except ValueError:
        return False, None
