from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from notes_api.config import load_settings
from notes_api.errors import Unauthorized

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """The caller of a request: a user id, or anonymous when ``user_id`` is None."""

    user_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)


ANONYMOUS = Identity()


def _secret() -> str:
    s = load_settings().jwt_secret
    if not s:
        raise RuntimeError("JWT_SECRET is not set")
    return s


def create_access_token(subject: str, expires_in: Optional[timedelta] = None) -> str:
    settings = load_settings()
    now = datetime.now(timezone.utc)
    exp = now + (expires_in if expires_in is not None else timedelta(minutes=settings.jwt_exp_minutes))
    payload = {"sub": subject, "iat": int(now.timestamp()), "exp": int(exp.timestamp())}
    return jwt.encode(payload, _secret(), algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    return jwt.decode(token, _secret(), algorithms=[load_settings().jwt_algorithm])


def identity_from_token(token: Optional[str]) -> Identity:
    if not token:
        return ANONYMOUS
    try:
        payload = decode_token(token)
    except JWTError as exc:
        logger.warning("Rejected session token: %s", exc)
        return ANONYMOUS
    sub = payload.get("sub")
    if not sub:
        logger.warning("Rejected session token without subject")
        return ANONYMOUS
    return Identity(user_id=str(sub))


def resolve_identity(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Identity:
    """
    Bearer token first, then the session cookie. Never raises for a bad
    credential; the caller just comes out anonymous.
    """
    if creds is not None and creds.scheme.lower() == "bearer":
        return identity_from_token(creds.credentials)
    cookie = request.cookies.get(load_settings().session_cookie_name)
    return identity_from_token(cookie)


def require_identity(identity: Identity = Depends(resolve_identity)) -> Identity:
    if not identity.is_authenticated:
        raise Unauthorized()
    return identity
