"""Security helpers (password hashing and session credentials)."""

from __future__ import annotations

import time
from typing import Optional

import jwt
from argon2 import PasswordHasher, exceptions as argon_exc

from .config import get_settings

_ph = PasswordHasher()
_PREFIX = "argon2$"


def hash_password(password: str) -> str:
    """Create a salted Argon2 hash with a prefix for detection."""
    hashed = _ph.hash(password)
    return f"{_PREFIX}{hashed}"


def verify_password(password: str, stored_hash: str | None) -> bool:
    stored = stored_hash or ""
    if not stored.startswith(_PREFIX):
        return False
    hashed = stored[len(_PREFIX) :]
    try:
        return _ph.verify(hashed, password or "")
    except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
        return False


def create_session_token(user_id: str, email: str, ttl_seconds: Optional[int] = None) -> str:
    """Sign a session credential carrying the user id (``sub``) and email."""
    settings = get_settings()
    ttl = ttl_seconds if ttl_seconds is not None else settings.session_ttl_seconds
    now = int(time.time())
    payload = {"sub": user_id, "email": email, "iat": now, "exp": now + ttl}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str | None) -> Optional[dict]:
    """Return the claims of a valid credential, None when expired/tampered/malformed."""
    if not token:
        return None
    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.InvalidTokenError:
        return None
    return claims
