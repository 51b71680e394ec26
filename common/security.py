"""
DineFlow - Security Utilities
==============================
JWT bearer tokens. Tokens are issued by the identity provider; this module
only signs (for the provider and tests) and verifies them.
"""

import logging
from datetime import timedelta
from typing import Optional

from jose import jwt, JWTError

from config.settings import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from common.helpers import now_utc

logger = logging.getLogger("dineflow.security")


def create_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    """Create JWT token for any user type. `sub` must carry the user id."""
    to_encode = data.copy()
    minutes = ACCESS_TOKEN_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    to_encode["exp"] = now_utc() + timedelta(minutes=minutes)
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Decode a JWT token. Returns payload or None."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.debug(f"Rejected bearer token: {e}")
        return None


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    """Return the token part of an `Authorization: Bearer <token>` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
