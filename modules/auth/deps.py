"""
Auth Module - Dependencies
===========================
FastAPI dependencies for user authentication and authorization.
These are injected into route handlers via Depends().

The bearer token comes from the identity provider; its `sub` claim is the user id.
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from config.database import get_db
from common.exceptions import AuthenticationRequiredError, AuthorizationError
from common.helpers import safe_int
from common.security import decode_token, extract_bearer
from modules.user.models import User


def get_current_active_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Identify the current user from the Authorization header.
    Returns User object or None.
    """
    token = extract_bearer(authorization)
    if not token:
        return None

    payload = decode_token(token)
    if not payload:
        return None

    user_id = safe_int(payload.get("sub"))
    if user_id is None:
        return None

    return db.query(User).filter(User.id == user_id, User.is_active == True).first()


def require_login(user=Depends(get_current_active_user)) -> User:
    """Require any authenticated active user. Raises 401 if not logged in."""
    if not user:
        raise AuthenticationRequiredError()
    return user


def require_admin(user=Depends(get_current_active_user)) -> User:
    """Only allow admin users. 401 when anonymous, 403 when not an admin."""
    if not user:
        raise AuthenticationRequiredError()
    if not user.is_admin:
        raise AuthorizationError()
    return user
