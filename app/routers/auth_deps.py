"""
Bearer-token dependencies.
Tokens are issued by the auth service; here they are only verified and
resolved to an ``Actor`` for the service layer.
"""
import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.exceptions import AccessDeniedError, AuthenticationError
from app.core.security import Actor, decode_access_token
from app.database import get_db
from app.models.user import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _resolve_actor(credentials: Optional[HTTPAuthorizationCredentials], db: Session) -> Actor:
    if credentials is None:
        raise AuthenticationError("Access token is required")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise AuthenticationError("Could not validate credentials")
    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: Token expired")
        raise AuthenticationError("TOKEN_EXPIRED")
    if payload.get("type") != "access":
        logger.warning("Authentication failed: Invalid token type")
        raise AuthenticationError("Invalid token type")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        logger.warning("Authentication failed: Missing subject in token")
        raise AuthenticationError("Missing subject in token")

    user = db.get(User, user_id)
    if user is None:
        logger.warning(f"Authentication failed: User {user_id} not found")
        raise AuthenticationError("User not found")
    if not user.is_active:
        logger.warning(f"Authentication failed: User {user_id} is inactive")
        raise AccessDeniedError("User is inactive")

    return Actor(id=user.id, email=user.email, role=user.role)


def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Actor:
    return _resolve_actor(credentials, db)


def get_optional_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[Actor]:
    """For public endpoints whose answer depends on who is asking."""
    if credentials is None:
        return None
    return _resolve_actor(credentials, db)
