import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, as established by bearer-token verification."""
    id: int
    email: str
    role: str


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign an access token. Tokens are normally minted by the auth service;
    this helper shares its claim layout (sub = user id, type = access).
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire, "type": to_encode.get("type", "access")})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.token_algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Returns the claims, ``{"error": "TOKEN_EXPIRED"}`` or None when invalid."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.token_algorithm])
    except ExpiredSignatureError:
        return {"error": "TOKEN_EXPIRED"}
    except JWTError as e:
        logger.debug(f"Token rejected: {e}")
        return None
