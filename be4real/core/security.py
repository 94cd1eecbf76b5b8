# Implements security-related functionality:
# JWT token generation and verification (issuer/audience bound)
# Password hashing and verification using bcrypt
# One-time verification codes for account verification and password reset

from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union
import secrets
import logging

from jose import jwt, JWTError
from passlib.context import CryptContext

from be4real.core.config import settings

logger = logging.getLogger("be4real")

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

VERIFICATION_CODE_LENGTH = 6

def create_access_token(subject: Union[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "exp": expire,
        "sub": str(subject),
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def generate_verification_code() -> str:
    return str(secrets.randbelow(10 ** VERIFICATION_CODE_LENGTH)).zfill(VERIFICATION_CODE_LENGTH)

def verify_access_token(token: str) -> Optional[str]:
    """Resolve a bearer token to a user id, or None if it is not valid"""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except JWTError as e:
        logger.warning(f"JWT verification error: {e}")
        return None

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("Token payload missing 'sub' field")
        return None
    if payload.get("exp") is None:
        logger.warning("Token payload missing 'exp' field")
        return None

    return user_id
