from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Request
from jose import JWTError, jwt
from passlib.context import CryptContext

from slotbook.core.config import settings
from slotbook.core.logger import logger

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Compare a plain password against a stored bcrypt hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as e:
        logger.error(f"Password verification error: {e}")
        return False


def sign_token(user_id: str, email: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Issue a session JWT carrying the user's id and email.
    Defaults to TOKEN_EXPIRE_MINUTES from settings.
    """
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.TOKEN_EXPIRE_MINUTES))
    payload = {"userId": user_id, "email": email, "exp": expire}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> dict:
    """
    Decode and verify a session JWT.
    Raises JWTError if the signature, expiry or payload shape is wrong.
    """
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    if not payload.get("userId") or not payload.get("email"):
        raise JWTError("Invalid token payload.")
    return payload


async def get_current_user_id(request: Request) -> Optional[str]:
    """
    Resolve the authenticated user id from the session cookie.
    Returns None when there is no cookie or it does not verify.
    """
    session_token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not session_token:
        logger.debug("No session token found.")
        return None

    try:
        payload = verify_token(session_token)
    except JWTError as e:
        logger.warning(f"⚠️ Failed to verify session token: {e}")
        return None

    return payload["userId"]
