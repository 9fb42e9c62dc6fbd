"""Security utilities for StudyTrack: password hashing and JWT token operations.

Access and refresh tokens are both HS256 JWTs carrying the user id (``sub``),
email, role and a ``type`` claim so one kind can never stand in for the other.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext

from studytrack.app.core.settings import get_settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # malformed or unknown hash format
        return False


def _encode(claims: Dict[str, Any], token_type: str, expires_delta: timedelta) -> str:
    settings = get_settings()
    payload = dict(claims)
    payload["type"] = token_type
    payload["exp"] = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")


def _user_claims(user_id: int, email: Optional[str], role: Optional[str]) -> Dict[str, Any]:
    claims: Dict[str, Any] = {"sub": str(user_id)}
    if email is not None:
        claims["email"] = email
    if role is not None:
        claims["role"] = role
    return claims


def create_access_token(
    user_id: int,
    email: Optional[str] = None,
    role: Optional[str] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    settings = get_settings()
    minutes = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    return _encode(_user_claims(user_id, email, role), ACCESS_TOKEN_TYPE, timedelta(minutes=minutes))


def create_refresh_token(
    user_id: int,
    email: Optional[str] = None,
    role: Optional[str] = None,
    expires_days: Optional[int] = None,
) -> str:
    settings = get_settings()
    days = expires_days if expires_days is not None else settings.refresh_token_expire_days
    return _encode(_user_claims(user_id, email, role), REFRESH_TOKEN_TYPE, timedelta(days=days))


def decode_token(token: str, expected_type: str = ACCESS_TOKEN_TYPE) -> Dict[str, Any]:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=["HS256"])
    except jwt.ExpiredSignatureError as exc:
        raise ValueError("Expired token") from exc
    except jwt.InvalidTokenError as exc:
        raise ValueError("Invalid token") from exc
    if payload.get("type") != expected_type:
        raise ValueError("Wrong token type")
    return payload


def decode_access_token(token: str) -> Dict[str, Any]:
    return decode_token(token, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> Dict[str, Any]:
    return decode_token(token, REFRESH_TOKEN_TYPE)
