"""
Session tokens and community password hashing.
"""
import hashlib
import secrets
from datetime import datetime, timezone, timedelta

import jwt

from ..config import settings
from ..exceptions import AuthenticationError


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode()).hexdigest()


def verify_password(password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    return secrets.compare_digest(hash_password(password), hashed_password)


def create_token(community_id: str, community_name: str, role: str = "community_admin") -> str:
    """Create JWT token."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": community_id,
        "uid": community_id,
        "community": community_name,
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and validate JWT token."""
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")


def needs_refresh(payload: dict) -> bool:
    exp = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    remaining = (exp - datetime.now(timezone.utc)).total_seconds() / 60
    return remaining < settings.JWT_REFRESH_THRESHOLD_MINUTES
