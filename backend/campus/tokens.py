"""Password hashing and JWT helpers.

Access tokens carry the profile id as `sub` plus the profile `email` and
are short lived; refresh tokens are signed with a separate secret, carry
a random `jti` so two consecutive refresh tokens never collide, and live
for days. Only a hash of the current refresh token is stored.
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext

from .config import settings
from .errors import AuthenticationError
from .models import Profile

PWD_CTX = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return PWD_CTX.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Return True if `password` matches `hashed`; malformed hashes never match."""
    if not hashed:
        return False
    try:
        return PWD_CTX.verify(password, hashed)
    except ValueError:
        return False


def _encode(payload: dict, secret: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    claims = dict(payload, iat=now, exp=now + lifetime)
    return jwt.encode(claims, secret, algorithm=settings.JWT_ALGORITHM)


def create_access_token(profile: Profile) -> str:
    return _encode(
        {"sub": str(profile.id), "email": profile.email},
        settings.JWT_ACCESS_SECRET,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(profile: Profile) -> str:
    return _encode(
        {"sub": str(profile.id), "email": profile.email, "jti": uuid.uuid4().hex},
        settings.JWT_REFRESH_SECRET,
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def _decode(token: str, secret: str) -> dict:
    try:
        return jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError('Token expired')
    except jwt.InvalidTokenError:
        raise AuthenticationError('Invalid token')


def decode_access_token(token: str) -> dict:
    """Decode and verify an access token.

    Returns the decoded payload on success or raises `AuthenticationError`.
    """
    return _decode(token, settings.JWT_ACCESS_SECRET)


def decode_refresh_token(token: str) -> dict:
    return _decode(token, settings.JWT_REFRESH_SECRET)
