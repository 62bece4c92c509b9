"""Authentication helpers and FastAPI security dependencies.

`validate` turns a verified access-token payload into the `Profile` it
names. `get_optional_user` reads the bearer token from the request and
returns `None` when no token was sent, which lets the policy guard fail
closed; a token that is present but invalid, or whose profile no longer
exists, is rejected with 401 straight away. `get_current_user` is the
strict variant used by handlers that need the requester's identity.
"""

from typing import Optional

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from . import repositories, tokens
from .database import get_session
from .errors import AuthenticationError
from .models import Profile

bearer_scheme = HTTPBearer(auto_error=False)


def validate(payload: dict, session: Session) -> Optional[Profile]:
    """Return the profile named by the token subject, or `None`."""
    try:
        profile_id = int(payload.get('sub'))
    except (TypeError, ValueError):
        return None
    return repositories.ProfileRepository(session).get(profile_id)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    db: Session = Depends(get_session),
) -> Optional[Profile]:
    if credentials is None:
        return None
    payload = tokens.decode_access_token(credentials.credentials)
    user = validate(payload, db)
    if user is None:
        raise AuthenticationError('User not found')
    return user


def get_current_user(user: Optional[Profile] = Depends(get_optional_user)) -> Profile:
    """FastAPI dependency that returns the authenticated profile or raises 401."""
    if user is None:
        raise AuthenticationError('Not authenticated')
    return user


def get_refresh_credentials(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> str:
    """Return the raw bearer token for the refresh endpoint."""
    if credentials is None:
        raise AuthenticationError('Refresh token required')
    return credentials.credentials
