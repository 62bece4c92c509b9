from fastapi import APIRouter, Depends, Query, Request
from sqlmodel import Session

from .. import policies, schemas, services
from ..abilities import Action, Subject
from ..auth import get_current_user, get_refresh_credentials
from ..database import get_session
from ..guards import PoliciesGuard, ensure_owner
from ..models import Profile

router = APIRouter()


@router.post('/signin', response_model=schemas.TokensOut)
def sign_in(payload: schemas.SignInIn, db: Session = Depends(get_session)):
    """Authenticate with email/password and return an access/refresh pair.

    The access token carries the profile id as `sub` and the `email`
    claim; the refresh token is stored hashed and rotated on every use.
    """
    return services.AuthService(db).sign_in(payload.email, payload.password)


@router.get('/signout/{profile_id}', dependencies=[Depends(PoliciesGuard(policies.update_profile))])
def sign_out(profile_id: int, request: Request, db: Session = Depends(get_session), user: Profile = Depends(get_current_user)):
    """Invalidate the stored refresh token of `profile_id` (self or admin)."""
    ensure_owner(user, Subject.PROFILE, Action.UPDATE, profile_id, request)
    services.AuthService(db).sign_out(profile_id)
    return {'detail': 'Signed out'}


@router.get('/refresh', response_model=schemas.TokensOut)
def refresh_tokens(
    profile_id: int = Query(..., alias='id'),
    refresh_token: str = Depends(get_refresh_credentials),
    db: Session = Depends(get_session),
):
    """Exchange a valid refresh token (sent as bearer) for a new token pair."""
    return services.AuthService(db).refresh(profile_id, refresh_token)
