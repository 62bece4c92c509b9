from typing import List, Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlmodel import Session

from .. import policies, schemas, services
from ..abilities import AbilityFactory, Action, Subject
from ..auth import get_current_user, get_optional_user
from ..database import get_session
from ..errors import AuthorizationError
from ..guards import PoliciesGuard, ensure_owner, get_ability_factory
from ..models import Profile, Role

router = APIRouter()


def _ensure_can_assign_role(ability_factory: AbilityFactory, user: Optional[Profile], role: Optional[Role]) -> None:
    """Only profiles that manage profiles may hand out a role other than guest."""
    if role is None or role == Role.GUEST:
        return
    if not ability_factory.create_for_user(user).can(Action.MANAGE, Subject.PROFILE):
        raise AuthorizationError("Forbidden resource", reason="policy")


@router.post('', response_model=schemas.ProfileOut, status_code=201)
def create_profile(
    payload: schemas.ProfileCreate,
    db: Session = Depends(get_session),
    user: Optional[Profile] = Depends(get_optional_user),
    ability_factory: AbilityFactory = Depends(get_ability_factory),
):
    """Sign up a new profile (public).

    The role defaults to guest; any other role requires an admin token.
    """
    _ensure_can_assign_role(ability_factory, user, payload.role)
    return services.ProfileService(db).create(payload)


@router.get('', response_model=List[schemas.ProfileOut], dependencies=[Depends(PoliciesGuard(policies.read_profile))])
def list_profiles(email: Optional[str] = None, db: Session = Depends(get_session)):
    return services.ProfileService(db).find_all(email)


@router.get('/{profile_id}', response_model=schemas.ProfileOut, dependencies=[Depends(PoliciesGuard(policies.read_profile))])
def get_profile(profile_id: int, request: Request, db: Session = Depends(get_session), user: Profile = Depends(get_current_user)):
    """Owners, faculty and admins may read a profile."""
    ensure_owner(user, Subject.PROFILE, Action.READ, profile_id, request)
    return services.ProfileService(db).find_one(profile_id)


@router.patch('/{profile_id}', response_model=schemas.ProfileOut, dependencies=[Depends(PoliciesGuard(policies.update_profile))])
def update_profile(
    profile_id: int,
    payload: schemas.ProfileUpdate,
    request: Request,
    db: Session = Depends(get_session),
    user: Profile = Depends(get_current_user),
    ability_factory: AbilityFactory = Depends(get_ability_factory),
):
    """Owners may update their own profile; admins may update any."""
    ensure_owner(user, Subject.PROFILE, Action.UPDATE, profile_id, request)
    _ensure_can_assign_role(ability_factory, user, payload.role)
    return services.ProfileService(db).update(profile_id, payload)


@router.delete('/{profile_id}', status_code=204, dependencies=[Depends(PoliciesGuard(policies.delete_profile))])
def delete_profile(profile_id: int, db: Session = Depends(get_session)):
    services.ProfileService(db).remove(profile_id)
    return Response(status_code=204)
