"""Policy guard and ownership refinement.

`PoliciesGuard` is attached to a route as a dependency. It builds the
requester's ability and rejects the request with 403 unless every declared
policy holds. `ensure_owner` is called by handlers after the guard for the
records a role-level ability cannot protect on its own (a student may
only see their own student row). Both write an audit line to the
`campus.authz` logger with the reason for a denial.
"""

import json
import logging
from typing import Dict, FrozenSet, Optional, Tuple

from fastapi import Depends, Request

from .abilities import Ability, AbilityFactory, Action, Subject
from .auth import get_optional_user
from .errors import AuthorizationError
from .models import Profile, Role
from .policies import Policy

logger = logging.getLogger("campus.authz")

_ability_factory = AbilityFactory()


def get_ability_factory() -> AbilityFactory:
    return _ability_factory


def _audit(reason: str, request: Optional[Request], user: Optional[Profile], **extra) -> None:
    record = {
        "reason": reason,
        "user_id": user.id if user is not None else None,
        "role": getattr(user.role, "value", user.role) if user is not None else None,
    }
    if request is not None:
        record["method"] = request.method
        record["path"] = request.url.path
        record["request_id"] = getattr(request.state, "request_id", None)
    record.update(extra)
    logger.warning("authorization_denied %s", json.dumps(record, ensure_ascii=True, default=str))


class PoliciesGuard:
    """Dependency that passes only if every policy holds for the current user."""

    def __init__(self, *policies: Policy):
        self.policies = policies

    def __call__(
        self,
        request: Request,
        user: Optional[Profile] = Depends(get_optional_user),
        factory: AbilityFactory = Depends(get_ability_factory),
    ) -> Ability:
        ability = factory.create_for_user(user)
        # pure predicates: evaluate all, any failure rejects
        failed = [getattr(p, "__name__", repr(p)) for p in self.policies if not p(ability)]
        if failed:
            _audit("policy", request, user, failed_policies=failed)
            raise AuthorizationError("Forbidden resource", reason="policy")
        return ability


# (subject, action) -> roles that skip the ownership comparison
OWNERSHIP_EXEMPT: Dict[Tuple[Subject, Action], FrozenSet[Role]] = {
    (Subject.PROFILE, Action.READ): frozenset({Role.ADMIN, Role.FACULTY}),
    (Subject.PROFILE, Action.UPDATE): frozenset({Role.ADMIN}),
    (Subject.STUDENT, Action.READ): frozenset({Role.ADMIN, Role.FACULTY}),
    (Subject.STUDENT, Action.UPDATE): frozenset({Role.ADMIN, Role.FACULTY}),
}


def ensure_owner(
    user: Profile,
    subject: Subject,
    action: Action,
    owner_id: Optional[int],
    request: Optional[Request] = None,
) -> None:
    """Raise `AuthorizationError` unless `user` owns the record or is exempt.

    `owner_id` is the id of the profile that owns the target record
    (the profile itself, or `student.profile_id`). Combinations missing
    from `OWNERSHIP_EXEMPT` carry no ownership rule.
    """
    exempt = OWNERSHIP_EXEMPT.get((subject, action))
    if exempt is None:
        return
    if Role(user.role) in exempt:
        return
    if owner_id is not None and user.id == owner_id:
        return
    _audit("ownership", request, user, subject=subject.value, action=action.value, owner_id=owner_id)
    raise AuthorizationError("Forbidden resource", reason="ownership")
