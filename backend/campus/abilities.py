"""Role-derived abilities.

An `Ability` is the set of (action, subject) grants a profile holds for
the duration of one request. It is built by `AbilityFactory` from the
profile's role alone and answers `can(action, subject)`:

- `Action.MANAGE` in a grant matches every action,
- `Subject.ALL` in a grant matches every subject.

Rules are only ever added, so a later rule can never take away an
earlier grant. Per-record checks ("is this the requester's own student
row?") are not expressible here; see `campus.guards.ensure_owner`.
"""

from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterable, Optional, Tuple, Union

from .models import Profile, Role


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"


class Subject(str, Enum):
    PROFILE = "Profile"
    STUDENT = "Student"
    LECTURER = "Lecturer"
    COURSE = "Course"
    DEPARTMENT = "Department"
    ALL = "all"


Grant = Tuple[Action, Subject]


class Ability:
    """Immutable set of grants with CASL-style matching."""

    def __init__(self, grants: Iterable[Grant] = ()):
        self._grants: FrozenSet[Grant] = frozenset(grants)

    @property
    def grants(self) -> FrozenSet[Grant]:
        return self._grants

    def can(self, action: Action, subject: Subject) -> bool:
        for granted_action, granted_subject in self._grants:
            if granted_action not in (action, Action.MANAGE):
                continue
            if granted_subject in (subject, Subject.ALL):
                return True
        return False

    def cannot(self, action: Action, subject: Subject) -> bool:
        return not self.can(action, subject)

    def __repr__(self) -> str:
        rules = sorted(f"{a.value}:{s.value}" for a, s in self._grants)
        return f"Ability({', '.join(rules)})"


class AbilityBuilder:
    """Collects additive `can` rules and builds an `Ability`."""

    def __init__(self):
        self._grants = set()

    def can(self, actions: Union[Action, Iterable[Action]], subjects: Union[Subject, Iterable[Subject]]) -> "AbilityBuilder":
        actions = [actions] if isinstance(actions, Action) else list(actions)
        subjects = [subjects] if isinstance(subjects, Subject) else list(subjects)
        for action in actions:
            for subject in subjects:
                self._grants.add((action, subject))
        return self

    def build(self) -> Ability:
        return Ability(self._grants)


def _admin_rules(builder: AbilityBuilder) -> None:
    builder.can(Action.MANAGE, Subject.ALL)


def _faculty_rules(builder: AbilityBuilder) -> None:
    builder.can(Action.READ, [Subject.PROFILE, Subject.STUDENT, Subject.COURSE, Subject.DEPARTMENT, Subject.LECTURER])
    builder.can([Action.CREATE, Action.UPDATE, Action.DELETE], Subject.COURSE)
    builder.can(Action.UPDATE, [Subject.STUDENT, Subject.LECTURER, Subject.PROFILE])
    builder.can(Action.CREATE, Subject.LECTURER)


def _student_rules(builder: AbilityBuilder) -> None:
    builder.can(Action.READ, [Subject.COURSE, Subject.DEPARTMENT, Subject.LECTURER])
    builder.can([Action.READ, Action.UPDATE], [Subject.PROFILE, Subject.STUDENT])


def _guest_rules(builder: AbilityBuilder) -> None:
    builder.can(Action.READ, [Subject.COURSE, Subject.DEPARTMENT])
    builder.can([Action.READ, Action.UPDATE], Subject.PROFILE)


ROLE_RULES: Dict[Role, Callable[[AbilityBuilder], None]] = {
    Role.ADMIN: _admin_rules,
    Role.FACULTY: _faculty_rules,
    Role.STUDENT: _student_rules,
    Role.GUEST: _guest_rules,
}


class AbilityFactory:
    """Build the ability for a profile from its role; no I/O."""

    def create_for_user(self, user: Optional[Profile]) -> Ability:
        """Return the ability for `user`.

        `None` (no authenticated user) and unknown roles yield an ability
        with zero grants, so every policy evaluated against it fails.
        """
        builder = AbilityBuilder()
        if user is None:
            return builder.build()
        try:
            role = Role(user.role)
        except ValueError:
            return builder.build()
        ROLE_RULES[role](builder)
        return builder.build()
