import pytest

from campus.abilities import Ability, AbilityBuilder, AbilityFactory, Action, Subject
from campus.models import Profile, Role
from campus import policies

CRUD = [Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE]
SUBJECTS = [Subject.PROFILE, Subject.STUDENT, Subject.LECTURER, Subject.COURSE, Subject.DEPARTMENT]

# role -> set of (action, subject) that must be allowed; everything else is denied
EXPECTED = {
    Role.ADMIN: {(a, s) for a in CRUD for s in SUBJECTS},
    Role.FACULTY: {
        (Action.READ, Subject.PROFILE),
        (Action.READ, Subject.STUDENT),
        (Action.READ, Subject.LECTURER),
        (Action.READ, Subject.COURSE),
        (Action.READ, Subject.DEPARTMENT),
        (Action.CREATE, Subject.COURSE),
        (Action.UPDATE, Subject.COURSE),
        (Action.DELETE, Subject.COURSE),
        (Action.UPDATE, Subject.STUDENT),
        (Action.UPDATE, Subject.LECTURER),
        (Action.UPDATE, Subject.PROFILE),
        (Action.CREATE, Subject.LECTURER),
    },
    Role.STUDENT: {
        (Action.READ, Subject.COURSE),
        (Action.READ, Subject.DEPARTMENT),
        (Action.READ, Subject.LECTURER),
        (Action.READ, Subject.PROFILE),
        (Action.UPDATE, Subject.PROFILE),
        (Action.READ, Subject.STUDENT),
        (Action.UPDATE, Subject.STUDENT),
    },
    Role.GUEST: {
        (Action.READ, Subject.COURSE),
        (Action.READ, Subject.DEPARTMENT),
        (Action.READ, Subject.PROFILE),
        (Action.UPDATE, Subject.PROFILE),
    },
}


def _user(role):
    return Profile(id=1, first_name="A", last_name="B", email="a@example.com", password="x", role=role)


@pytest.mark.parametrize("role", list(Role))
@pytest.mark.parametrize("action", CRUD)
@pytest.mark.parametrize("subject", SUBJECTS)
def test_grant_table(role, action, subject):
    ability = AbilityFactory().create_for_user(_user(role))
    assert ability.can(action, subject) == ((action, subject) in EXPECTED[role])
    assert ability.cannot(action, subject) != ability.can(action, subject)


def test_admin_manages_everything():
    ability = AbilityFactory().create_for_user(_user(Role.ADMIN))
    assert ability.can(Action.MANAGE, Subject.ALL)
    assert ability.can(Action.MANAGE, Subject.PROFILE)


@pytest.mark.parametrize("role", [Role.FACULTY, Role.STUDENT, Role.GUEST])
def test_non_admin_cannot_manage_profiles(role):
    assert AbilityFactory().create_for_user(_user(role)).cannot(Action.MANAGE, Subject.PROFILE)


def test_no_user_has_no_grants():
    ability = AbilityFactory().create_for_user(None)
    assert ability.grants == frozenset()
    assert all(ability.cannot(a, s) for a in CRUD for s in SUBJECTS)


def test_unknown_role_has_no_grants():
    user = _user(Role.GUEST)
    user.role = "superuser"
    assert AbilityFactory().create_for_user(user).grants == frozenset()


def test_builder_is_additive():
    ability = (
        AbilityBuilder()
        .can(Action.READ, Subject.COURSE)
        .can([Action.READ, Action.UPDATE], [Subject.COURSE, Subject.STUDENT])
        .build()
    )
    assert ability.can(Action.READ, Subject.COURSE)
    assert ability.can(Action.UPDATE, Subject.STUDENT)
    assert ability.cannot(Action.DELETE, Subject.COURSE)


def test_named_policies():
    faculty = AbilityFactory().create_for_user(_user(Role.FACULTY))
    assert policies.delete_course(faculty)
    assert not policies.delete_student(faculty)
    assert policies.can(Action.READ, Subject.LECTURER).__name__ == "can_read_lecturer"
    assert not policies.read_course(Ability())
