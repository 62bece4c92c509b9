"""Named policy predicates over an `Ability`.

A policy is any callable taking an `Ability` and returning a bool; routes
declare the policies they need through `campus.guards.PoliciesGuard`.
"""

from typing import Callable

from .abilities import Ability, Action, Subject

Policy = Callable[[Ability], bool]


def can(action: Action, subject: Subject) -> Policy:
    """Return a policy that holds when the ability grants `action` on `subject`."""
    def policy(ability: Ability) -> bool:
        return ability.can(action, subject)

    policy.__name__ = f"can_{action.value}_{subject.value.lower()}"
    return policy


read_profile = can(Action.READ, Subject.PROFILE)
update_profile = can(Action.UPDATE, Subject.PROFILE)
delete_profile = can(Action.DELETE, Subject.PROFILE)

read_student = can(Action.READ, Subject.STUDENT)
update_student = can(Action.UPDATE, Subject.STUDENT)
delete_student = can(Action.DELETE, Subject.STUDENT)

read_lecturer = can(Action.READ, Subject.LECTURER)
update_lecturer = can(Action.UPDATE, Subject.LECTURER)
delete_lecturer = can(Action.DELETE, Subject.LECTURER)

create_course = can(Action.CREATE, Subject.COURSE)
read_course = can(Action.READ, Subject.COURSE)
update_course = can(Action.UPDATE, Subject.COURSE)
delete_course = can(Action.DELETE, Subject.COURSE)

create_department = can(Action.CREATE, Subject.DEPARTMENT)
read_department = can(Action.READ, Subject.DEPARTMENT)
update_department = can(Action.UPDATE, Subject.DEPARTMENT)
delete_department = can(Action.DELETE, Subject.DEPARTMENT)
