"""
Authorization Policy

A single pure decision function, allow(actor, action, resource), driven by
a role table. Callers describe the resource with a CourseScope (course
teacher, roster, active requests) or a UserScope (target user); the policy
never touches the database. Any (action, role) pair absent from the table
is denied.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from schoolhub.core.exceptions import ForbiddenError
from schoolhub.modules.users.models import UserRole

if TYPE_CHECKING:
    from schoolhub.core.auth import Actor

logger = logging.getLogger(__name__)


class Action(str, Enum):
    """Core actions subject to authorization."""

    CREATE_COURSE = "create_course"
    UPDATE_COURSE = "update_course"
    DELETE_COURSE = "delete_course"
    READ_COURSE = "read_course"
    CREATE_ENROLLMENT_REQUEST = "create_enrollment_request"
    DECIDE_ENROLLMENT_REQUEST = "decide_enrollment_request"
    MANAGE_ROSTER = "manage_roster"
    MANAGE_ASSIGNMENT = "manage_assignment"
    SUBMIT_ASSIGNMENT = "submit_assignment"
    GRADE_SUBMISSION = "grade_submission"
    MARK_ATTENDANCE = "mark_attendance"
    MANAGE_MATERIALS = "manage_materials"
    RECORD_GRADE = "record_grade"
    LIST_USERS = "list_users"
    READ_USER = "read_user"
    UPDATE_USER = "update_user"
    DELETE_USER = "delete_user"


@dataclass(frozen=True)
class CourseScope:
    """What the policy needs to know about a course."""

    teacher_id: str | None = None
    roster: frozenset[str] = field(default_factory=frozenset)
    # Students holding a pending or approved request for this course
    requesters: frozenset[str] = field(default_factory=frozenset)
    # Target student for self-only actions (enrollment request)
    subject_id: str | None = None


@dataclass(frozen=True)
class UserScope:
    """What the policy needs to know about a target user."""

    user_id: str


Resource = CourseScope | UserScope | None
Rule = Callable[["Actor", Resource], bool]


def _always(_actor: "Actor", _resource: Resource) -> bool:
    return True


def _teaches(actor: "Actor", resource: Resource) -> bool:
    return isinstance(resource, CourseScope) and resource.teacher_id == actor.id


def _in_roster(actor: "Actor", resource: Resource) -> bool:
    return isinstance(resource, CourseScope) and actor.id in resource.roster


def _enrolled_or_requested(actor: "Actor", resource: Resource) -> bool:
    return isinstance(resource, CourseScope) and (
        actor.id in resource.roster or actor.id in resource.requesters
    )


def _for_self(actor: "Actor", resource: Resource) -> bool:
    if isinstance(resource, CourseScope):
        return resource.subject_id in (None, actor.id)
    if isinstance(resource, UserScope):
        return resource.user_id == actor.id
    return False


STUDENT = UserRole.STUDENT
TEACHER = UserRole.TEACHER
ADMIN = UserRole.ADMIN

POLICY: dict[Action, dict[UserRole, Rule]] = {
    Action.CREATE_COURSE: {TEACHER: _always, ADMIN: _always},
    Action.UPDATE_COURSE: {TEACHER: _teaches, ADMIN: _always},
    Action.DELETE_COURSE: {TEACHER: _teaches, ADMIN: _always},
    Action.READ_COURSE: {STUDENT: _enrolled_or_requested, TEACHER: _teaches, ADMIN: _always},
    Action.CREATE_ENROLLMENT_REQUEST: {STUDENT: _for_self},
    Action.DECIDE_ENROLLMENT_REQUEST: {TEACHER: _teaches, ADMIN: _always},
    Action.MANAGE_ROSTER: {TEACHER: _teaches, ADMIN: _always},
    Action.MANAGE_ASSIGNMENT: {TEACHER: _teaches, ADMIN: _always},
    Action.SUBMIT_ASSIGNMENT: {STUDENT: _in_roster},
    Action.GRADE_SUBMISSION: {TEACHER: _teaches, ADMIN: _always},
    Action.MARK_ATTENDANCE: {TEACHER: _teaches, ADMIN: _always},
    Action.MANAGE_MATERIALS: {TEACHER: _teaches, ADMIN: _always},
    Action.RECORD_GRADE: {TEACHER: _teaches, ADMIN: _always},
    Action.LIST_USERS: {TEACHER: _always, ADMIN: _always},
    Action.READ_USER: {STUDENT: _for_self, TEACHER: _always, ADMIN: _always},
    Action.UPDATE_USER: {STUDENT: _for_self, TEACHER: _for_self, ADMIN: _always},
    Action.DELETE_USER: {ADMIN: _always},
}


def allow(actor: "Actor", action: Action, resource: Resource = None) -> bool:
    """Return True if the actor may perform the action on the resource."""
    rule = POLICY.get(action, {}).get(actor.role)
    if rule is None:
        return False
    return rule(actor, resource)


def require(
    actor: "Actor",
    action: Action,
    resource: Resource = None,
    message: str | None = None,
) -> None:
    """
    Enforce the policy.

    Raises:
        ForbiddenError: If allow() denies the action
    """
    if not allow(actor, action, resource):
        logger.warning(f"Policy denied {action.value} for {actor}")
        raise ForbiddenError(message or f"Not authorized to {action.value.replace('_', ' ')}")
