"""
Unit tests for the authorization policy table.
"""

import pytest

from schoolhub.core.auth import Actor
from schoolhub.core.exceptions import ForbiddenError
from schoolhub.core.policy import POLICY, Action, CourseScope, UserScope, allow, require
from schoolhub.modules.users.models import UserRole

STUDENT = Actor(id="s1", role=UserRole.STUDENT)
OTHER_STUDENT = Actor(id="s2", role=UserRole.STUDENT)
TEACHER = Actor(id="t1", role=UserRole.TEACHER)
OTHER_TEACHER = Actor(id="t2", role=UserRole.TEACHER)
ADMIN = Actor(id="a1", role=UserRole.ADMIN)

COURSE = CourseScope(teacher_id="t1", roster=frozenset({"s1"}))


class TestCourseActions:
    """Course-scoped rules."""

    def test_teacher_of_record_manages_course(self):
        for action in (
            Action.UPDATE_COURSE,
            Action.DELETE_COURSE,
            Action.MANAGE_ASSIGNMENT,
            Action.GRADE_SUBMISSION,
            Action.MARK_ATTENDANCE,
            Action.MANAGE_MATERIALS,
            Action.RECORD_GRADE,
            Action.MANAGE_ROSTER,
        ):
            assert allow(TEACHER, action, COURSE)
            assert not allow(OTHER_TEACHER, action, COURSE)
            assert allow(ADMIN, action, COURSE)
            assert not allow(STUDENT, action, COURSE)

    def test_only_roster_students_submit(self):
        assert allow(STUDENT, Action.SUBMIT_ASSIGNMENT, COURSE)
        assert not allow(OTHER_STUDENT, Action.SUBMIT_ASSIGNMENT, COURSE)

    def test_teachers_and_admins_never_submit(self):
        assert not allow(TEACHER, Action.SUBMIT_ASSIGNMENT, COURSE)
        assert not allow(ADMIN, Action.SUBMIT_ASSIGNMENT, COURSE)

    def test_students_read_course_when_enrolled_or_requesting(self):
        requesting = CourseScope(teacher_id="t1", requesters=frozenset({"s2"}))
        assert allow(STUDENT, Action.READ_COURSE, COURSE)
        assert allow(OTHER_STUDENT, Action.READ_COURSE, requesting)
        assert not allow(OTHER_STUDENT, Action.READ_COURSE, COURSE)

    def test_only_students_request_enrollment_for_themselves(self):
        assert allow(STUDENT, Action.CREATE_ENROLLMENT_REQUEST, CourseScope(subject_id="s1"))
        assert not allow(STUDENT, Action.CREATE_ENROLLMENT_REQUEST, CourseScope(subject_id="s2"))
        assert not allow(TEACHER, Action.CREATE_ENROLLMENT_REQUEST, CourseScope())
        assert not allow(ADMIN, Action.CREATE_ENROLLMENT_REQUEST, CourseScope())

    def test_missing_resource_denies_scoped_rules(self):
        assert not allow(TEACHER, Action.UPDATE_COURSE, None)


class TestUserActions:
    """Profile rules."""

    def test_students_read_only_themselves(self):
        assert allow(STUDENT, Action.READ_USER, UserScope("s1"))
        assert not allow(STUDENT, Action.READ_USER, UserScope("s2"))

    def test_teachers_read_anyone_but_update_themselves(self):
        assert allow(TEACHER, Action.READ_USER, UserScope("s1"))
        assert allow(TEACHER, Action.UPDATE_USER, UserScope("t1"))
        assert not allow(TEACHER, Action.UPDATE_USER, UserScope("s1"))

    def test_only_admins_delete(self):
        assert allow(ADMIN, Action.DELETE_USER, UserScope("s1"))
        assert not allow(TEACHER, Action.DELETE_USER, UserScope("s1"))
        assert not allow(STUDENT, Action.DELETE_USER, UserScope("s1"))

    def test_students_cannot_list_users(self):
        assert not allow(STUDENT, Action.LIST_USERS)
        assert allow(TEACHER, Action.LIST_USERS)


class TestRequire:
    def test_require_raises_forbidden_with_message(self):
        with pytest.raises(ForbiddenError) as exc_info:
            require(STUDENT, Action.CREATE_COURSE, message="Only teachers")
        assert exc_info.value.message == "Only teachers"
        assert exc_info.value.status_code == 403

    def test_require_passes_when_allowed(self):
        require(ADMIN, Action.CREATE_COURSE)

    def test_every_action_has_rules(self):
        assert set(POLICY) == set(Action)
