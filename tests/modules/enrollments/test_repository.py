"""
Unit tests for the enrollment request transition table.
"""

import pytest

from schoolhub.modules.enrollments.models import EnrollmentStatus
from schoolhub.modules.enrollments.repository import can_transition

PENDING = EnrollmentStatus.PENDING
APPROVED = EnrollmentStatus.APPROVED
REJECTED = EnrollmentStatus.REJECTED


class TestCanTransition:
    @pytest.mark.parametrize(
        ("current", "new"),
        [(PENDING, APPROVED), (PENDING, REJECTED), (REJECTED, PENDING)],
    )
    def test_allowed(self, current, new):
        assert can_transition(current, new)

    @pytest.mark.parametrize(
        ("current", "new"),
        [(APPROVED, REJECTED), (REJECTED, APPROVED), (APPROVED, PENDING)],
    )
    def test_rejected(self, current, new):
        assert not can_transition(current, new)

    @pytest.mark.parametrize("status", list(EnrollmentStatus))
    def test_same_status_is_a_no_op(self, status):
        assert can_transition(status, status)
