"""Enrollment request schemas."""

from pydantic import Field

from schoolhub.modules.enrollments.models import EnrollmentStatus
from schoolhub.modules.shared import CamelModel, UTCDateTime
from schoolhub.modules.users.schemas import UserSummary


class EnrollmentRequestCreate(CamelModel):
    """Request body for POST /courses/{id}/enroll-request."""

    notes: str | None = Field(None, max_length=500)


class EnrollmentDecision(CamelModel):
    """Request body for PUT /enrollment-requests/{id}."""

    status: EnrollmentStatus
    notes: str | None = Field(None, max_length=500)


class CourseSummary(CamelModel):
    id: str
    name: str
    code: str
    teacher_id: str


class EnrollmentRequestResponse(CamelModel):
    id: str
    student_id: str
    course_id: str
    status: EnrollmentStatus
    request_date: UTCDateTime
    response_date: UTCDateTime | None = None
    responder_id: str | None = None
    notes: str | None = None
    student: UserSummary | None = None
    course: CourseSummary | None = None
