"""Submission schemas."""

from pydantic import Field

from schoolhub.modules.attachments.schemas import AttachmentResponse
from schoolhub.modules.shared import CamelModel, UTCDateTime
from schoolhub.modules.submissions.models import SubmissionStatus
from schoolhub.modules.users.schemas import UserSummary


class SubmissionCreate(CamelModel):
    """Body (JSON or multipart fields) for POST /assignments/{id}/submit."""

    content: str = Field("", max_length=50000)


class SubmissionGrade(CamelModel):
    """Request body for PUT /assignments/submissions/{id}."""

    score: float
    feedback: str | None = Field(None, max_length=10000)
    publish_grade: bool = False


class AssignmentSummary(CamelModel):
    id: str
    course_id: str
    title: str
    due_date: UTCDateTime
    total_points: float


class SubmissionResponse(CamelModel):
    id: str
    assignment_id: str
    student_id: str
    content: str
    submitted_at: UTCDateTime
    is_late: bool
    status: SubmissionStatus
    # Hidden from students until the grade is published
    score: float | None = None
    raw_score: float | None = None
    max_score: float
    feedback: str | None = None
    graded_by: str | None = None
    graded_at: UTCDateTime | None = None
    publish_grade: bool
    attachments: list[AttachmentResponse] = Field(default_factory=list)
    student: UserSummary | None = None
    assignment: AssignmentSummary | None = None
