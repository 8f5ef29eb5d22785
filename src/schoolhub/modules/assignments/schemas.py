"""Assignment schemas."""

from pydantic import Field

from schoolhub.modules.assignments.models import AssignmentType
from schoolhub.modules.attachments.schemas import AttachmentResponse
from schoolhub.modules.shared import CamelModel, UTCDateTime


class AssignmentCreate(CamelModel):
    """Body (JSON or multipart fields) for POST /assignments."""

    course_id: str
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=10000)
    due_date: UTCDateTime
    total_points: float = Field(..., ge=0)
    type: AssignmentType = AssignmentType.HOMEWORK
    allow_late_submissions: bool = False
    late_penalty_pct: float = Field(0, ge=0, le=100)
    published: bool = True


class AssignmentUpdate(CamelModel):
    """Body for PUT /assignments/{id}. Only provided fields change."""

    title: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=10000)
    due_date: UTCDateTime | None = None
    total_points: float | None = Field(None, ge=0)
    type: AssignmentType | None = None
    allow_late_submissions: bool | None = None
    late_penalty_pct: float | None = Field(None, ge=0, le=100)
    published: bool | None = None


class AssignmentResponse(CamelModel):
    id: str
    course_id: str
    title: str
    description: str
    due_date: UTCDateTime
    total_points: float
    type: AssignmentType
    allow_late_submissions: bool
    late_penalty_pct: float
    published: bool
    created_by: str
    created_at: UTCDateTime
    updated_at: UTCDateTime
    attachments: list[AttachmentResponse] = Field(default_factory=list)
