"""Grade schemas."""

from typing import Literal

from pydantic import Field

from schoolhub.modules.grades.models import GradeEntryType
from schoolhub.modules.shared import CamelModel, UTCDateTime


class GradeEntryCreate(CamelModel):
    """Request body for POST /grades."""

    student_id: str
    course_id: str
    assignment_id: str | None = None
    type: GradeEntryType
    title: str = Field(..., min_length=1, max_length=200)
    score: float = Field(..., ge=0)
    max_score: float = Field(..., gt=0)
    weight: float = Field(1.0, ge=0)
    comments: str | None = Field(None, max_length=5000)
    published: bool = False


class GradeEntryUpdate(CamelModel):
    """Request body for PUT /grades/{id}. Only provided fields change."""

    type: GradeEntryType | None = None
    title: str | None = Field(None, min_length=1, max_length=200)
    score: float | None = Field(None, ge=0)
    max_score: float | None = Field(None, gt=0)
    weight: float | None = Field(None, ge=0)
    comments: str | None = Field(None, max_length=5000)
    published: bool | None = None


class GradeEntryResponse(CamelModel):
    id: str
    student_id: str
    course_id: str
    assignment_id: str | None = None
    type: GradeEntryType
    title: str
    score: float
    max_score: float
    weight: float
    comments: str | None = None
    published: bool
    graded_by: str
    graded_at: UTCDateTime
    percentage: float | None = None
    letter_grade: str = "N/A"


class GradeItem(CamelModel):
    """A graded submission or a grade entry, as listed by GET /grades."""

    id: str
    source: Literal["submission", "entry"]
    student_id: str
    course_id: str
    assignment_id: str | None = None
    type: str
    title: str
    score: float
    max_score: float
    weight: float = 1.0
    percentage: float | None = None
    letter_grade: str
    published: bool
    comments: str | None = None
    graded_by: str | None = None
    graded_at: UTCDateTime | None = None


class GradeSummary(CamelModel):
    """Weighted course grade for one student."""

    course_id: str
    student_id: str
    item_count: int
    percentage: float
    letter_grade: str
    gpa_points: float
