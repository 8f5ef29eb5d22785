"""
Course Schemas

Request validation and response serialization for courses. The catalog
view omits the roster; the detail view includes it together with the ids
of the course's materials and assignments.
"""

from pydantic import Field, field_validator, model_validator

from schoolhub.modules.courses.models import Semester, Weekday
from schoolhub.modules.shared import CamelModel, UTCDateTime
from schoolhub.modules.users.schemas import UserSummary

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class ScheduleItem(CamelModel):
    """One weekly meeting, times as HH:MM."""

    day: Weekday
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    room: str = Field("", max_length=50)

    @model_validator(mode="after")
    def validate_times(self) -> "ScheduleItem":
        # Zero-padded HH:MM strings compare in time order
        if self.start_time >= self.end_time:
            raise ValueError("startTime must be before endTime")
        return self


class CourseCreate(CamelModel):
    """Request body for POST /courses."""

    name: str = Field(..., min_length=1, max_length=100)
    code: str = Field(..., min_length=1, max_length=30)
    description: str = Field("", max_length=5000)
    # Admins must name the teacher; teachers always become teacher of record
    teacher_id: str | None = None
    grade: str = Field(..., min_length=1, max_length=30)
    academic_year: str = Field(..., min_length=4, max_length=20)
    semester: Semester
    schedule: list[ScheduleItem] = Field(default_factory=list)
    syllabus_url: str | None = Field(None, max_length=500)

    @field_validator("code")
    @classmethod
    def normalise_code(cls, value: str) -> str:
        return value.strip().upper()


class CourseUpdate(CamelModel):
    """Request body for PUT /courses/{id}. Only provided fields change."""

    name: str | None = Field(None, min_length=1, max_length=100)
    code: str | None = Field(None, min_length=1, max_length=30)
    description: str | None = Field(None, max_length=5000)
    teacher_id: str | None = None
    grade: str | None = Field(None, min_length=1, max_length=30)
    academic_year: str | None = Field(None, min_length=4, max_length=20)
    semester: Semester | None = None
    schedule: list[ScheduleItem] | None = None
    syllabus_url: str | None = Field(None, max_length=500)

    @field_validator("code")
    @classmethod
    def normalise_code(cls, value: str | None) -> str | None:
        return value.strip().upper() if value else value


class CourseResponse(CamelModel):
    """Catalog entry."""

    id: str
    name: str
    code: str
    description: str
    teacher_id: str
    teacher: UserSummary | None = None
    grade: str
    academic_year: str
    semester: Semester
    schedule: list[ScheduleItem]
    syllabus_url: str | None = None
    created_at: UTCDateTime
    updated_at: UTCDateTime


class CourseDetailResponse(CourseResponse):
    """Course with roster and owned collections."""

    students: list[UserSummary] = Field(default_factory=list)
    material_ids: list[str] = Field(default_factory=list)
    assignment_ids: list[str] = Field(default_factory=list)


class RosterUpdate(CamelModel):
    """Request body for PUT /courses/{id}/enroll and /unenroll."""

    student_ids: list[str] = Field(..., min_length=1)
