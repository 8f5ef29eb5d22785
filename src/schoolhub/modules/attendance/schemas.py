"""Attendance schemas."""

import datetime as dt

from pydantic import Field

from schoolhub.modules.attendance.models import AttendanceStatus
from schoolhub.modules.shared import CamelModel, UTCDateTime
from schoolhub.modules.users.schemas import UserSummary


class AttendanceCreate(CamelModel):
    """Request body for POST /attendance."""

    course_id: str
    student_id: str
    date: dt.date
    status: AttendanceStatus
    notes: str | None = Field(None, max_length=1000)


class AttendanceUpdate(CamelModel):
    """Request body for PUT /attendance/{id}."""

    status: AttendanceStatus
    notes: str | None = Field(None, max_length=1000)


class AttendanceResponse(CamelModel):
    id: str
    course_id: str
    student_id: str
    date: dt.date
    status: AttendanceStatus
    notes: str | None = None
    recorded_by: str
    recorded_at: UTCDateTime


class DayRosterEntry(CamelModel):
    """One roster member and their record for the day, if any."""

    student: UserSummary
    status: AttendanceStatus | None = None
    record: AttendanceResponse | None = None


class DayRosterResponse(CamelModel):
    course_id: str
    date: dt.date
    entries: list[DayRosterEntry]


class AttendanceStats(CamelModel):
    """Counts per status; the rate counts late as attended."""

    course_id: str | None = None
    student_id: str | None = None
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0
    attendance_rate: float = 0.0
