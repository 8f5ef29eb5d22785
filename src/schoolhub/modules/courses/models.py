"""
Course Models

A course owns its schedule, its roster (the course_students join table),
its enrollment requests, assignments, materials, attendance records and
grade entries.
"""

import enum
from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from schoolhub.core.database import Base
from schoolhub.modules.shared import BaseModel, utcnow


class Semester(str, enum.Enum):
    """Academic terms."""

    FALL = "Fall"
    SPRING = "Spring"
    SUMMER = "Summer"


class Weekday(str, enum.Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


class Course(BaseModel):
    """
    Course offered by a teacher.

    The schedule is stored as an ordered JSON array of
    {day, startTime, endTime, room} objects.
    """

    __tablename__ = "courses"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str] = mapped_column(String(30), unique=True, index=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    teacher_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    grade: Mapped[str] = mapped_column(String(30), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(20), nullable=False)
    semester: Mapped[Semester] = mapped_column(Enum(Semester, name="semester"), nullable=False)

    schedule: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    syllabus_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (Index("ix_courses_year_semester", "academic_year", "semester"),)

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, code={self.code})>"


class CourseStudent(Base):
    """Roster membership. The composite primary key makes membership a set."""

    __tablename__ = "course_students"

    course_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("courses.id", ondelete="CASCADE"),
        primary_key=True,
    )
    student_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
