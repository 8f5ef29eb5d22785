"""
Grade Entry Models

Manually recorded grade items (quizzes, tests, participation...) that sit
alongside graded assignment submissions in a course summary.
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, Float, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from schoolhub.modules.shared import BaseModel, utcnow


class GradeEntryType(str, enum.Enum):
    QUIZ = "quiz"
    TEST = "test"
    PROJECT = "project"
    MIDTERM = "midterm"
    FINAL = "final"
    PARTICIPATION = "participation"
    OTHER = "other"


class GradeEntry(BaseModel):
    __tablename__ = "grade_entries"

    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    assignment_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("assignments.id", ondelete="SET NULL"), nullable=True
    )
    type: Mapped[GradeEntryType] = mapped_column(
        Enum(GradeEntryType, name="grade_entry_type"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    max_score: Mapped[float] = mapped_column(Float, nullable=False)
    weight: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    graded_by: Mapped[str] = mapped_column(String(36), nullable=False)
    graded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        UniqueConstraint(
            "student_id", "course_id", "type", "title", name="uq_grade_entries_student_item"
        ),
    )
