"""
Assignment Models
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from schoolhub.modules.shared import BaseModel


class AssignmentType(str, enum.Enum):
    HOMEWORK = "Homework"
    QUIZ = "Quiz"
    TEST = "Test"
    PROJECT = "Project"
    ESSAY = "Essay"
    OTHER = "Other"


class Assignment(BaseModel):
    """Coursework owned by a course. Owns its submissions."""

    __tablename__ = "assignments"

    course_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    total_points: Mapped[float] = mapped_column(Float, nullable=False)
    type: Mapped[AssignmentType] = mapped_column(
        Enum(AssignmentType, name="assignment_type"),
        nullable=False,
        default=AssignmentType.HOMEWORK,
    )
    allow_late_submissions: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    late_penalty_pct: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[str] = mapped_column(String(36), nullable=False)
