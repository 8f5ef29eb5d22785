"""
Enrollment Request Models

At most one request exists per (student, course) pair at any time.
"""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from schoolhub.modules.shared import BaseModel, utcnow


class EnrollmentStatus(str, enum.Enum):
    """Status of an enrollment request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class EnrollmentRequest(BaseModel):
    """A student's petition to join a course."""

    __tablename__ = "enrollment_requests"

    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[EnrollmentStatus] = mapped_column(
        Enum(EnrollmentStatus, name="enrollment_status"),
        nullable=False,
        default=EnrollmentStatus.PENDING,
    )
    request_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    response_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # Historical reference only; responders may later be deleted
    responder_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollment_requests_student_course"),
        Index("ix_enrollment_requests_course_status", "course_id", "status"),
    )
