"""
Notification Models
"""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from schoolhub.modules.shared import BaseModel


class NotificationKind(str, enum.Enum):
    ENROLLMENT = "enrollment"
    ASSIGNMENT = "assignment"
    SUBMISSION = "submission"
    GRADE = "grade"
    ATTENDANCE = "attendance"
    MATERIAL = "material"
    SYSTEM = "system"


class Notification(BaseModel):
    __tablename__ = "notifications"

    recipient_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    kind: Mapped[NotificationKind] = mapped_column(
        Enum(NotificationKind, name="notification_kind"), nullable=False
    )
    resource_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    resource_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_notifications_recipient_read", "recipient_id", "read_at"),)
