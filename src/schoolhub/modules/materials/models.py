"""
Course Material Models
"""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from schoolhub.modules.shared import BaseModel, utcnow


class MaterialType(str, enum.Enum):
    FILE = "file"
    VIDEO = "video"
    LINK = "link"
    TEXT = "text"
    OTHER = "other"


class Material(BaseModel):
    __tablename__ = "materials"

    course_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[MaterialType] = mapped_column(
        Enum(MaterialType, name="material_type"), nullable=False
    )
    url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    upload_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    added_by: Mapped[str] = mapped_column(String(36), nullable=False)
