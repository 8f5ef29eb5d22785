"""
Attachment Models

File metadata recorded after the bytes have been stored in the object
store. Exactly one parent reference is set.
"""

import enum
from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from schoolhub.modules.shared import BaseModel, utcnow


class AttachmentParent(str, enum.Enum):
    """Entities that can own attachments."""

    ASSIGNMENT = "assignment"
    SUBMISSION = "submission"
    MATERIAL = "material"


class Attachment(BaseModel):
    __tablename__ = "attachments"

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    storage_key: Mapped[str] = mapped_column(String(500), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(150), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    uploaded_by: Mapped[str] = mapped_column(String(36), nullable=False)

    # Parent (exactly one is set)
    assignment_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("assignments.id", ondelete="CASCADE"), nullable=True, index=True
    )
    submission_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("submissions.id", ondelete="CASCADE"), nullable=True, index=True
    )
    material_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("materials.id", ondelete="CASCADE"), nullable=True, index=True
    )

    __table_args__ = (
        CheckConstraint(
            "(CASE WHEN assignment_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN submission_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN material_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_attachments_single_parent",
        ),
    )
