"""
Attachment Repository
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.modules.attachments.models import Attachment, AttachmentParent

_PARENT_COLUMNS = {
    AttachmentParent.ASSIGNMENT: Attachment.assignment_id,
    AttachmentParent.SUBMISSION: Attachment.submission_id,
    AttachmentParent.MATERIAL: Attachment.material_id,
}


def parent_column(parent: AttachmentParent):
    return _PARENT_COLUMNS[parent]


async def list_for_parents(
    db: AsyncSession, parent: AttachmentParent, parent_ids: list[str]
) -> list[Attachment]:
    """Attachments of the given parents, in upload order."""
    if not parent_ids:
        return []
    column = parent_column(parent)
    result = await db.execute(
        select(Attachment)
        .where(column.in_(set(parent_ids)))
        .order_by(Attachment.uploaded_at, Attachment.file_name)
    )
    return list(result.scalars().all())


async def delete_for_parent(db: AsyncSession, parent: AttachmentParent, parent_id: str) -> None:
    await db.execute(delete(Attachment).where(parent_column(parent) == parent_id))
