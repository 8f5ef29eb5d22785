"""
Material Repository
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.modules.attachments.models import Attachment
from schoolhub.modules.materials.models import Material


async def create(db: AsyncSession, **fields) -> Material:
    material = Material(**fields)
    db.add(material)
    await db.flush()
    return material


async def get_by_id(db: AsyncSession, material_id: str) -> Material | None:
    return await db.get(Material, material_id)


async def list_for_course(db: AsyncSession, course_id: str) -> list[Material]:
    """Materials of a course, newest first."""
    result = await db.execute(
        select(Material)
        .where(Material.course_id == course_id)
        .order_by(Material.upload_date.desc())
    )
    return list(result.scalars().all())


async def storage_keys(db: AsyncSession, material_id: str) -> list[str]:
    result = await db.execute(
        select(Attachment.storage_key).where(Attachment.material_id == material_id)
    )
    return list(result.scalars().all())


async def delete_with_attachments(db: AsyncSession, material: Material) -> None:
    await db.execute(delete(Attachment).where(Attachment.material_id == material.id))
    await db.delete(material)
    await db.flush()
