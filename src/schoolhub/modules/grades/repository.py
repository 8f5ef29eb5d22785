"""
Grade Entry Repository

Only flushes. Graded submissions are read through the submissions
repository.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.modules.grades.models import GradeEntry


async def create(db: AsyncSession, **fields) -> GradeEntry:
    """Insert an entry. Raises IntegrityError on a duplicate item."""
    entry = GradeEntry(**fields)
    db.add(entry)
    await db.flush()
    return entry


async def get_by_id(db: AsyncSession, entry_id: str) -> GradeEntry | None:
    return await db.get(GradeEntry, entry_id)


async def list_entries(
    db: AsyncSession,
    *,
    course_ids: list[str] | None = None,
    student_id: str | None = None,
    published_only: bool = False,
) -> list[GradeEntry]:
    query = select(GradeEntry)
    if course_ids is not None:
        if not course_ids:
            return []
        query = query.where(GradeEntry.course_id.in_(set(course_ids)))
    if student_id is not None:
        query = query.where(GradeEntry.student_id == student_id)
    if published_only:
        query = query.where(GradeEntry.published.is_(True))
    result = await db.execute(query.order_by(GradeEntry.graded_at))
    return list(result.scalars().all())


async def update(db: AsyncSession, entry: GradeEntry, **fields) -> GradeEntry:
    for name, value in fields.items():
        setattr(entry, name, value)
    await db.flush()
    return entry


async def delete(db: AsyncSession, entry: GradeEntry) -> None:
    await db.delete(entry)
    await db.flush()
