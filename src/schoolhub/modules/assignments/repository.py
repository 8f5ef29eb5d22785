"""
Assignment Repository

Only flushes. Deleting an assignment removes its submissions and every
attachment hanging off either.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.modules.assignments.models import Assignment
from schoolhub.modules.attachments.models import Attachment
from schoolhub.modules.submissions.models import Submission


async def create(db: AsyncSession, **fields) -> Assignment:
    assignment = Assignment(**fields)
    db.add(assignment)
    await db.flush()
    return assignment


async def get_by_id(db: AsyncSession, assignment_id: str) -> Assignment | None:
    return await db.get(Assignment, assignment_id)


async def list_assignments(
    db: AsyncSession,
    *,
    course_ids: list[str] | None = None,
    published_only: bool = False,
) -> list[Assignment]:
    """
    Assignments ordered by due date.

    Args:
        course_ids: Restrict to these courses (None means all courses)
        published_only: Hide drafts
    """
    query = select(Assignment)
    if course_ids is not None:
        if not course_ids:
            return []
        query = query.where(Assignment.course_id.in_(set(course_ids)))
    if published_only:
        query = query.where(Assignment.published.is_(True))
    result = await db.execute(query.order_by(Assignment.due_date, Assignment.title))
    return list(result.scalars().all())


async def update(db: AsyncSession, assignment: Assignment, **fields) -> Assignment:
    for name, value in fields.items():
        setattr(assignment, name, value)
    await db.flush()
    return assignment


async def storage_keys(db: AsyncSession, assignment_id: str) -> list[str]:
    """Object-store keys of the assignment's and its submissions' attachments."""
    submission_ids = select(Submission.id).where(Submission.assignment_id == assignment_id)
    result = await db.execute(
        select(Attachment.storage_key).where(
            (Attachment.assignment_id == assignment_id)
            | Attachment.submission_id.in_(submission_ids)
        )
    )
    return list(result.scalars().all())


async def delete_cascade(db: AsyncSession, assignment: Assignment) -> None:
    submission_ids = select(Submission.id).where(Submission.assignment_id == assignment.id)
    await db.execute(
        delete(Attachment).where(
            (Attachment.assignment_id == assignment.id)
            | Attachment.submission_id.in_(submission_ids)
        )
    )
    await db.execute(delete(Submission).where(Submission.assignment_id == assignment.id))
    await db.delete(assignment)
    await db.flush()
