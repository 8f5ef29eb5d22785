"""
Submission Repository

Only flushes. The (assignment_id, student_id) unique constraint keeps one
row per student and assignment; resubmission updates that row.
"""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.modules.assignments.models import Assignment
from schoolhub.modules.submissions.models import Submission, SubmissionStatus

GRADED_STATUSES = (SubmissionStatus.GRADED, SubmissionStatus.RETURNED)


async def create(db: AsyncSession, **fields) -> Submission:
    """Insert a submission. Raises IntegrityError on a duplicate pair."""
    submission = Submission(**fields)
    db.add(submission)
    await db.flush()
    return submission


async def get_by_id(db: AsyncSession, submission_id: str) -> Submission | None:
    return await db.get(Submission, submission_id)


async def get_for_pair(
    db: AsyncSession, assignment_id: str, student_id: str
) -> Submission | None:
    result = await db.execute(
        select(Submission).where(
            Submission.assignment_id == assignment_id,
            Submission.student_id == student_id,
        )
    )
    return result.scalar_one_or_none()


async def list_for_assignment(
    db: AsyncSession, assignment_id: str, student_id: str | None = None
) -> list[Submission]:
    """Submissions of an assignment, oldest first, optionally for one student."""
    query = select(Submission).where(Submission.assignment_id == assignment_id)
    if student_id is not None:
        query = query.where(Submission.student_id == student_id)
    result = await db.execute(query.order_by(Submission.submitted_at))
    return list(result.scalars().all())


async def list_for_student(
    db: AsyncSession, student_id: str, enrolled_course_ids: list[str]
) -> list[Submission]:
    """
    A student's submissions in courses they are still enrolled in, plus
    every graded or returned submission wherever it was made. Newest first.
    """
    query = (
        select(Submission)
        .join(Assignment, Assignment.id == Submission.assignment_id)
        .where(Submission.student_id == student_id)
    )
    visible = Submission.status.in_(GRADED_STATUSES)
    if enrolled_course_ids:
        visible = or_(visible, Assignment.course_id.in_(set(enrolled_course_ids)))
    result = await db.execute(query.where(visible).order_by(Submission.submitted_at.desc()))
    return list(result.scalars().all())


async def list_graded(
    db: AsyncSession,
    *,
    course_ids: list[str] | None = None,
    student_id: str | None = None,
    returned_only: bool = False,
) -> list[tuple[Submission, Assignment]]:
    """Graded submissions joined with their assignment, for grade listings."""
    statuses = (SubmissionStatus.RETURNED,) if returned_only else GRADED_STATUSES
    query = (
        select(Submission, Assignment)
        .join(Assignment, Assignment.id == Submission.assignment_id)
        .where(Submission.status.in_(statuses))
    )
    if course_ids is not None:
        if not course_ids:
            return []
        query = query.where(Assignment.course_id.in_(set(course_ids)))
    if student_id is not None:
        query = query.where(Submission.student_id == student_id)
    result = await db.execute(query.order_by(Submission.graded_at))
    return [(submission, assignment) for submission, assignment in result.all()]


async def update(db: AsyncSession, submission: Submission, **fields) -> Submission:
    for name, value in fields.items():
        setattr(submission, name, value)
    await db.flush()
    return submission
