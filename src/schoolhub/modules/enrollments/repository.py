"""
Enrollment Request Repository

Database operations for enrollment requests. The (student_id, course_id)
unique constraint guarantees at most one row per pair; a rejected row is
reused when the student asks again.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.exceptions import InvalidTransitionError
from schoolhub.modules.enrollments.models import EnrollmentRequest, EnrollmentStatus

ACTIVE_STATUSES = (EnrollmentStatus.PENDING, EnrollmentStatus.APPROVED)


async def create(
    db: AsyncSession, *, student_id: str, course_id: str, notes: str | None = None
) -> EnrollmentRequest:
    """Insert a new pending request. Raises IntegrityError on a duplicate pair."""
    request = EnrollmentRequest(student_id=student_id, course_id=course_id, notes=notes)
    db.add(request)
    await db.flush()
    return request


async def get_by_id(db: AsyncSession, request_id: str) -> EnrollmentRequest | None:
    return await db.get(EnrollmentRequest, request_id)


async def get_for_pair(
    db: AsyncSession, student_id: str, course_id: str
) -> EnrollmentRequest | None:
    result = await db.execute(
        select(EnrollmentRequest).where(
            EnrollmentRequest.student_id == student_id,
            EnrollmentRequest.course_id == course_id,
        )
    )
    return result.scalar_one_or_none()


async def list_for_course(
    db: AsyncSession, course_id: str, status: EnrollmentStatus | None = None
) -> list[EnrollmentRequest]:
    """Requests for a course, newest first."""
    query = select(EnrollmentRequest).where(EnrollmentRequest.course_id == course_id)
    if status is not None:
        query = query.where(EnrollmentRequest.status == status)
    result = await db.execute(query.order_by(EnrollmentRequest.request_date.desc()))
    return list(result.scalars().all())


async def list_for_student(
    db: AsyncSession, student_id: str, status: EnrollmentStatus | None = None
) -> list[EnrollmentRequest]:
    query = select(EnrollmentRequest).where(EnrollmentRequest.student_id == student_id)
    if status is not None:
        query = query.where(EnrollmentRequest.status == status)
    result = await db.execute(query.order_by(EnrollmentRequest.request_date.desc()))
    return list(result.scalars().all())


async def list_pending_for_students(
    db: AsyncSession, course_id: str, student_ids: list[str]
) -> list[EnrollmentRequest]:
    if not student_ids:
        return []
    result = await db.execute(
        select(EnrollmentRequest).where(
            EnrollmentRequest.course_id == course_id,
            EnrollmentRequest.student_id.in_(set(student_ids)),
            EnrollmentRequest.status == EnrollmentStatus.PENDING,
        )
    )
    return list(result.scalars().all())


async def get_active_requester_ids(db: AsyncSession, course_id: str) -> list[str]:
    """Students holding a pending or approved request for the course."""
    result = await db.execute(
        select(EnrollmentRequest.student_id).where(
            EnrollmentRequest.course_id == course_id,
            EnrollmentRequest.status.in_(ACTIVE_STATUSES),
        )
    )
    return list(result.scalars().all())


# Valid status transitions. Re-applying the current status is always allowed
# (idempotent approve/reject); anything else must be listed here.
VALID_STATUS_TRANSITIONS: dict[EnrollmentStatus, set[EnrollmentStatus]] = {
    EnrollmentStatus.PENDING: {
        EnrollmentStatus.APPROVED,
        EnrollmentStatus.REJECTED,
    },
    # A rejected student may ask again; the row is reset in place
    EnrollmentStatus.REJECTED: {EnrollmentStatus.PENDING},
    EnrollmentStatus.APPROVED: set(),
}


def can_transition(current: EnrollmentStatus, new: EnrollmentStatus) -> bool:
    return new == current or new in VALID_STATUS_TRANSITIONS.get(current, set())


async def update_status(
    db: AsyncSession,
    request: EnrollmentRequest,
    status: EnrollmentStatus,
    **kwargs,
) -> EnrollmentRequest:
    """
    Move a request to a new status and set any extra columns.

    Raises:
        InvalidTransitionError: If the transition is not allowed
    """
    if not can_transition(request.status, status):
        raise InvalidTransitionError("enrollment request", request.status.value, status.value)

    request.status = status
    for key, value in kwargs.items():
        setattr(request, key, value)
    await db.flush()
    return request


async def delete(db: AsyncSession, request: EnrollmentRequest) -> None:
    await db.delete(request)
    await db.flush()
