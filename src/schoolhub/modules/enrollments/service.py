"""
Enrollment Service Layer

The enrollment state machine:

    (none)   --create-->  pending  --approve-->  approved
                             |------reject--->   rejected
                             |------cancel--->   (deleted)
    rejected --create-->  pending   (row reset in place)

Approve and direct enroll mutate the roster in the same transaction as
the request, with the course row locked. Notifications go out after the
commit and never affect the outcome.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import Actor
from schoolhub.core.exceptions import (
    AlreadyApprovedPendingError,
    AlreadyEnrolledError,
    DuplicatePendingError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from schoolhub.core.policy import Action, CourseScope, require
from schoolhub.modules.courses import repository as course_repository
from schoolhub.modules.courses.models import Course
from schoolhub.modules.courses.service import get_course_or_404
from schoolhub.modules.enrollments import repository
from schoolhub.modules.enrollments.models import EnrollmentRequest, EnrollmentStatus
from schoolhub.modules.enrollments.schemas import CourseSummary, EnrollmentRequestResponse
from schoolhub.modules.notifications import service as notifications
from schoolhub.modules.notifications.models import NotificationKind
from schoolhub.modules.shared import utcnow
from schoolhub.modules.users.models import UserRole
from schoolhub.modules.users.repository import UserRepository
from schoolhub.modules.users.schemas import UserSummary

logger = logging.getLogger(__name__)

DECISIONS = (EnrollmentStatus.APPROVED, EnrollmentStatus.REJECTED)


async def _get_request_or_404(db: AsyncSession, request_id: str) -> EnrollmentRequest:
    request = await repository.get_by_id(db, request_id)
    if request is None:
        raise NotFoundError("Enrollment request", request_id)
    return request


async def _lock_course_or_404(db: AsyncSession, course_id: str) -> Course:
    course = await course_repository.lock(db, course_id)
    if course is None:
        raise NotFoundError("Course", course_id)
    return course


async def _notify_decision(
    db: AsyncSession, course: Course, requests: list[EnrollmentRequest]
) -> None:
    for request in requests:
        verb = "approved" if request.status == EnrollmentStatus.APPROVED else "rejected"
        message = f"Your enrollment request for {course.name} ({course.code}) was {verb}."
        if request.notes and request.status == EnrollmentStatus.REJECTED:
            message = f"{message} Notes: {request.notes}"
        await notifications.emit(
            db,
            [request.student_id],
            title=f"Enrollment request {verb}",
            message=message,
            kind=NotificationKind.ENROLLMENT,
            resource_type="course",
            resource_id=course.id,
        )


async def to_responses(
    db: AsyncSession, requests: list[EnrollmentRequest]
) -> list[EnrollmentRequestResponse]:
    """Attach student and course summaries to each request."""
    students = {
        u.id: u for u in await UserRepository.get_many(db, [r.student_id for r in requests])
    }
    courses: dict[str, Course] = {}
    for request in requests:
        if request.course_id not in courses:
            course = await course_repository.get_by_id(db, request.course_id)
            if course is not None:
                courses[course.id] = course

    responses = []
    for request in requests:
        response = EnrollmentRequestResponse.model_validate(request)
        if request.student_id in students:
            response.student = UserSummary.model_validate(students[request.student_id])
        if request.course_id in courses:
            response.course = CourseSummary.model_validate(courses[request.course_id])
        responses.append(response)
    return responses


async def create_request(
    db: AsyncSession, actor: Actor, course_id: str, notes: str | None = None
) -> EnrollmentRequest:
    """
    A student asks to join a course.

    Raises:
        NotFoundError: Unknown course
        ForbiddenError: Actor is not a student
        AlreadyEnrolledError: Already in the roster
        DuplicatePendingError: A pending request exists (or a concurrent
            insert won the race)
        AlreadyApprovedPendingError: An approved request exists
    """
    course = await get_course_or_404(db, course_id)
    require(
        actor,
        Action.CREATE_ENROLLMENT_REQUEST,
        CourseScope(teacher_id=course.teacher_id, subject_id=actor.id),
        "Only students can request enrollment",
    )

    if await course_repository.is_in_roster(db, course.id, actor.id):
        raise AlreadyEnrolledError()

    existing = await repository.get_for_pair(db, actor.id, course.id)
    if existing is not None:
        if existing.status == EnrollmentStatus.PENDING:
            raise DuplicatePendingError()
        if existing.status == EnrollmentStatus.APPROVED:
            raise AlreadyApprovedPendingError()
        request = await repository.update_status(
            db,
            existing,
            EnrollmentStatus.PENDING,
            request_date=utcnow(),
            response_date=None,
            responder_id=None,
            notes=notes,
        )
        await db.commit()
        logger.info(f"Enrollment request {request.id} re-opened by student {actor.id}")
    else:
        try:
            request = await repository.create(
                db, student_id=actor.id, course_id=course.id, notes=notes
            )
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Concurrent enrollment request for {actor.id} in {course.id}")
            raise DuplicatePendingError() from e
        logger.info(f"Enrollment request {request.id} created by student {actor.id}")

    student = await UserRepository.get_by_id(db, actor.id)
    student_name = student.full_name if student else "A student"
    await notifications.emit(
        db,
        [course.teacher_id],
        title="New enrollment request",
        message=f"{student_name} requested to join {course.name} ({course.code}).",
        kind=NotificationKind.ENROLLMENT,
        resource_type="enrollment_request",
        resource_id=request.id,
    )
    return request


async def decide(
    db: AsyncSession,
    actor: Actor,
    request_id: str,
    status: EnrollmentStatus,
    notes: str | None = None,
) -> EnrollmentRequest:
    """
    Approve or reject a request.

    Re-applying the current decision is an idempotent success that
    changes nothing. Approving adds the student to the roster unless
    they are already a member.

    Raises:
        ValidationError: status is not approved/rejected, or the
            transition is invalid (approved <-> rejected)
        NotFoundError: Unknown request or course
        ForbiddenError: Not the course teacher nor an admin
    """
    if status not in DECISIONS:
        raise ValidationError("Status must be either approved or rejected", "INVALID_STATUS")

    request = await _get_request_or_404(db, request_id)
    course = await _lock_course_or_404(db, request.course_id)
    require(
        actor,
        Action.DECIDE_ENROLLMENT_REQUEST,
        CourseScope(teacher_id=course.teacher_id),
        "Not authorized to process enrollment requests for this course",
    )

    if request.status == status:
        logger.info(f"Enrollment request {request.id} already {status.value}")
        await db.commit()
        return request

    if not repository.can_transition(request.status, status):
        logger.warning(
            f"Rejected enrollment transition {request.status.value} -> {status.value} "
            f"for {request.id}"
        )
        raise InvalidTransitionError("enrollment request", request.status.value, status.value)

    fields = {"response_date": utcnow(), "responder_id": actor.id}
    if notes is not None:
        fields["notes"] = notes
    await repository.update_status(db, request, status, **fields)

    if status == EnrollmentStatus.APPROVED:
        await course_repository.add_to_roster(db, course.id, [request.student_id])

    await db.commit()
    logger.info(f"Enrollment request {request.id} {status.value} by {actor.id}")

    await _notify_decision(db, course, [request])
    return request


async def cancel(db: AsyncSession, actor: Actor, request_id: str) -> None:
    """
    The owning student withdraws a pending request.

    Raises:
        NotFoundError: Unknown request
        ForbiddenError: Not the owning student
        InvalidTransitionError: Request is no longer pending
    """
    request = await _get_request_or_404(db, request_id)
    if not actor.is_student or request.student_id != actor.id:
        raise ForbiddenError("You can only cancel your own enrollment requests")
    if request.status != EnrollmentStatus.PENDING:
        raise InvalidTransitionError("enrollment request", request.status.value, "cancelled")

    await repository.delete(db, request)
    await db.commit()
    logger.info(f"Enrollment request {request_id} cancelled by student {actor.id}")


async def _validate_students(db: AsyncSession, student_ids: list[str]) -> None:
    users = {u.id: u for u in await UserRepository.get_many(db, student_ids)}
    invalid = [
        sid for sid in student_ids if sid not in users or users[sid].role != UserRole.STUDENT
    ]
    if invalid:
        raise ValidationError(
            f"Not existing students: {', '.join(invalid)}",
            "INVALID_STUDENT",
        )


async def direct_enroll(
    db: AsyncSession, actor: Actor, course_id: str, student_ids: list[str]
) -> Course:
    """
    Add students to the roster without a request.

    Pending requests for the same pairs become approved, attributed to
    the actor.
    """
    course = await _lock_course_or_404(db, course_id)
    require(
        actor,
        Action.MANAGE_ROSTER,
        CourseScope(teacher_id=course.teacher_id),
        "Only the course teacher or an administrator can manage the roster",
    )
    student_ids = list(dict.fromkeys(student_ids))
    await _validate_students(db, student_ids)

    added = await course_repository.add_to_roster(db, course.id, student_ids)
    pending = await repository.list_pending_for_students(db, course.id, student_ids)
    now = utcnow()
    for request in pending:
        await repository.update_status(
            db, request, EnrollmentStatus.APPROVED, response_date=now, responder_id=actor.id
        )

    await db.commit()
    logger.info(
        f"Course {course.id}: {len(added)} student(s) enrolled directly by {actor.id}, "
        f"{len(pending)} pending request(s) approved"
    )

    await _notify_decision(db, course, pending)
    return course


async def direct_unenroll(
    db: AsyncSession, actor: Actor, course_id: str, student_ids: list[str]
) -> Course:
    """Remove students from the roster. Approved requests stay as history."""
    course = await _lock_course_or_404(db, course_id)
    require(
        actor,
        Action.MANAGE_ROSTER,
        CourseScope(teacher_id=course.teacher_id),
        "Only the course teacher or an administrator can manage the roster",
    )

    removed = await course_repository.remove_from_roster(db, course.id, student_ids)
    await db.commit()
    logger.info(f"Course {course.id}: {removed} student(s) unenrolled by {actor.id}")
    return course


async def list_for_course(
    db: AsyncSession,
    actor: Actor,
    course_id: str,
    status: EnrollmentStatus | None = EnrollmentStatus.PENDING,
) -> list[EnrollmentRequest]:
    """Requests for a course, newest first. None means every status."""
    course = await get_course_or_404(db, course_id)
    require(
        actor,
        Action.DECIDE_ENROLLMENT_REQUEST,
        CourseScope(teacher_id=course.teacher_id),
        "Not authorized to view enrollment requests for this course",
    )
    return await repository.list_for_course(db, course.id, status)


async def list_mine(
    db: AsyncSession, actor: Actor, status: EnrollmentStatus | None = None
) -> list[EnrollmentRequest]:
    if not actor.is_student:
        raise ForbiddenError("Only students can view their enrollment requests")
    return await repository.list_for_student(db, actor.id, status)
