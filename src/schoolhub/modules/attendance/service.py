"""
Attendance Service Layer

Teachers (for their own courses) and admins record one status per
student per day. Students can only see their own records. Being marked
absent or late notifies the student.
"""

import datetime as dt
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import Actor
from schoolhub.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from schoolhub.core.policy import Action, require
from schoolhub.modules.attendance import repository
from schoolhub.modules.attendance.models import AttendanceRecord, AttendanceStatus
from schoolhub.modules.attendance.schemas import (
    AttendanceCreate,
    AttendanceResponse,
    AttendanceStats,
    AttendanceUpdate,
    DayRosterEntry,
    DayRosterResponse,
)
from schoolhub.modules.courses import repository as course_repository
from schoolhub.modules.courses.models import Course
from schoolhub.modules.courses.service import build_scope, get_course_or_404
from schoolhub.modules.notifications import service as notifications
from schoolhub.modules.notifications.models import NotificationKind
from schoolhub.modules.shared import utcnow
from schoolhub.modules.users.schemas import UserSummary

logger = logging.getLogger(__name__)

NOTIFY_STATUSES = (AttendanceStatus.ABSENT, AttendanceStatus.LATE)


class DuplicateAttendanceError(ConflictError):
    def __init__(self):
        super().__init__(
            message="Attendance for this student and date is already recorded; update it instead",
            error_code="DUPLICATE_ATTENDANCE",
        )


async def _require_mark(db: AsyncSession, actor: Actor, course: Course) -> None:
    scope = await build_scope(db, course, with_roster=False)
    require(
        actor,
        Action.MARK_ATTENDANCE,
        scope,
        "Only the course teacher or an administrator can record attendance",
    )


async def _notify(db: AsyncSession, course: Course, record: AttendanceRecord) -> None:
    if record.status not in NOTIFY_STATUSES:
        return
    await notifications.emit(
        db,
        [record.student_id],
        title=f"Attendance: {record.status.value.capitalize()}",
        message=(
            f"You were marked as {record.status.value} for {course.name} "
            f"on {record.date.isoformat()}."
        ),
        kind=NotificationKind.ATTENDANCE,
        resource_type="attendance",
        resource_id=record.id,
    )


async def day_roster(
    db: AsyncSession, actor: Actor, course_id: str, day: dt.date | None = None
) -> DayRosterResponse:
    """
    The course roster for one day with each student's status.

    Students get only their own entry.
    """
    course = await get_course_or_404(db, course_id)
    day = day or utcnow().date()
    scope = await build_scope(db, course)
    if actor.is_student:
        require(actor, Action.SUBMIT_ASSIGNMENT, scope, "You are not enrolled in this course")
    else:
        require(actor, Action.MARK_ATTENDANCE, scope, "You do not teach this course")

    records = {r.student_id: r for r in await repository.list_for_day(db, course.id, day)}
    entries = []
    for student in await course_repository.get_roster_users(db, course.id):
        if actor.is_student and student.id != actor.id:
            continue
        record = records.get(student.id)
        entries.append(
            DayRosterEntry(
                student=UserSummary.model_validate(student),
                status=record.status if record else None,
                record=AttendanceResponse.model_validate(record) if record else None,
            )
        )
    return DayRosterResponse(course_id=course.id, date=day, entries=entries)


async def record_attendance(
    db: AsyncSession, actor: Actor, data: AttendanceCreate
) -> AttendanceRecord:
    """
    Record a student's status for a day.

    Raises:
        NotFoundError: Unknown course
        ForbiddenError: Not the course teacher nor an admin
        ValidationError: Student not in the roster
        DuplicateAttendanceError: A record for that day exists
    """
    course = await get_course_or_404(db, data.course_id)
    await _require_mark(db, actor, course)

    if not await course_repository.is_in_roster(db, course.id, data.student_id):
        raise ValidationError("Student is not enrolled in this course", "NOT_ENROLLED")
    if await repository.get_for_day(db, course.id, data.student_id, data.date) is not None:
        raise DuplicateAttendanceError()

    try:
        record = await repository.create(
            db,
            course_id=course.id,
            student_id=data.student_id,
            date=data.date,
            status=data.status,
            notes=data.notes,
            recorded_by=actor.id,
        )
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Concurrent attendance insert for {data.student_id} on {data.date}")
        raise DuplicateAttendanceError() from e

    logger.info(
        f"Attendance {record.id}: {record.student_id} {record.status.value} "
        f"in {course.id} on {record.date}"
    )
    await _notify(db, course, record)
    return record


async def update_attendance(
    db: AsyncSession, actor: Actor, record_id: str, data: AttendanceUpdate
) -> AttendanceRecord:
    record = await repository.get_by_id(db, record_id)
    if record is None:
        raise NotFoundError("Attendance record", record_id)
    course = await get_course_or_404(db, record.course_id)
    await _require_mark(db, actor, course)

    previous = record.status
    changes = data.model_dump(exclude_unset=True)
    await repository.update(db, record, **changes, recorded_by=actor.id, recorded_at=utcnow())
    await db.commit()
    logger.info(f"Attendance {record.id} updated {previous.value} -> {record.status.value}")

    if record.status != previous:
        await _notify(db, course, record)
    return record


def _stats(counts: dict[AttendanceStatus, int], **ids) -> AttendanceStats:
    total = sum(counts.values())
    present = counts.get(AttendanceStatus.PRESENT, 0)
    late = counts.get(AttendanceStatus.LATE, 0)
    rate = round((present + late) / total * 100, 1) if total else 0.0
    return AttendanceStats(
        **ids,
        total=total,
        present=present,
        absent=counts.get(AttendanceStatus.ABSENT, 0),
        late=late,
        excused=counts.get(AttendanceStatus.EXCUSED, 0),
        attendance_rate=rate,
    )


async def attendance_stats(
    db: AsyncSession,
    actor: Actor,
    course_id: str | None = None,
    student_id: str | None = None,
) -> AttendanceStats:
    """
    Counts per status plus the attendance rate.

    Students: their own records, optionally for one course.
    Teachers: one of their courses, optionally for one student.
    Admins: any course and/or student.

    Raises:
        ValidationError: Required filter missing
        ForbiddenError: Another student's or another teacher's data
    """
    if actor.is_student:
        if student_id and student_id != actor.id:
            raise ForbiddenError("You can only view your own attendance")
        student_id = actor.id
    elif not course_id and not (actor.is_admin and student_id):
        raise ValidationError(
            "course is required" if actor.is_teacher else "course or student is required"
        )

    if course_id:
        course = await get_course_or_404(db, course_id)
        if not actor.is_student:
            await _require_mark(db, actor, course)

    counts = await repository.count_by_status(db, course_id=course_id, student_id=student_id)
    return _stats(counts, course_id=course_id, student_id=student_id)
