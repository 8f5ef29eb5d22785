"""
Grades Service Layer

Grade items come from two places: graded assignment submissions and
manually recorded grade entries. Students only see their own returned
submissions and published entries; teachers see everything in the
courses they teach; admins see everything.

The course summary is the weight-averaged percentage of a student's
published items (submissions weigh 1), mapped through the grade scale.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import Actor
from schoolhub.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from schoolhub.core.policy import Action, require
from schoolhub.modules.assignments import repository as assignment_repository
from schoolhub.modules.courses import repository as course_repository
from schoolhub.modules.courses.models import Course
from schoolhub.modules.courses.service import build_scope, get_course_or_404
from schoolhub.modules.grades import repository
from schoolhub.modules.grades.models import GradeEntry
from schoolhub.modules.grades.scale import letter_for_percentage, letter_grade, percentage
from schoolhub.modules.grades.schemas import (
    GradeEntryCreate,
    GradeEntryResponse,
    GradeEntryUpdate,
    GradeItem,
    GradeSummary,
)
from schoolhub.modules.notifications import service as notifications
from schoolhub.modules.notifications.models import NotificationKind
from schoolhub.modules.shared import utcnow
from schoolhub.modules.submissions import repository as submission_repository
from schoolhub.modules.submissions.models import SubmissionStatus

logger = logging.getLogger(__name__)


class DuplicateGradeError(ConflictError):
    def __init__(self):
        super().__init__(
            message="A grade with this type and title already exists for the student",
            error_code="DUPLICATE_GRADE",
        )


def _rounded(value: float | None) -> float | None:
    return round(value, 1) if value is not None else None


def to_entry_response(entry: GradeEntry) -> GradeEntryResponse:
    response = GradeEntryResponse.model_validate(entry)
    response.percentage = _rounded(percentage(entry.score, entry.max_score))
    response.letter_grade = letter_grade(entry.score, entry.max_score).letter
    return response


def _entry_item(entry: GradeEntry) -> GradeItem:
    return GradeItem(
        id=entry.id,
        source="entry",
        student_id=entry.student_id,
        course_id=entry.course_id,
        assignment_id=entry.assignment_id,
        type=entry.type.value,
        title=entry.title,
        score=entry.score,
        max_score=entry.max_score,
        weight=entry.weight,
        percentage=_rounded(percentage(entry.score, entry.max_score)),
        letter_grade=letter_grade(entry.score, entry.max_score).letter,
        published=entry.published,
        comments=entry.comments,
        graded_by=entry.graded_by,
        graded_at=entry.graded_at,
    )


def _submission_item(submission, assignment) -> GradeItem:
    return GradeItem(
        id=submission.id,
        source="submission",
        student_id=submission.student_id,
        course_id=assignment.course_id,
        assignment_id=assignment.id,
        type=assignment.type.value,
        title=assignment.title,
        score=submission.score,
        max_score=submission.max_score,
        percentage=_rounded(percentage(submission.score, submission.max_score)),
        letter_grade=letter_grade(submission.score, submission.max_score).letter,
        published=submission.status == SubmissionStatus.RETURNED,
        comments=submission.feedback,
        graded_by=submission.graded_by,
        graded_at=submission.graded_at,
    )


async def _collect_items(
    db: AsyncSession,
    *,
    course_ids: list[str] | None,
    student_id: str | None,
    published_only: bool,
) -> list[GradeItem]:
    graded = await submission_repository.list_graded(
        db, course_ids=course_ids, student_id=student_id, returned_only=published_only
    )
    entries = await repository.list_entries(
        db, course_ids=course_ids, student_id=student_id, published_only=published_only
    )
    items = [_submission_item(s, a) for s, a in graded] + [_entry_item(e) for e in entries]
    return sorted(items, key=lambda item: (item.graded_at is None, item.graded_at))


async def list_grades(
    db: AsyncSession,
    actor: Actor,
    course_id: str | None = None,
    student_id: str | None = None,
) -> list[GradeItem]:
    """
    Grade items visible to the actor.

    Raises:
        ForbiddenError: A student asking for someone else, or a teacher
            asking for a course they do not teach
    """
    if actor.is_student:
        if student_id and student_id != actor.id:
            raise ForbiddenError("You can only view your own grades")
        course_ids = [course_id] if course_id else None
        return await _collect_items(
            db, course_ids=course_ids, student_id=actor.id, published_only=True
        )

    if course_id:
        course = await get_course_or_404(db, course_id)
        await _require_record(db, actor, course)
        course_ids = [course.id]
    elif actor.is_teacher:
        course_ids = [c.id for c in await course_repository.list_courses(db, teacher_id=actor.id)]
    else:
        course_ids = None
    return await _collect_items(
        db, course_ids=course_ids, student_id=student_id, published_only=False
    )


async def grade_summary(
    db: AsyncSession, actor: Actor, course_id: str, student_id: str | None = None
) -> GradeSummary:
    """
    Weighted course grade for a student, from their published items.

    Raises:
        ValidationError: studentId missing for a teacher or admin
        ForbiddenError: Someone else's summary
    """
    course = await get_course_or_404(db, course_id)
    if actor.is_student:
        if student_id and student_id != actor.id:
            raise ForbiddenError("You can only view your own grades")
        student_id = actor.id
    else:
        if not student_id:
            raise ValidationError("studentId is required")
        await _require_record(db, actor, course)

    items = await _collect_items(
        db, course_ids=[course.id], student_id=student_id, published_only=True
    )
    weighted = 0.0
    total_weight = 0.0
    for item in items:
        if item.percentage is None:
            continue
        weighted += percentage(item.score, item.max_score) * item.weight
        total_weight += item.weight

    if total_weight > 0:
        pct = weighted / total_weight
        grade = letter_for_percentage(pct)
    else:
        pct = 0.0
        grade = letter_for_percentage(None)
    return GradeSummary(
        course_id=course.id,
        student_id=student_id,
        item_count=len(items),
        percentage=round(pct, 1),
        letter_grade=grade.letter,
        gpa_points=grade.points,
    )


async def _require_record(db: AsyncSession, actor: Actor, course: Course) -> None:
    scope = await build_scope(db, course, with_roster=False)
    require(
        actor,
        Action.RECORD_GRADE,
        scope,
        "Only the course teacher or an administrator can manage grades",
    )


async def _notify_published(db: AsyncSession, course: Course, entry: GradeEntry) -> None:
    await notifications.emit(
        db,
        [entry.student_id],
        title="New grade posted",
        message=(
            f"A grade was posted for {course.name}: {entry.title} "
            f"{entry.score:g}/{entry.max_score:g}."
        ),
        kind=NotificationKind.GRADE,
        resource_type="grade",
        resource_id=entry.id,
    )


async def get_entry_or_404(db: AsyncSession, entry_id: str) -> GradeEntry:
    entry = await repository.get_by_id(db, entry_id)
    if entry is None:
        raise NotFoundError("Grade", entry_id)
    return entry


async def record_grade(db: AsyncSession, actor: Actor, data: GradeEntryCreate) -> GradeEntry:
    """
    Record a manual grade entry.

    Raises:
        NotFoundError: Unknown course
        ForbiddenError: Not the course teacher nor an admin
        ValidationError: Student not in the roster, score above max, or an
            assignment from another course
        DuplicateGradeError: Same student, type and title already graded
    """
    course = await get_course_or_404(db, data.course_id)
    await _require_record(db, actor, course)

    if not await course_repository.is_in_roster(db, course.id, data.student_id):
        raise ValidationError("Student is not enrolled in this course", "NOT_ENROLLED")
    if data.score > data.max_score:
        raise ValidationError(
            f"Score must be between 0 and {data.max_score:g}", "SCORE_OUT_OF_RANGE"
        )
    if data.assignment_id:
        assignment = await assignment_repository.get_by_id(db, data.assignment_id)
        if assignment is None or assignment.course_id != course.id:
            raise ValidationError(
                "assignmentId must reference an assignment of this course", "INVALID_ASSIGNMENT"
            )

    try:
        entry = await repository.create(
            db,
            student_id=data.student_id,
            course_id=course.id,
            assignment_id=data.assignment_id,
            type=data.type,
            title=data.title,
            score=data.score,
            max_score=data.max_score,
            weight=data.weight,
            comments=data.comments,
            published=data.published,
            graded_by=actor.id,
        )
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise DuplicateGradeError() from e

    logger.info(f"Grade entry {entry.id} recorded for {entry.student_id} in {course.id}")
    if entry.published:
        await _notify_published(db, course, entry)
    return entry


async def update_grade(
    db: AsyncSession, actor: Actor, entry_id: str, data: GradeEntryUpdate
) -> GradeEntry:
    entry = await get_entry_or_404(db, entry_id)
    course = await get_course_or_404(db, entry.course_id)
    await _require_record(db, actor, course)

    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    score = changes.get("score", entry.score)
    max_score = changes.get("max_score", entry.max_score)
    if score > max_score:
        raise ValidationError(f"Score must be between 0 and {max_score:g}", "SCORE_OUT_OF_RANGE")

    was_published = entry.published
    try:
        await repository.update(db, entry, **changes, graded_by=actor.id, graded_at=utcnow())
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise DuplicateGradeError() from e

    logger.info(f"Grade entry {entry.id} updated by {actor.id}: {sorted(changes)}")
    if entry.published and not was_published:
        await _notify_published(db, course, entry)
    return entry


async def delete_grade(db: AsyncSession, actor: Actor, entry_id: str) -> None:
    entry = await get_entry_or_404(db, entry_id)
    course = await get_course_or_404(db, entry.course_id)
    await _require_record(db, actor, course)

    await repository.delete(db, entry)
    await db.commit()
    logger.info(f"Grade entry {entry_id} deleted by {actor.id}")
