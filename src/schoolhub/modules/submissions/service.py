"""
Submission / Grading Pipeline

    (none) --submit--> submitted --grade--> graded --publish--> returned

- A student in the roster submits text and/or files to a published
  assignment. Past the due date this only works when the assignment
  allows late submissions, and the submission is flagged late.
- Resubmitting while still `submitted` replaces the row in place; once
  graded or returned it can no longer be replaced.
- The course teacher (or an admin) grades with a score in
  [0, total points]. Late submissions lose late_penalty_pct of the
  entered score, rounded half up to one decimal. Publishing returns the
  grade to the student; regrading is allowed.
- Students never see score, raw score or feedback before the grade is
  returned.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from schoolhub.core.auth import Actor
from schoolhub.core.config import settings
from schoolhub.core.exceptions import (
    AlreadyGradedError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PastDueError,
    ValidationError,
)
from schoolhub.core.policy import Action, require
from schoolhub.core.storage import ObjectStore
from schoolhub.modules.assignments import repository as assignment_repository
from schoolhub.modules.assignments.models import Assignment
from schoolhub.modules.assignments.service import get_assignment_or_404
from schoolhub.modules.attachments import service as attachments
from schoolhub.modules.attachments.models import AttachmentParent
from schoolhub.modules.courses import repository as course_repository
from schoolhub.modules.courses.service import build_scope, get_course_or_404
from schoolhub.modules.notifications import service as notifications
from schoolhub.modules.notifications.models import NotificationKind
from schoolhub.modules.shared import ensure_utc, utcnow
from schoolhub.modules.submissions import repository
from schoolhub.modules.submissions.models import Submission, SubmissionStatus
from schoolhub.modules.submissions.schemas import (
    AssignmentSummary,
    SubmissionCreate,
    SubmissionResponse,
)
from schoolhub.modules.users.repository import UserRepository
from schoolhub.modules.users.schemas import UserSummary

logger = logging.getLogger(__name__)

ONE_DECIMAL = Decimal("0.1")


def apply_late_penalty(score: float, is_late: bool, penalty_pct: float) -> float:
    """
    Canonical score for a graded submission.

    Example:
        apply_late_penalty(87, True, 15) -> 74.0
    """
    if not is_late or penalty_pct <= 0:
        return score
    factor = (Decimal(100) - Decimal(str(penalty_pct))) / Decimal(100)
    penalised = Decimal(str(score)) * factor
    return float(penalised.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP))


def _hide_grade(response: SubmissionResponse) -> None:
    response.score = None
    response.raw_score = None
    response.feedback = None


async def to_responses(
    db: AsyncSession,
    actor: Actor,
    submissions: list[Submission],
    *,
    with_assignment: bool = False,
) -> list[SubmissionResponse]:
    """Serialize submissions, masking unpublished grades from students."""
    grouped = await attachments.list_for(
        db, AttachmentParent.SUBMISSION, [s.id for s in submissions]
    )
    students = {
        u.id: u for u in await UserRepository.get_many(db, [s.student_id for s in submissions])
    }
    assignments: dict[str, Assignment] = {}
    if with_assignment:
        for submission in submissions:
            if submission.assignment_id not in assignments:
                assignment = await assignment_repository.get_by_id(db, submission.assignment_id)
                if assignment is not None:
                    assignments[assignment.id] = assignment

    responses = []
    for submission in submissions:
        response = SubmissionResponse.model_validate(submission)
        response.attachments = grouped.get(submission.id, [])
        if submission.student_id in students:
            response.student = UserSummary.model_validate(students[submission.student_id])
        if submission.assignment_id in assignments:
            response.assignment = AssignmentSummary.model_validate(
                assignments[submission.assignment_id]
            )
        if actor.is_student and submission.status != SubmissionStatus.RETURNED:
            _hide_grade(response)
        responses.append(response)
    return responses


async def to_response(db: AsyncSession, actor: Actor, submission: Submission) -> SubmissionResponse:
    [response] = await to_responses(db, actor, [submission])
    return response


async def submit(
    db: AsyncSession,
    store: ObjectStore,
    actor: Actor,
    assignment_id: str,
    data: SubmissionCreate,
    files: list[UploadFile],
) -> Submission:
    """
    Create or replace the actor's submission for an assignment.

    Raises:
        NotFoundError: Unknown assignment
        ForbiddenError: Not in the roster, or the assignment is a draft
        PastDueError: Past the due date and late submissions are off
        ValidationError: Neither content nor files
        AlreadyGradedError: The existing submission was already graded
        PayloadTooLargeError: A file exceeds the per-file limit
    """
    assignment = await get_assignment_or_404(db, assignment_id)
    course = await get_course_or_404(db, assignment.course_id)
    scope = await build_scope(db, course)
    require(
        actor,
        Action.SUBMIT_ASSIGNMENT,
        scope,
        "Only students enrolled in this course can submit",
    )
    if not assignment.published:
        raise ForbiddenError("This assignment is not open for submissions")

    now = utcnow()
    is_late = now > ensure_utc(assignment.due_date)
    if is_late and not assignment.allow_late_submissions:
        logger.warning(f"Late submission by {actor.id} rejected for assignment {assignment.id}")
        raise PastDueError()

    content = data.content.strip()
    if not content and not files:
        raise ValidationError("Provide text content or at least one file")

    existing = await repository.get_for_pair(db, assignment.id, actor.id)
    if existing is not None and existing.status != SubmissionStatus.SUBMITTED:
        raise AlreadyGradedError()

    uploads = await attachments.read_uploads(files, settings.max_assignment_file_bytes)
    replaced_keys: list[str] = []
    try:
        if existing is not None:
            submission = await repository.update(
                db,
                existing,
                content=content,
                submitted_at=now,
                is_late=is_late,
                max_score=assignment.total_points,
            )
            _, replaced_keys = await attachments.replace_for(
                db,
                store,
                uploads,
                parent=AttachmentParent.SUBMISSION,
                parent_id=submission.id,
                uploaded_by=actor.id,
            )
        else:
            submission = await repository.create(
                db,
                assignment_id=assignment.id,
                student_id=actor.id,
                content=content,
                submitted_at=now,
                is_late=is_late,
                max_score=assignment.total_points,
            )
            await attachments.store_uploads(
                db,
                store,
                uploads,
                parent=AttachmentParent.SUBMISSION,
                parent_id=submission.id,
                uploaded_by=actor.id,
            )
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Concurrent submission by {actor.id} for assignment {assignment.id}")
        raise ConflictError(
            "A submission for this assignment is already being processed", "DUPLICATE_SUBMISSION"
        ) from e
    except Exception:
        await db.rollback()
        raise

    verb = "resubmitted" if existing is not None else "submitted"
    logger.info(
        f"Submission {submission.id} {verb} by {actor.id} for assignment {assignment.id}"
        f"{' (late)' if is_late else ''}"
    )
    await attachments.discard_objects(store, replaced_keys)

    student = await UserRepository.get_by_id(db, actor.id)
    student_name = student.full_name if student else "A student"
    await notifications.emit(
        db,
        [course.teacher_id],
        title="New submission",
        message=f"{student_name} {verb} {assignment.title}{' late' if is_late else ''}.",
        kind=NotificationKind.SUBMISSION,
        resource_type="submission",
        resource_id=submission.id,
    )
    return submission


async def grade(
    db: AsyncSession,
    actor: Actor,
    submission_id: str,
    score: float,
    feedback: str | None = None,
    publish_grade: bool = False,
) -> Submission:
    """
    Grade (or regrade) a submission.

    Raises:
        NotFoundError: Unknown submission
        ForbiddenError: Not the course teacher nor an admin
        ValidationError: Score outside [0, total points]
    """
    submission = await repository.get_by_id(db, submission_id)
    if submission is None:
        raise NotFoundError("Submission", submission_id)
    assignment = await get_assignment_or_404(db, submission.assignment_id)
    course = await get_course_or_404(db, assignment.course_id)
    scope = await build_scope(db, course, with_roster=False)
    require(
        actor,
        Action.GRADE_SUBMISSION,
        scope,
        "Only the course teacher or an administrator can grade submissions",
    )

    if not 0 <= score <= assignment.total_points:
        raise ValidationError(
            f"Score must be between 0 and {assignment.total_points:g}", "SCORE_OUT_OF_RANGE"
        )

    final_score = apply_late_penalty(score, submission.is_late, assignment.late_penalty_pct)
    await repository.update(
        db,
        submission,
        raw_score=score,
        score=final_score,
        max_score=assignment.total_points,
        feedback=feedback,
        graded_by=actor.id,
        graded_at=utcnow(),
        publish_grade=publish_grade,
        status=SubmissionStatus.RETURNED if publish_grade else SubmissionStatus.GRADED,
    )
    await db.commit()
    logger.info(
        f"Submission {submission.id} graded {final_score:g}/{assignment.total_points:g} "
        f"by {actor.id} ({submission.status.value})"
    )

    if publish_grade:
        await notifications.emit(
            db,
            [submission.student_id],
            title="Grade published",
            message=(
                f"Your submission for {assignment.title} was graded: "
                f"{final_score:g}/{assignment.total_points:g}."
            ),
            kind=NotificationKind.GRADE,
            resource_type="submission",
            resource_id=submission.id,
        )
    return submission


async def list_submissions(
    db: AsyncSession, actor: Actor, assignment_id: str
) -> list[Submission]:
    """Teacher of record and admins see every row; students only their own."""
    assignment = await get_assignment_or_404(db, assignment_id)
    if actor.is_student:
        return await repository.list_for_assignment(db, assignment.id, student_id=actor.id)

    course = await get_course_or_404(db, assignment.course_id)
    scope = await build_scope(db, course, with_roster=False)
    require(actor, Action.GRADE_SUBMISSION, scope, "You do not teach this course")
    return await repository.list_for_assignment(db, assignment.id)


async def my_submissions(db: AsyncSession, actor: Actor) -> list[Submission]:
    """
    The student's submissions in courses they are enrolled in, plus every
    graded or returned submission regardless of enrollment.
    """
    if not actor.is_student:
        raise ForbiddenError("Only students have submissions")
    courses = await course_repository.list_courses(db, student_id=actor.id)
    return await repository.list_for_student(db, actor.id, [c.id for c in courses])
