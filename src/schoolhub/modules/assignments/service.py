"""
Assignment Service Layer

Assignment CRUD with attachments. Visibility:
- Admin: every assignment
- Teacher: assignments of the courses they teach
- Student: published assignments of the courses they are enrolled in

The roster is notified when an assignment is created published, or when
a draft becomes published.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from schoolhub.core.auth import Actor
from schoolhub.core.config import settings
from schoolhub.core.exceptions import NotFoundError, ValidationError
from schoolhub.core.policy import Action, require
from schoolhub.core.storage import ObjectStore
from schoolhub.modules.assignments import repository
from schoolhub.modules.assignments.models import Assignment
from schoolhub.modules.assignments.schemas import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentUpdate,
)
from schoolhub.modules.attachments import service as attachments
from schoolhub.modules.attachments.models import AttachmentParent
from schoolhub.modules.courses import repository as course_repository
from schoolhub.modules.courses.models import Course
from schoolhub.modules.courses.service import build_scope, get_course_or_404
from schoolhub.modules.notifications import service as notifications
from schoolhub.modules.notifications.models import NotificationKind

logger = logging.getLogger(__name__)


async def get_assignment_or_404(db: AsyncSession, assignment_id: str) -> Assignment:
    assignment = await repository.get_by_id(db, assignment_id)
    if assignment is None:
        raise NotFoundError("Assignment", assignment_id)
    return assignment


async def to_responses(
    db: AsyncSession, assignments: list[Assignment]
) -> list[AssignmentResponse]:
    grouped = await attachments.list_for(
        db, AttachmentParent.ASSIGNMENT, [a.id for a in assignments]
    )
    responses = []
    for assignment in assignments:
        response = AssignmentResponse.model_validate(assignment)
        response.attachments = grouped.get(assignment.id, [])
        responses.append(response)
    return responses


async def to_response(db: AsyncSession, assignment: Assignment) -> AssignmentResponse:
    [response] = await to_responses(db, [assignment])
    return response


async def _notify_published(db: AsyncSession, course: Course, assignment: Assignment) -> None:
    roster = await course_repository.get_roster_ids(db, course.id)
    await notifications.emit(
        db,
        roster,
        title="New assignment",
        message=(
            f"{assignment.title} was posted in {course.name}. "
            f"Due {assignment.due_date:%Y-%m-%d %H:%M} UTC."
        ),
        kind=NotificationKind.ASSIGNMENT,
        resource_type="assignment",
        resource_id=assignment.id,
    )


async def _require_manage(db: AsyncSession, actor: Actor, course: Course) -> None:
    scope = await build_scope(db, course, with_roster=False)
    require(
        actor,
        Action.MANAGE_ASSIGNMENT,
        scope,
        "Only the course teacher or an administrator can manage its assignments",
    )


async def create_assignment(
    db: AsyncSession,
    store: ObjectStore,
    actor: Actor,
    data: AssignmentCreate,
    files: list[UploadFile],
) -> Assignment:
    """
    Create an assignment with optional attachments.

    Raises:
        NotFoundError: Unknown course
        ForbiddenError: Not the course teacher nor an admin
        PayloadTooLargeError: A file exceeds the assignment limit
        InternalError: The object store failed
    """
    course = await get_course_or_404(db, data.course_id)
    await _require_manage(db, actor, course)
    uploads = await attachments.read_uploads(files, settings.max_assignment_file_bytes)

    try:
        assignment = await repository.create(
            db,
            course_id=course.id,
            title=data.title,
            description=data.description,
            due_date=data.due_date,
            total_points=data.total_points,
            type=data.type,
            allow_late_submissions=data.allow_late_submissions,
            late_penalty_pct=data.late_penalty_pct,
            published=data.published,
            created_by=actor.id,
        )
        await attachments.store_uploads(
            db,
            store,
            uploads,
            parent=AttachmentParent.ASSIGNMENT,
            parent_id=assignment.id,
            uploaded_by=actor.id,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"Assignment {assignment.id} created in course {course.id} by {actor.id}")
    if assignment.published:
        await _notify_published(db, course, assignment)
    return assignment


async def list_assignments(
    db: AsyncSession, actor: Actor, course_id: str | None = None
) -> list[Assignment]:
    """Assignments visible to the actor, optionally for one course."""
    if course_id is not None:
        course = await get_course_or_404(db, course_id)
        scope = await build_scope(db, course)
        if actor.is_student:
            require(actor, Action.SUBMIT_ASSIGNMENT, scope, "You are not enrolled in this course")
        else:
            require(actor, Action.MANAGE_ASSIGNMENT, scope, "You do not teach this course")
        return await repository.list_assignments(
            db, course_ids=[course.id], published_only=actor.is_student
        )

    if actor.is_admin:
        return await repository.list_assignments(db)
    if actor.is_teacher:
        courses = await course_repository.list_courses(db, teacher_id=actor.id)
    else:
        courses = await course_repository.list_courses(db, student_id=actor.id)
    return await repository.list_assignments(
        db, course_ids=[c.id for c in courses], published_only=actor.is_student
    )


async def get_assignment(db: AsyncSession, actor: Actor, assignment_id: str) -> Assignment:
    """
    Raises:
        NotFoundError: Unknown assignment, or a draft seen by a student
        ForbiddenError: Not enrolled / not teaching the course
    """
    assignment = await get_assignment_or_404(db, assignment_id)
    course = await get_course_or_404(db, assignment.course_id)
    scope = await build_scope(db, course)
    if actor.is_student:
        require(actor, Action.SUBMIT_ASSIGNMENT, scope, "You are not enrolled in this course")
        if not assignment.published:
            raise NotFoundError("Assignment", assignment_id)
    else:
        require(actor, Action.MANAGE_ASSIGNMENT, scope, "You do not teach this course")
    return assignment


async def update_assignment(
    db: AsyncSession,
    store: ObjectStore,
    actor: Actor,
    assignment_id: str,
    data: AssignmentUpdate,
    files: list[UploadFile],
) -> Assignment:
    """Update fields and append any new attachments."""
    assignment = await get_assignment_or_404(db, assignment_id)
    course = await get_course_or_404(db, assignment.course_id)
    await _require_manage(db, actor, course)
    uploads = await attachments.read_uploads(files, settings.max_assignment_file_bytes)

    changes = data.model_dump(exclude_unset=True)
    for required in ("title", "due_date", "total_points", "type", "published"):
        if required in changes and changes[required] is None:
            raise ValidationError(f"{required} cannot be empty")
    for flag in ("allow_late_submissions", "late_penalty_pct"):
        if flag in changes and changes[flag] is None:
            changes.pop(flag)
    if changes.get("description", "") is None:
        changes["description"] = ""

    was_published = assignment.published
    try:
        await repository.update(db, assignment, **changes)
        await attachments.store_uploads(
            db,
            store,
            uploads,
            parent=AttachmentParent.ASSIGNMENT,
            parent_id=assignment.id,
            uploaded_by=actor.id,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"Assignment {assignment.id} updated by {actor.id}: {sorted(changes)}")
    if assignment.published and not was_published:
        await _notify_published(db, course, assignment)
    return assignment


async def delete_assignment(
    db: AsyncSession, store: ObjectStore, actor: Actor, assignment_id: str
) -> None:
    """Delete an assignment, its submissions and all their attachments."""
    assignment = await get_assignment_or_404(db, assignment_id)
    course = await get_course_or_404(db, assignment.course_id)
    await _require_manage(db, actor, course)

    keys = await repository.storage_keys(db, assignment.id)
    await repository.delete_cascade(db, assignment)
    await db.commit()
    logger.info(f"Assignment {assignment_id} deleted by {actor.id}")

    await attachments.discard_objects(store, keys)
