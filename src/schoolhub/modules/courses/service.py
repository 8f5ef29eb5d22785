"""
Course Service Layer

Course CRUD, the catalog, my-courses and the course detail view.

Other services call get_course_or_404 and build_scope to authorize
course-scoped actions against the policy table.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import Actor
from schoolhub.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from schoolhub.core.policy import Action, CourseScope, require
from schoolhub.core.storage import ObjectStore
from schoolhub.modules.attachments import service as attachments
from schoolhub.modules.courses import repository
from schoolhub.modules.courses.models import Course, Semester
from schoolhub.modules.courses.schemas import (
    CourseCreate,
    CourseDetailResponse,
    CourseResponse,
    CourseUpdate,
)
from schoolhub.modules.enrollments import repository as enrollment_repository
from schoolhub.modules.users.models import User, UserRole
from schoolhub.modules.users.repository import UserRepository
from schoolhub.modules.users.schemas import UserSummary

logger = logging.getLogger(__name__)


async def get_course_or_404(db: AsyncSession, course_id: str) -> Course:
    course = await repository.get_by_id(db, course_id)
    if course is None:
        raise NotFoundError("Course", course_id)
    return course


async def build_scope(
    db: AsyncSession,
    course: Course,
    *,
    with_roster: bool = True,
    with_requesters: bool = False,
) -> CourseScope:
    """Describe a course for the policy."""
    roster = await repository.get_roster_ids(db, course.id) if with_roster else []
    requesters = (
        await enrollment_repository.get_active_requester_ids(db, course.id)
        if with_requesters
        else []
    )
    return CourseScope(
        teacher_id=course.teacher_id,
        roster=frozenset(roster),
        requesters=frozenset(requesters),
    )


async def _require_teacher(db: AsyncSession, teacher_id: str) -> User:
    teacher = await UserRepository.get_by_id(db, teacher_id)
    if teacher is None or teacher.role != UserRole.TEACHER:
        raise ValidationError("teacherId must reference an existing teacher", "INVALID_TEACHER")
    return teacher


async def _ensure_code_free(db: AsyncSession, code: str, course_id: str | None = None) -> None:
    existing = await repository.get_by_code(db, code)
    if existing is not None and existing.id != course_id:
        raise ConflictError(f"Course code {code} is already in use", "CODE_TAKEN")


def _schedule_json(items) -> list[dict]:
    return [item.model_dump(mode="json", by_alias=True) for item in items]


async def to_response(db: AsyncSession, course: Course) -> CourseResponse:
    response = CourseResponse.model_validate(course)
    teacher = await UserRepository.get_by_id(db, course.teacher_id)
    if teacher is not None:
        response.teacher = UserSummary.model_validate(teacher)
    return response


async def to_detail(db: AsyncSession, course: Course) -> CourseDetailResponse:
    """Course with roster users, material ids and assignment ids."""
    base = await to_response(db, course)
    students = await repository.get_roster_users(db, course.id)
    return CourseDetailResponse(
        **base.model_dump(),
        students=[UserSummary.model_validate(s) for s in students],
        material_ids=await repository.get_material_ids(db, course.id),
        assignment_ids=await repository.get_assignment_ids(db, course.id),
    )


async def create_course(db: AsyncSession, actor: Actor, data: CourseCreate) -> Course:
    """
    Create a course.

    Teachers become teacher of record; admins must name a teacher.

    Raises:
        ForbiddenError: Students
        ValidationError: Missing or invalid teacherId
        ConflictError: Code already used
    """
    require(
        actor, Action.CREATE_COURSE, message="Only teachers and administrators can create courses"
    )

    if actor.is_teacher:
        teacher_id = actor.id
    elif data.teacher_id:
        teacher_id = data.teacher_id
    else:
        raise ValidationError("teacherId is required when an administrator creates a course")
    await _require_teacher(db, teacher_id)
    await _ensure_code_free(db, data.code)

    try:
        course = await repository.create(
            db,
            name=data.name,
            code=data.code,
            description=data.description,
            teacher_id=teacher_id,
            grade=data.grade,
            academic_year=data.academic_year,
            semester=data.semester,
            schedule=_schedule_json(data.schedule),
            syllabus_url=data.syllabus_url,
        )
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError(f"Course code {data.code} is already in use", "CODE_TAKEN") from e

    logger.info(f"Course created: {course.id} ({course.code}) by {actor.id}")
    return course


async def list_catalog(
    db: AsyncSession,
    *,
    semester: Semester | None = None,
    academic_year: str | None = None,
    teacher_id: str | None = None,
) -> list[Course]:
    """The course catalog, visible to every authenticated actor."""
    return await repository.list_courses(
        db, semester=semester, academic_year=academic_year, teacher_id=teacher_id
    )


async def my_courses(db: AsyncSession, actor: Actor) -> list[Course]:
    """Student: enrolled courses. Teacher: taught courses. Admin: all."""
    if actor.is_student:
        return await repository.list_courses(db, student_id=actor.id)
    if actor.is_teacher:
        return await repository.list_courses(db, teacher_id=actor.id)
    return await repository.list_courses(db)


async def get_course(db: AsyncSession, actor: Actor, course_id: str) -> Course:
    """
    Load a course the actor may read in full.

    Raises:
        NotFoundError: Unknown course
        ForbiddenError: Student without membership or active request,
            or teacher of another course
    """
    course = await get_course_or_404(db, course_id)
    scope = await build_scope(db, course, with_requesters=actor.is_student)
    require(actor, Action.READ_COURSE, scope, "You do not have access to this course")
    return course


async def update_course(
    db: AsyncSession, actor: Actor, course_id: str, data: CourseUpdate
) -> Course:
    course = await get_course_or_404(db, course_id)
    require(
        actor,
        Action.UPDATE_COURSE,
        CourseScope(teacher_id=course.teacher_id),
        "Only the course teacher or an administrator can update this course",
    )

    changes = data.model_dump(exclude_unset=True)
    for required in ("name", "code", "grade", "academic_year", "semester", "teacher_id"):
        if required in changes and changes[required] is None:
            raise ValidationError(f"{required} cannot be empty")

    if "teacher_id" in changes and changes["teacher_id"] != course.teacher_id:
        if not actor.is_admin:
            raise ForbiddenError("Only administrators can reassign a course")
        await _require_teacher(db, changes["teacher_id"])
    if "code" in changes:
        await _ensure_code_free(db, changes["code"], course.id)
    if "schedule" in changes:
        changes["schedule"] = _schedule_json(data.schedule or [])
    if "description" in changes and changes["description"] is None:
        changes["description"] = ""

    try:
        await repository.update(db, course, **changes)
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError("Course code is already in use", "CODE_TAKEN") from e

    logger.info(f"Course {course.id} updated by {actor.id}: {sorted(changes)}")
    return course


async def delete_course(
    db: AsyncSession, store: ObjectStore, actor: Actor, course_id: str
) -> None:
    """Delete a course, everything it owns and the files stored for it."""
    course = await get_course_or_404(db, course_id)
    require(
        actor,
        Action.DELETE_COURSE,
        CourseScope(teacher_id=course.teacher_id),
        "Only the course teacher or an administrator can delete this course",
    )

    keys = await repository.storage_keys(db, course.id)
    await repository.delete_cascade(db, course)
    await db.commit()
    logger.info(f"Course {course_id} deleted by {actor.id}")

    await attachments.discard_objects(store, keys)
