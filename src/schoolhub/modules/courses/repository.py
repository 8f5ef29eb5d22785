"""
Course Repository

Database operations for courses and their rosters. Roster membership is a
row in course_students; the composite primary key keeps it a set.

Only flushes. The service layer commits.
"""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.modules.assignments.models import Assignment
from schoolhub.modules.attachments.models import Attachment
from schoolhub.modules.attendance.models import AttendanceRecord
from schoolhub.modules.courses.models import Course, CourseStudent, Semester
from schoolhub.modules.enrollments.models import EnrollmentRequest
from schoolhub.modules.grades.models import GradeEntry
from schoolhub.modules.materials.models import Material
from schoolhub.modules.submissions.models import Submission
from schoolhub.modules.users.models import User


async def create(db: AsyncSession, **fields) -> Course:
    """Create a new course."""
    course = Course(**fields)
    db.add(course)
    await db.flush()
    return course


async def get_by_id(db: AsyncSession, course_id: str) -> Course | None:
    """Get course by ID."""
    return await db.get(Course, course_id)


async def get_by_code(db: AsyncSession, code: str) -> Course | None:
    result = await db.execute(select(Course).where(Course.code == code))
    return result.scalar_one_or_none()


async def lock(db: AsyncSession, course_id: str) -> Course | None:
    """
    Load a course with a row lock held until the transaction ends.

    Every roster mutation goes through here so approvals and direct
    enrollments on one course are serialized. SQLite ignores FOR UPDATE.
    """
    result = await db.execute(
        select(Course).where(Course.id == course_id).with_for_update()
    )
    return result.scalar_one_or_none()


async def list_courses(
    db: AsyncSession,
    *,
    semester: Semester | None = None,
    academic_year: str | None = None,
    teacher_id: str | None = None,
    student_id: str | None = None,
) -> list[Course]:
    """
    List courses ordered by code.

    Args:
        semester: Only courses in this term
        academic_year: Only courses in this academic year
        teacher_id: Only courses taught by this user
        student_id: Only courses whose roster contains this user
    """
    query = select(Course)
    if semester is not None:
        query = query.where(Course.semester == semester)
    if academic_year:
        query = query.where(Course.academic_year == academic_year)
    if teacher_id:
        query = query.where(Course.teacher_id == teacher_id)
    if student_id:
        query = query.join(CourseStudent, CourseStudent.course_id == Course.id).where(
            CourseStudent.student_id == student_id
        )
    result = await db.execute(query.order_by(Course.code))
    return list(result.scalars().all())


async def count_taught_by(db: AsyncSession, teacher_id: str) -> int:
    result = await db.execute(
        select(func.count()).select_from(Course).where(Course.teacher_id == teacher_id)
    )
    return result.scalar_one()


async def update(db: AsyncSession, course: Course, **fields) -> Course:
    for name, value in fields.items():
        setattr(course, name, value)
    await db.flush()
    return course


# ============================================
# Roster
# ============================================


async def get_roster_ids(db: AsyncSession, course_id: str) -> list[str]:
    """Student ids in the roster, oldest enrollment first."""
    result = await db.execute(
        select(CourseStudent.student_id)
        .where(CourseStudent.course_id == course_id)
        .order_by(CourseStudent.enrolled_at, CourseStudent.student_id)
    )
    return list(result.scalars().all())


async def get_roster_users(db: AsyncSession, course_id: str) -> list[User]:
    result = await db.execute(
        select(User)
        .join(CourseStudent, CourseStudent.student_id == User.id)
        .where(CourseStudent.course_id == course_id)
        .order_by(User.last_name, User.first_name)
    )
    return list(result.scalars().all())


async def is_in_roster(db: AsyncSession, course_id: str, student_id: str) -> bool:
    result = await db.execute(
        select(CourseStudent.student_id).where(
            CourseStudent.course_id == course_id,
            CourseStudent.student_id == student_id,
        )
    )
    return result.scalar_one_or_none() is not None


async def add_to_roster(db: AsyncSession, course_id: str, student_ids: list[str]) -> list[str]:
    """
    Union student ids into the roster.

    Returns:
        The ids that were not already members
    """
    existing = set(await get_roster_ids(db, course_id))
    added = []
    for student_id in dict.fromkeys(student_ids):
        if student_id in existing:
            continue
        db.add(CourseStudent(course_id=course_id, student_id=student_id))
        added.append(student_id)
    if added:
        await db.flush()
    return added


async def remove_from_roster(db: AsyncSession, course_id: str, student_ids: list[str]) -> int:
    """Remove student ids from the roster. Returns the number removed."""
    if not student_ids:
        return 0
    result = await db.execute(
        delete(CourseStudent).where(
            CourseStudent.course_id == course_id,
            CourseStudent.student_id.in_(set(student_ids)),
        )
    )
    return result.rowcount or 0


# ============================================
# Owned collections
# ============================================


async def get_assignment_ids(db: AsyncSession, course_id: str) -> list[str]:
    result = await db.execute(
        select(Assignment.id).where(Assignment.course_id == course_id).order_by(Assignment.due_date)
    )
    return list(result.scalars().all())


async def get_material_ids(db: AsyncSession, course_id: str) -> list[str]:
    result = await db.execute(
        select(Material.id).where(Material.course_id == course_id).order_by(Material.upload_date)
    )
    return list(result.scalars().all())


async def storage_keys(db: AsyncSession, course_id: str) -> list[str]:
    """Object-store keys of every attachment the course owns."""
    assignment_ids = select(Assignment.id).where(Assignment.course_id == course_id)
    submission_ids = select(Submission.id).where(Submission.assignment_id.in_(assignment_ids))
    material_ids = select(Material.id).where(Material.course_id == course_id)
    result = await db.execute(
        select(Attachment.storage_key).where(
            Attachment.assignment_id.in_(assignment_ids)
            | Attachment.submission_id.in_(submission_ids)
            | Attachment.material_id.in_(material_ids)
        )
    )
    return list(result.scalars().all())


async def delete_cascade(db: AsyncSession, course: Course) -> None:
    """
    Delete a course and everything it owns.

    Attachments first (they hang off assignments, submissions and
    materials), then submissions, assignments, materials, attendance,
    grade entries, enrollment requests and roster rows. Users are never
    touched.
    """
    assignment_ids = select(Assignment.id).where(Assignment.course_id == course.id)
    submission_ids = select(Submission.id).where(Submission.assignment_id.in_(assignment_ids))
    material_ids = select(Material.id).where(Material.course_id == course.id)

    await db.execute(
        delete(Attachment).where(
            Attachment.assignment_id.in_(assignment_ids)
            | Attachment.submission_id.in_(submission_ids)
            | Attachment.material_id.in_(material_ids)
        )
    )
    await db.execute(delete(Submission).where(Submission.assignment_id.in_(assignment_ids)))
    await db.execute(delete(GradeEntry).where(GradeEntry.course_id == course.id))
    await db.execute(delete(Assignment).where(Assignment.course_id == course.id))
    await db.execute(delete(Material).where(Material.course_id == course.id))
    await db.execute(delete(AttendanceRecord).where(AttendanceRecord.course_id == course.id))
    await db.execute(delete(EnrollmentRequest).where(EnrollmentRequest.course_id == course.id))
    await db.execute(delete(CourseStudent).where(CourseStudent.course_id == course.id))
    await db.delete(course)
    await db.flush()
