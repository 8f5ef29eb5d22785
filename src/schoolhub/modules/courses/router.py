"""
Courses Router

Endpoints:
- GET /courses - Course catalog (no roster), filterable
- POST /courses - Create a course (teacher or admin)
- GET /courses/my-courses - Enrolled (student), taught (teacher) or all (admin)
- GET /courses/{id} - Course detail with roster
- PUT /courses/{id} - Update a course
- DELETE /courses/{id} - Delete a course and everything it owns

Roster and enrollment-request endpoints under /courses/{id} live in the
enrollments module; materials in the materials module.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import Actor, get_current_actor
from schoolhub.core.database import get_db
from schoolhub.core.storage import ObjectStore, get_object_store
from schoolhub.modules.courses import service
from schoolhub.modules.courses.models import Semester
from schoolhub.modules.courses.schemas import (
    CourseCreate,
    CourseDetailResponse,
    CourseResponse,
    CourseUpdate,
)
from schoolhub.modules.shared import ApiResponse, ok

router = APIRouter()


@router.get("", response_model=ApiResponse[list[CourseResponse]], summary="Course Catalog")
async def list_courses(
    semester: Semester | None = Query(None),
    academic_year: str | None = Query(None, alias="academicYear"),
    teacher_id: str | None = Query(None, alias="teacherId"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    courses = await service.list_catalog(
        db, semester=semester, academic_year=academic_year, teacher_id=teacher_id
    )
    return ok([await service.to_response(db, course) for course in courses])


@router.post(
    "",
    response_model=ApiResponse[CourseDetailResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create Course",
)
async def create_course(
    data: CourseCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    course = await service.create_course(db, actor, data)
    return ok(await service.to_detail(db, course), "Course created")


# Declared before /{course_id} so the literal path wins
@router.get("/my-courses", response_model=ApiResponse[list[CourseResponse]], summary="My Courses")
async def my_courses(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    courses = await service.my_courses(db, actor)
    return ok([await service.to_response(db, course) for course in courses])


@router.get("/{course_id}", response_model=ApiResponse[CourseDetailResponse], summary="Get Course")
async def get_course(
    course_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    course = await service.get_course(db, actor, course_id)
    return ok(await service.to_detail(db, course))


@router.put(
    "/{course_id}", response_model=ApiResponse[CourseDetailResponse], summary="Update Course"
)
async def update_course(
    course_id: str,
    data: CourseUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    course = await service.update_course(db, actor, course_id, data)
    return ok(await service.to_detail(db, course), "Course updated")


@router.delete(
    "/{course_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Course",
)
async def delete_course(
    course_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
) -> Response:
    await service.delete_course(db, store, actor, course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
