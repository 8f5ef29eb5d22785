"""
Enrollment Routers

course_router (mounted under /courses):
- PUT /courses/{id}/enroll - Add students directly
- PUT /courses/{id}/unenroll - Remove students
- POST /courses/{id}/enroll-request - Student asks to join
- GET /courses/{id}/enrollment-requests - Requests for a course (?status=)

router (mounted under /enrollment-requests):
- GET /enrollment-requests - The student's own requests (?status=)
- PUT /enrollment-requests/{id} - Approve or reject
- DELETE /enrollment-requests/{id} - Cancel a pending request
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import Actor, get_current_actor
from schoolhub.core.database import get_db
from schoolhub.modules.courses import service as course_service
from schoolhub.modules.courses.schemas import CourseDetailResponse, RosterUpdate
from schoolhub.modules.enrollments import service
from schoolhub.modules.enrollments.models import EnrollmentStatus
from schoolhub.modules.enrollments.schemas import (
    EnrollmentDecision,
    EnrollmentRequestCreate,
    EnrollmentRequestResponse,
)
from schoolhub.modules.shared import ApiResponse, ok

course_router = APIRouter()
router = APIRouter()


@course_router.put(
    "/{course_id}/enroll",
    response_model=ApiResponse[CourseDetailResponse],
    summary="Enroll Students",
)
async def enroll_students(
    course_id: str,
    data: RosterUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    course = await service.direct_enroll(db, actor, course_id, data.student_ids)
    return ok(await course_service.to_detail(db, course), "Students enrolled")


@course_router.put(
    "/{course_id}/unenroll",
    response_model=ApiResponse[CourseDetailResponse],
    summary="Unenroll Students",
)
async def unenroll_students(
    course_id: str,
    data: RosterUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    course = await service.direct_unenroll(db, actor, course_id, data.student_ids)
    return ok(await course_service.to_detail(db, course), "Students unenrolled")


@course_router.post(
    "/{course_id}/enroll-request",
    response_model=ApiResponse[EnrollmentRequestResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Request Enrollment",
)
async def request_enrollment(
    course_id: str,
    data: EnrollmentRequestCreate | None = None,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    notes = data.notes if data else None
    request = await service.create_request(db, actor, course_id, notes)
    [response] = await service.to_responses(db, [request])
    return ok(response, "Enrollment request submitted")


@course_router.get(
    "/{course_id}/enrollment-requests",
    response_model=ApiResponse[list[EnrollmentRequestResponse]],
    summary="Course Enrollment Requests",
)
async def course_requests(
    course_id: str,
    status_filter: str = Query(
        "pending", alias="status", pattern="^(pending|approved|rejected|all)$"
    ),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    wanted = None if status_filter == "all" else EnrollmentStatus(status_filter)
    requests = await service.list_for_course(db, actor, course_id, wanted)
    return ok(await service.to_responses(db, requests))


@router.get(
    "",
    response_model=ApiResponse[list[EnrollmentRequestResponse]],
    summary="My Enrollment Requests",
)
async def my_requests(
    status_filter: EnrollmentStatus | None = Query(None, alias="status"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    requests = await service.list_mine(db, actor, status_filter)
    return ok(await service.to_responses(db, requests))


@router.put(
    "/{request_id}",
    response_model=ApiResponse[EnrollmentRequestResponse],
    summary="Approve or Reject Request",
)
async def decide_request(
    request_id: str,
    data: EnrollmentDecision,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    request = await service.decide(db, actor, request_id, data.status, data.notes)
    [response] = await service.to_responses(db, [request])
    return ok(response, f"Enrollment request {request.status.value}")


@router.delete(
    "/{request_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Cancel Request",
)
async def cancel_request(
    request_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
) -> Response:
    await service.cancel(db, actor, request_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
