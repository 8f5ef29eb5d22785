"""
Submissions Router (mounted under /assignments, before the assignments router)

Endpoints:
- GET /assignments/my-submissions - The student's own submissions
- POST /assignments/{id}/submit - Submit (JSON or multipart with files)
- GET /assignments/{id}/submissions - Submissions of an assignment
- PUT /assignments/submissions/{id} - Grade and optionally publish
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import Actor, get_current_actor
from schoolhub.core.database import get_db
from schoolhub.core.storage import ObjectStore, get_object_store
from schoolhub.modules.shared import ApiResponse, ok
from schoolhub.modules.shared.forms import parse_payload
from schoolhub.modules.submissions import service
from schoolhub.modules.submissions.schemas import (
    SubmissionCreate,
    SubmissionGrade,
    SubmissionResponse,
)

router = APIRouter()


@router.get(
    "/my-submissions",
    response_model=ApiResponse[list[SubmissionResponse]],
    summary="My Submissions",
)
async def my_submissions(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    submissions = await service.my_submissions(db, actor)
    return ok(await service.to_responses(db, actor, submissions, with_assignment=True))


@router.post(
    "/{assignment_id}/submit",
    response_model=ApiResponse[SubmissionResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Submit Assignment",
)
async def submit_assignment(
    assignment_id: str,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    data, files = await parse_payload(request, SubmissionCreate, partial=True)
    submission = await service.submit(db, store, actor, assignment_id, data, files)
    return ok(await service.to_response(db, actor, submission), "Assignment submitted")


@router.get(
    "/{assignment_id}/submissions",
    response_model=ApiResponse[list[SubmissionResponse]],
    summary="List Submissions",
)
async def list_submissions(
    assignment_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    submissions = await service.list_submissions(db, actor, assignment_id)
    return ok(await service.to_responses(db, actor, submissions))


@router.put(
    "/submissions/{submission_id}",
    response_model=ApiResponse[SubmissionResponse],
    summary="Grade Submission",
)
async def grade_submission(
    submission_id: str,
    data: SubmissionGrade,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    submission = await service.grade(
        db, actor, submission_id, data.score, data.feedback, data.publish_grade
    )
    message = "Grade published" if data.publish_grade else "Submission graded"
    return ok(await service.to_response(db, actor, submission), message)
