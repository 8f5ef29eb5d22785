"""
Assignments Router

Endpoints:
- GET /assignments - Assignments visible to the caller (?courseId=)
- POST /assignments - Create an assignment (JSON or multipart with files)
- GET /assignments/{id} - Get one assignment
- PUT /assignments/{id} - Update an assignment, appending any new files
- DELETE /assignments/{id} - Delete an assignment and its submissions

Submission endpoints under /assignments live in the submissions module.
"""

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import Actor, get_current_actor
from schoolhub.core.database import get_db
from schoolhub.core.storage import ObjectStore, get_object_store
from schoolhub.modules.assignments import service
from schoolhub.modules.assignments.schemas import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentUpdate,
)
from schoolhub.modules.shared import ApiResponse, ok
from schoolhub.modules.shared.forms import parse_payload

router = APIRouter()


@router.get("", response_model=ApiResponse[list[AssignmentResponse]], summary="List Assignments")
async def list_assignments(
    course_id: str | None = Query(None, alias="courseId"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    assignments = await service.list_assignments(db, actor, course_id)
    return ok(await service.to_responses(db, assignments))


@router.post(
    "",
    response_model=ApiResponse[AssignmentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create Assignment",
)
async def create_assignment(
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    data, files = await parse_payload(request, AssignmentCreate)
    assignment = await service.create_assignment(db, store, actor, data, files)
    return ok(await service.to_response(db, assignment), "Assignment created")


@router.get(
    "/{assignment_id}", response_model=ApiResponse[AssignmentResponse], summary="Get Assignment"
)
async def get_assignment(
    assignment_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    assignment = await service.get_assignment(db, actor, assignment_id)
    return ok(await service.to_response(db, assignment))


@router.put(
    "/{assignment_id}", response_model=ApiResponse[AssignmentResponse], summary="Update Assignment"
)
async def update_assignment(
    assignment_id: str,
    request: Request,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    data, files = await parse_payload(request, AssignmentUpdate, partial=True)
    assignment = await service.update_assignment(db, store, actor, assignment_id, data, files)
    return ok(await service.to_response(db, assignment), "Assignment updated")


@router.delete("/{assignment_id}", response_model=ApiResponse[None], summary="Delete Assignment")
async def delete_assignment(
    assignment_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    await service.delete_assignment(db, store, actor, assignment_id)
    return ok(message="Assignment deleted")
