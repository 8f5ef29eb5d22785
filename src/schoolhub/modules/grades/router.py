"""
Grades Router

Endpoints:
- GET /grades?courseId=&studentId= - Grade items visible to the caller
- GET /grades/summary?courseId=&studentId= - Weighted course grade
- POST /grades - Record a manual grade entry
- PUT /grades/{id} - Update a grade entry
- DELETE /grades/{id} - Delete a grade entry
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import Actor, get_current_actor
from schoolhub.core.database import get_db
from schoolhub.modules.grades import service
from schoolhub.modules.grades.schemas import (
    GradeEntryCreate,
    GradeEntryResponse,
    GradeEntryUpdate,
    GradeItem,
    GradeSummary,
)
from schoolhub.modules.shared import ApiResponse, ok

router = APIRouter()


@router.get("", response_model=ApiResponse[list[GradeItem]], summary="List Grades")
async def list_grades(
    course_id: str | None = Query(None, alias="courseId"),
    student_id: str | None = Query(None, alias="studentId"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    return ok(await service.list_grades(db, actor, course_id, student_id))


@router.get("/summary", response_model=ApiResponse[GradeSummary], summary="Course Grade Summary")
async def grade_summary(
    course_id: str = Query(..., alias="courseId"),
    student_id: str | None = Query(None, alias="studentId"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    return ok(await service.grade_summary(db, actor, course_id, student_id))


@router.post(
    "",
    response_model=ApiResponse[GradeEntryResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Record Grade",
)
async def record_grade(
    data: GradeEntryCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    entry = await service.record_grade(db, actor, data)
    return ok(service.to_entry_response(entry), "Grade recorded")


@router.put("/{entry_id}", response_model=ApiResponse[GradeEntryResponse], summary="Update Grade")
async def update_grade(
    entry_id: str,
    data: GradeEntryUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    entry = await service.update_grade(db, actor, entry_id, data)
    return ok(service.to_entry_response(entry), "Grade updated")


@router.delete("/{entry_id}", response_model=ApiResponse[None], summary="Delete Grade")
async def delete_grade(
    entry_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    await service.delete_grade(db, actor, entry_id)
    return ok(message="Grade deleted")
