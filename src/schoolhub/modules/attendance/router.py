"""
Attendance Router

Endpoints:
- GET /attendance?course=&date= - Day roster with each student's status
- GET /attendance/stats?course=&student= - Counts per status and rate
- POST /attendance - Record a status for one student and day
- PUT /attendance/{id} - Change a recorded status
"""

import datetime as dt

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import Actor, get_current_actor
from schoolhub.core.database import get_db
from schoolhub.modules.attendance import service
from schoolhub.modules.attendance.schemas import (
    AttendanceCreate,
    AttendanceResponse,
    AttendanceStats,
    AttendanceUpdate,
    DayRosterResponse,
)
from schoolhub.modules.shared import ApiResponse, ok

router = APIRouter()


@router.get("", response_model=ApiResponse[DayRosterResponse], summary="Day Roster")
async def day_roster(
    course: str = Query(..., description="Course id"),
    day: dt.date | None = Query(None, alias="date", description="Defaults to today (UTC)"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    return ok(await service.day_roster(db, actor, course, day))


@router.get("/stats", response_model=ApiResponse[AttendanceStats], summary="Attendance Statistics")
async def attendance_stats(
    course: str | None = Query(None, description="Course id"),
    student: str | None = Query(None, description="Student id"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    return ok(await service.attendance_stats(db, actor, course, student))


@router.post(
    "",
    response_model=ApiResponse[AttendanceResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Record Attendance",
)
async def record_attendance(
    data: AttendanceCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    record = await service.record_attendance(db, actor, data)
    return ok(AttendanceResponse.model_validate(record), "Attendance recorded")


@router.put(
    "/{record_id}", response_model=ApiResponse[AttendanceResponse], summary="Update Attendance"
)
async def update_attendance(
    record_id: str,
    data: AttendanceUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    record = await service.update_attendance(db, actor, record_id, data)
    return ok(AttendanceResponse.model_validate(record), "Attendance updated")
