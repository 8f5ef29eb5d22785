"""
Attendance Repository

Only flushes. The (course_id, student_id, date) unique constraint keeps one
record per student per day.
"""

import datetime as dt

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.modules.attendance.models import AttendanceRecord, AttendanceStatus


async def create(db: AsyncSession, **fields) -> AttendanceRecord:
    """Insert a record. Raises IntegrityError on a duplicate day."""
    record = AttendanceRecord(**fields)
    db.add(record)
    await db.flush()
    return record


async def get_by_id(db: AsyncSession, record_id: str) -> AttendanceRecord | None:
    return await db.get(AttendanceRecord, record_id)


async def get_for_day(
    db: AsyncSession, course_id: str, student_id: str, day: dt.date
) -> AttendanceRecord | None:
    result = await db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.course_id == course_id,
            AttendanceRecord.student_id == student_id,
            AttendanceRecord.date == day,
        )
    )
    return result.scalar_one_or_none()


async def list_for_day(
    db: AsyncSession, course_id: str, day: dt.date
) -> list[AttendanceRecord]:
    result = await db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.course_id == course_id,
            AttendanceRecord.date == day,
        )
    )
    return list(result.scalars().all())


async def count_by_status(
    db: AsyncSession,
    *,
    course_id: str | None = None,
    student_id: str | None = None,
) -> dict[AttendanceStatus, int]:
    """Number of records per status matching the filters."""
    query = select(AttendanceRecord.status, func.count()).group_by(AttendanceRecord.status)
    if course_id is not None:
        query = query.where(AttendanceRecord.course_id == course_id)
    if student_id is not None:
        query = query.where(AttendanceRecord.student_id == student_id)
    result = await db.execute(query)
    return {status: count for status, count in result.all()}


async def update(db: AsyncSession, record: AttendanceRecord, **fields) -> AttendanceRecord:
    for name, value in fields.items():
        setattr(record, name, value)
    await db.flush()
    return record
