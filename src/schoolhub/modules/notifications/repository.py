"""
Notification Repository
"""

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.modules.notifications.models import Notification


async def get_by_id(db: AsyncSession, notification_id: str) -> Notification | None:
    return await db.get(Notification, notification_id)


async def list_for_recipient(
    db: AsyncSession, recipient_id: str, *, unread_only: bool = False
) -> list[Notification]:
    """Newest first."""
    query = select(Notification).where(Notification.recipient_id == recipient_id)
    if unread_only:
        query = query.where(Notification.read_at.is_(None))
    result = await db.execute(query.order_by(Notification.created_at.desc()))
    return list(result.scalars().all())


async def count_unread(db: AsyncSession, recipient_id: str) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Notification)
        .where(Notification.recipient_id == recipient_id, Notification.read_at.is_(None))
    )
    return result.scalar_one()


async def mark_all_read(db: AsyncSession, recipient_id: str, when: datetime) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.recipient_id == recipient_id, Notification.read_at.is_(None))
        .values(read_at=when)
    )
    return result.rowcount or 0
