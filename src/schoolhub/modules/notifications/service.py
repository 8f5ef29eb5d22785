"""
Notification Service

emit() is called by the other services after their own commit. It writes
Notification rows in a separate transaction on the same session and never
raises: a failed notification is logged and rolled back, and the
originating operation still succeeds.

The remaining functions back the /notifications endpoints, where each
actor only ever sees their own notifications.
"""

import logging
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import Actor
from schoolhub.core.exceptions import ForbiddenError, NotFoundError
from schoolhub.modules.notifications import repository
from schoolhub.modules.notifications.models import Notification, NotificationKind
from schoolhub.modules.shared import utcnow

logger = logging.getLogger(__name__)


async def emit(
    db: AsyncSession,
    recipient_ids: Iterable[str],
    *,
    title: str,
    message: str,
    kind: NotificationKind,
    resource_type: str | None = None,
    resource_id: str | None = None,
) -> int:
    """
    Persist one notification per distinct recipient.

    Returns:
        Number of notifications written (0 on failure)
    """
    recipients = [r for r in dict.fromkeys(recipient_ids) if r]
    if not recipients:
        return 0

    try:
        for recipient_id in recipients:
            db.add(
                Notification(
                    recipient_id=recipient_id,
                    title=title[:100],
                    message=message,
                    kind=kind,
                    resource_type=resource_type,
                    resource_id=resource_id,
                )
            )
        await db.commit()
    except Exception as e:
        logger.error(f"Failed to emit {kind.value} notification to {len(recipients)} user(s): {e}")
        # Detach first so the rollback cannot expire already committed entities
        db.expunge_all()
        await db.rollback()
        return 0

    logger.debug(f"Emitted {kind.value} notification to {len(recipients)} user(s)")
    return len(recipients)


async def list_notifications(
    db: AsyncSession, actor: Actor, *, unread_only: bool = False
) -> list[Notification]:
    return await repository.list_for_recipient(db, actor.id, unread_only=unread_only)


async def unread_count(db: AsyncSession, actor: Actor) -> int:
    return await repository.count_unread(db, actor.id)


async def _get_own(db: AsyncSession, actor: Actor, notification_id: str) -> Notification:
    notification = await repository.get_by_id(db, notification_id)
    if notification is None:
        raise NotFoundError("Notification", notification_id)
    if notification.recipient_id != actor.id:
        raise ForbiddenError("You can only access your own notifications")
    return notification


async def mark_read(db: AsyncSession, actor: Actor, notification_id: str) -> Notification:
    notification = await _get_own(db, actor, notification_id)
    if notification.read_at is None:
        notification.read_at = utcnow()
        await db.commit()
    return notification


async def mark_all_read(db: AsyncSession, actor: Actor) -> int:
    count = await repository.mark_all_read(db, actor.id, utcnow())
    await db.commit()
    return count


async def delete_notification(db: AsyncSession, actor: Actor, notification_id: str) -> None:
    notification = await _get_own(db, actor, notification_id)
    await db.delete(notification)
    await db.commit()
