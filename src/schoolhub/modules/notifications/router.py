"""
Notifications Router

Endpoints:
- GET /notifications - Own notifications, newest first (?unread=true)
- GET /notifications/unread-count - Number of unread notifications
- PUT /notifications/read-all - Mark every notification read
- PUT /notifications/{id}/read - Mark one notification read
- DELETE /notifications/{id} - Delete one notification
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import Actor, get_current_actor
from schoolhub.core.database import get_db
from schoolhub.modules.notifications import service
from schoolhub.modules.notifications.schemas import (
    MarkAllReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from schoolhub.modules.shared import ApiResponse, ok

router = APIRouter()


@router.get("", response_model=ApiResponse[list[NotificationResponse]])
async def list_notifications(
    unread: bool = Query(False, description="Only unread notifications"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    notifications = await service.list_notifications(db, actor, unread_only=unread)
    return ok([NotificationResponse.model_validate(n) for n in notifications])


@router.get("/unread-count", response_model=ApiResponse[UnreadCountResponse])
async def unread_count(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    return ok(UnreadCountResponse(count=await service.unread_count(db, actor)))


@router.put("/read-all", response_model=ApiResponse[MarkAllReadResponse])
async def mark_all_read(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    updated = await service.mark_all_read(db, actor)
    return ok(MarkAllReadResponse(updated=updated))


@router.put("/{notification_id}/read", response_model=ApiResponse[NotificationResponse])
async def mark_read(
    notification_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    notification = await service.mark_read(db, actor, notification_id)
    return ok(NotificationResponse.model_validate(notification))


@router.delete("/{notification_id}", response_model=ApiResponse[None])
async def delete_notification(
    notification_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    await service.delete_notification(db, actor, notification_id)
    return ok(message="Notification deleted")
