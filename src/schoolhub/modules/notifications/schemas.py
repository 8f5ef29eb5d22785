"""Notification schemas."""

from schoolhub.modules.notifications.models import NotificationKind
from schoolhub.modules.shared import CamelModel, UTCDateTime


class NotificationResponse(CamelModel):
    id: str
    recipient_id: str
    title: str
    message: str
    kind: NotificationKind
    resource_type: str | None = None
    resource_id: str | None = None
    created_at: UTCDateTime
    read_at: UTCDateTime | None = None


class UnreadCountResponse(CamelModel):
    count: int


class MarkAllReadResponse(CamelModel):
    updated: int
