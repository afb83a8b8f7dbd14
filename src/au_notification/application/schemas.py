from datetime import datetime

from pydantic import BaseModel

from src.au_notification.domain.models import Notification


class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    message: str
    auction_id: str | None
    item_id: str | None
    image_url: str | None
    read: bool
    created_at: datetime | None

    @classmethod
    def from_domain(cls, n: Notification) -> "NotificationResponse":
        return cls(
            id=n.id,
            type=n.type.value,
            title=n.title,
            message=n.message,
            auction_id=n.auction_id,
            item_id=n.item_id,
            image_url=n.image_url,
            read=n.read,
            created_at=n.created_at,
        )


class NotificationListResponse(BaseModel):
    items: list[NotificationResponse]
    unread_count: int


class UnreadCountResponse(BaseModel):
    count: int


class MarkAllReadResponse(BaseModel):
    updated: int
