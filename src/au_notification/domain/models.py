"""Domain models for au_notification: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.au_common.enums import NotificationType


@dataclass
class Notification:
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    auction_id: str | None = None
    item_id: str | None = None
    image_url: str | None = None
    read: bool = False
    created_at: datetime | None = None


@dataclass(frozen=True)
class NotificationContext:
    """What a notification is about. Fields unused by a given type stay None."""

    auction_id: str
    auction_name: str
    item_id: str | None = None
    item_name: str | None = None
    item_description: str | None = None
    amount: int | None = None
    currency_code: str | None = None
    member_id: str | None = None
    member_name: str | None = None
    image_url: str | None = None
