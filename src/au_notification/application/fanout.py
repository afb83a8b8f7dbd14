"""Notification fan-out.

Turns committed state changes (outbid, win, join, new item) into in-app
notification rows and, once those rows are committed, one bus event per row
for the email handlers.

``notify`` raises on storage errors. The ``notify_*`` helpers are what the
ledger and membership services call after their own commit: they log and
swallow failures so a notification problem never undoes a bid or a join.

AUCTION_WON rows are different: ``stage_auction_won`` writes them inside the
caller's transaction, next to the winner-notified claim, and ``publish`` emits
their events once the caller has committed. A claimed item therefore always
has its notification row, and a failed insert leaves the item unclaimed for
the next sweep.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.au_common.datetime_utils import utc_now
from src.au_common.enums import NotificationType
from src.au_common.id_generator import generate_id
from src.au_events.bus import EventBus
from src.au_events.events import (
    EventName,
    ItemWonEvent,
    MemberJoinedEvent,
    NewItemEvent,
    OutbidEvent,
)
from src.au_notification.domain.models import Notification, NotificationContext
from src.au_notification.domain.repository import NotificationRepositoryProtocol
from src.au_notification.domain.templates import render
from src.au_notification.infrastructure.persistence import NotificationRepository

logger = logging.getLogger(__name__)

# A notification written but not yet announced, with the context its event needs
Staged = tuple[Notification, NotificationContext]


class NotificationFanout:
    def __init__(
        self,
        bus: EventBus,
        repo: NotificationRepositoryProtocol | None = None,
    ) -> None:
        self._bus = bus
        self._repo: NotificationRepositoryProtocol = repo or NotificationRepository()

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    async def notify(
        self,
        db: AsyncSession,
        kind: NotificationType,
        recipient_id: str,
        context: NotificationContext,
    ) -> Notification:
        """Create one notification, commit it, then emit its event."""
        created = await self.notify_many(db, kind, [recipient_id], context)
        return created[0]

    async def notify_many(
        self,
        db: AsyncSession,
        kind: NotificationType,
        recipient_ids: list[str],
        context: NotificationContext,
    ) -> list[Notification]:
        if not recipient_ids:
            return []
        try:
            notifications = await self.stage(db, kind, recipient_ids, context)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        self.publish([(n, context) for n in notifications])
        return notifications

    async def stage(
        self,
        db: AsyncSession,
        kind: NotificationType,
        recipient_ids: list[str],
        context: NotificationContext,
    ) -> list[Notification]:
        """Insert rows in the caller's transaction. No commit, no events."""
        title, message = render(kind, context)
        now = utc_now()
        notifications = [
            Notification(
                id=generate_id(),
                user_id=recipient_id,
                type=kind,
                title=title,
                message=message,
                auction_id=context.auction_id,
                item_id=context.item_id,
                image_url=context.image_url,
                created_at=now,
            )
            for recipient_id in recipient_ids
        ]
        if notifications:
            await self._repo.insert_many(db, notifications)
        return notifications

    def publish(self, staged: list[Staged]) -> None:
        """Emit one event per committed notification."""
        for notification, context in staged:
            self._emit(notification, context)

    def _emit(self, notification: Notification, ctx: NotificationContext) -> None:
        if notification.type == NotificationType.OUTBID:
            self._bus.emit(
                EventName.BID_OUTBID,
                OutbidEvent(
                    notification_id=notification.id,
                    previous_bidder_id=notification.user_id,
                    auction_id=ctx.auction_id,
                    auction_name=ctx.auction_name,
                    item_id=ctx.item_id or "",
                    item_name=ctx.item_name or "",
                    new_amount=ctx.amount or 0,
                    currency_code=ctx.currency_code or "USD",
                ),
            )
        elif notification.type == NotificationType.AUCTION_WON:
            self._bus.emit(
                EventName.ITEM_WON,
                ItemWonEvent(
                    notification_id=notification.id,
                    winner_id=notification.user_id,
                    auction_id=ctx.auction_id,
                    auction_name=ctx.auction_name,
                    item_id=ctx.item_id or "",
                    item_name=ctx.item_name or "",
                    amount=ctx.amount or 0,
                    currency_code=ctx.currency_code or "USD",
                ),
            )
        elif notification.type == NotificationType.NEW_ITEM:
            self._bus.emit(
                EventName.ITEM_CREATED,
                NewItemEvent(
                    notification_id=notification.id,
                    recipient_id=notification.user_id,
                    auction_id=ctx.auction_id,
                    auction_name=ctx.auction_name,
                    item_id=ctx.item_id or "",
                    item_name=ctx.item_name or "",
                    item_description=ctx.item_description,
                ),
            )
        elif notification.type == NotificationType.MEMBER_JOINED:
            self._bus.emit(
                EventName.MEMBER_JOINED,
                MemberJoinedEvent(
                    notification_id=notification.id,
                    owner_id=notification.user_id,
                    auction_id=ctx.auction_id,
                    auction_name=ctx.auction_name,
                    member_id=ctx.member_id or "",
                    member_name=ctx.member_name or "",
                ),
            )

    # ------------------------------------------------------------------
    # Best-effort helpers
    # ------------------------------------------------------------------

    async def notify_outbid(
        self,
        db: AsyncSession,
        previous_bidder_id: str,
        auction_id: str,
        auction_name: str,
        item_id: str,
        item_name: str,
        new_amount: int,
        currency_code: str,
    ) -> Notification | None:
        ctx = NotificationContext(
            auction_id=auction_id,
            auction_name=auction_name,
            item_id=item_id,
            item_name=item_name,
            amount=new_amount,
            currency_code=currency_code,
        )
        return await self._notify_safely(db, NotificationType.OUTBID, previous_bidder_id, ctx)

    async def stage_auction_won(
        self,
        db: AsyncSession,
        winner_id: str,
        auction_id: str,
        auction_name: str,
        item_id: str,
        item_name: str,
        amount: int,
        currency_code: str,
    ) -> Staged:
        """Write the AUCTION_WON row in the caller's transaction. Raises on failure."""
        ctx = NotificationContext(
            auction_id=auction_id,
            auction_name=auction_name,
            item_id=item_id,
            item_name=item_name,
            amount=amount,
            currency_code=currency_code,
        )
        [notification] = await self.stage(db, NotificationType.AUCTION_WON, [winner_id], ctx)
        return notification, ctx

    async def notify_member_joined(
        self,
        db: AsyncSession,
        owner_id: str,
        auction_id: str,
        auction_name: str,
        member_id: str,
        member_name: str,
    ) -> Notification | None:
        ctx = NotificationContext(
            auction_id=auction_id,
            auction_name=auction_name,
            member_id=member_id,
            member_name=member_name,
        )
        return await self._notify_safely(db, NotificationType.MEMBER_JOINED, owner_id, ctx)

    async def notify_new_item(
        self,
        db: AsyncSession,
        member_ids: list[str],
        creator_id: str,
        auction_id: str,
        auction_name: str,
        item_id: str,
        item_name: str,
        item_description: str | None,
        image_url: str | None = None,
    ) -> list[Notification]:
        """One NEW_ITEM per auction member, skipping the item's creator."""
        recipients = [uid for uid in dict.fromkeys(member_ids) if uid != creator_id]
        ctx = NotificationContext(
            auction_id=auction_id,
            auction_name=auction_name,
            item_id=item_id,
            item_name=item_name,
            item_description=item_description,
            image_url=image_url,
        )
        try:
            return await self.notify_many(db, NotificationType.NEW_ITEM, recipients, ctx)
        except Exception:
            logger.exception(
                "Failed to fan out NEW_ITEM for item %s to %d members", item_id, len(recipients)
            )
            return []

    async def _notify_safely(
        self,
        db: AsyncSession,
        kind: NotificationType,
        recipient_id: str,
        ctx: NotificationContext,
    ) -> Notification | None:
        try:
            return await self.notify(db, kind, recipient_id, ctx)
        except Exception:
            logger.exception(
                "Failed to create %s notification for user %s", kind.value, recipient_id
            )
            return None
