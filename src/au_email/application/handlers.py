"""Bus subscribers that turn notification events into outbox rows.

Each handler runs as its own task after the triggering request committed,
opens a fresh session, checks the recipient's email preferences and enqueues
exactly one job. Failures are logged by the bus and never reach the request.
"""

import logging

from src.au_common.database import SessionFactory
from src.au_common.enums import EmailKind
from src.au_email.application import templates
from src.au_email.application.queue import EmailQueue
from src.au_email.domain.models import EmailRecipient
from src.au_events.bus import EventBus
from src.au_events.events import (
    EventName,
    InviteCreatedEvent,
    ItemWonEvent,
    NewItemEvent,
    OutbidEvent,
)
from src.au_gateway.user.repository import UserDirectory

logger = logging.getLogger(__name__)


class EmailHandlers:
    def __init__(
        self,
        queue: EmailQueue,
        session_factory: SessionFactory,
        users: UserDirectory | None = None,
    ) -> None:
        self._queue = queue
        self._session_factory = session_factory
        self._users = users or UserDirectory()

    def register(self, bus: EventBus) -> None:
        bus.on(EventName.BID_OUTBID, self.on_outbid)
        bus.on(EventName.ITEM_WON, self.on_item_won)
        bus.on(EventName.ITEM_CREATED, self.on_item_created)
        bus.on(EventName.INVITE_CREATED, self.on_invite_created)

    def unregister(self, bus: EventBus) -> None:
        bus.off(EventName.BID_OUTBID, self.on_outbid)
        bus.off(EventName.ITEM_WON, self.on_item_won)
        bus.off(EventName.ITEM_CREATED, self.on_item_created)
        bus.off(EventName.INVITE_CREATED, self.on_invite_created)

    async def on_outbid(self, event: OutbidEvent) -> None:
        async with self._session_factory() as db:
            contact = await self._users.get_contact(db, event.previous_bidder_id)
            if contact is None or not contact.email_on_outbid:
                return
            subject, data = templates.outbid_email(
                event.auction_id, event.auction_name, event.item_id,
                event.item_name, event.new_amount, event.currency_code,
            )
            await self._queue.enqueue(
                db, EmailKind.OUTBID, EmailRecipient(contact.email, contact.name), subject, data
            )
            await db.commit()

    async def on_item_won(self, event: ItemWonEvent) -> None:
        async with self._session_factory() as db:
            contact = await self._users.get_contact(db, event.winner_id)
            if contact is None:
                logger.warning("Winner %s of item %s has no contact", event.winner_id, event.item_id)
                return
            subject, data = templates.item_won_email(
                event.auction_id, event.auction_name, event.item_id,
                event.item_name, event.amount, event.currency_code,
            )
            await self._queue.enqueue(
                db, EmailKind.ITEM_WON, EmailRecipient(contact.email, contact.name), subject, data
            )
            await db.commit()

    async def on_item_created(self, event: NewItemEvent) -> None:
        async with self._session_factory() as db:
            contact = await self._users.get_contact(db, event.recipient_id)
            if contact is None or not contact.email_on_new_item:
                return
            subject, data = templates.new_item_email(
                event.auction_id, event.auction_name, event.item_id,
                event.item_name, event.item_description,
            )
            await self._queue.enqueue(
                db, EmailKind.NEW_ITEM, EmailRecipient(contact.email, contact.name), subject, data
            )
            await db.commit()

    async def on_invite_created(self, event: InviteCreatedEvent) -> None:
        async with self._session_factory() as db:
            subject, data = templates.invite_email(
                event.auction_name, event.sender_name, event.role, event.token
            )
            await self._queue.enqueue(
                db, EmailKind.INVITE, EmailRecipient(event.email), subject, data
            )
            await db.commit()
