"""Explicit construction of the event bus and application services.

One ``Services`` instance lives on ``app.state.services`` for the lifetime of
the process. Routers reach it through the ``get_services`` dependency, and
tests swap it for one built on in-memory repositories.
"""

from dataclasses import dataclass

from fastapi import Request

from src.au_auction.application.service import AuctionService
from src.au_auction.domain.repository import AuctionRepositoryProtocol
from src.au_auction.infrastructure.persistence import AuctionRepository
from src.au_bid.application.service import BidLedger
from src.au_bid.domain.repository import BidRepositoryProtocol
from src.au_bid.infrastructure.persistence import BidRepository
from src.au_common.database import SessionFactory, async_session_factory
from src.au_discussion.application.service import DiscussionService
from src.au_discussion.domain.repository import DiscussionRepositoryProtocol
from src.au_discussion.infrastructure.persistence import DiscussionRepository
from src.au_email.application.handlers import EmailHandlers
from src.au_email.application.queue import EmailQueue
from src.au_events.bus import EventBus
from src.au_item.application.service import ItemService
from src.au_item.domain.repository import ItemRepositoryProtocol
from src.au_item.infrastructure.persistence import ItemRepository
from src.au_membership.application.service import MembershipService
from src.au_membership.domain.repository import MembershipRepositoryProtocol
from src.au_membership.infrastructure.persistence import MembershipRepository
from src.au_notification.application.fanout import NotificationFanout
from src.au_notification.application.service import NotificationService
from src.au_notification.domain.repository import NotificationRepositoryProtocol
from src.au_notification.infrastructure.persistence import NotificationRepository


@dataclass
class Services:
    bus: EventBus
    fanout: NotificationFanout
    auctions: AuctionService
    members: MembershipService
    items: ItemService
    bids: BidLedger
    discussions: DiscussionService
    notifications: NotificationService


def build_services(
    bus: EventBus | None = None,
    auction_repo: AuctionRepositoryProtocol | None = None,
    item_repo: ItemRepositoryProtocol | None = None,
    bid_repo: BidRepositoryProtocol | None = None,
    membership_repo: MembershipRepositoryProtocol | None = None,
    notification_repo: NotificationRepositoryProtocol | None = None,
    discussion_repo: DiscussionRepositoryProtocol | None = None,
) -> Services:
    """Wire services around one bus. Repositories default to the SQL ones."""
    bus = bus or EventBus()
    auction_repo = auction_repo or AuctionRepository()
    item_repo = item_repo or ItemRepository()
    bid_repo = bid_repo or BidRepository()
    membership_repo = membership_repo or MembershipRepository()
    notification_repo = notification_repo or NotificationRepository()
    discussion_repo = discussion_repo or DiscussionRepository()

    fanout = NotificationFanout(bus, notification_repo)
    return Services(
        bus=bus,
        fanout=fanout,
        auctions=AuctionService(fanout, auction_repo, item_repo, membership_repo),
        members=MembershipService(bus, fanout, membership_repo, auction_repo),
        items=ItemService(fanout, item_repo, auction_repo, membership_repo),
        bids=BidLedger(fanout, item_repo, bid_repo, auction_repo, membership_repo),
        discussions=DiscussionService(discussion_repo, item_repo, auction_repo, membership_repo),
        notifications=NotificationService(notification_repo),
    )


def register_email_handlers(
    bus: EventBus, session_factory: SessionFactory = async_session_factory
) -> EmailHandlers:
    handlers = EmailHandlers(EmailQueue(), session_factory)
    handlers.register(bus)
    return handlers


def get_services(request: Request) -> Services:
    """FastAPI dependency: the process-wide services."""
    services: Services = request.app.state.services
    return services
