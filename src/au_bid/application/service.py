"""BidLedger: validates and commits bids, keeps the item price pointer.

Commit strategy: the item row is locked with ``SELECT ... FOR UPDATE`` and all
preconditions are evaluated against the locked row. The bid insert and the
pointer update run in that same transaction, and the pointer update is itself
a compare-and-set on the price that was read. A concurrent bidder therefore
waits for the lock and then re-validates against the new price; if the
compare-and-set ever finds a different price the whole transaction rolls back
with BidConflictError instead of accepting an under-bid.

Precondition order (each a distinct error):
  1. item exists in this auction        -> NotFound
  2. bidder is a member, not the creator -> Forbidden
  3. item is published                   -> Conflict(ITEM_NOT_PUBLISHED), NotFound for
                                            members who cannot see the draft
  4. item has not ended                  -> Conflict(ITEM_ENDED)
  5. amount >= min bid                   -> ValidationError(AMOUNT_TOO_LOW, min_bid)
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.au_auction.domain.repository import AuctionRepositoryProtocol
from src.au_auction.infrastructure.persistence import AuctionRepository
from src.au_bid.domain.models import Bid, BidView, UserBid
from src.au_bid.domain.repository import BidRepositoryProtocol
from src.au_bid.domain.rules import (
    anti_snipe_end_date,
    calculate_min_bid,
    redact_bids,
    resolve_anonymity,
)
from src.au_bid.infrastructure.persistence import BidRepository
from src.au_common.datetime_utils import utc_now
from src.au_common.errors import (
    AuctionNotFoundError,
    BidAmountTooLowError,
    BidConflictError,
    ItemEndedError,
    ItemNotFoundError,
    ItemNotPublishedError,
    OwnItemBidError,
)
from src.au_common.id_generator import generate_id
from src.au_item.domain.models import Item
from src.au_item.domain.repository import ItemRepositoryProtocol
from src.au_item.infrastructure.persistence import ItemRepository
from src.au_membership.domain.gate import (
    can_see_bidder_identities,
    can_view_item,
    require_member,
)
from src.au_membership.domain.repository import MembershipRepositoryProtocol
from src.au_membership.infrastructure.persistence import MembershipRepository
from src.au_notification.application.fanout import NotificationFanout

logger = logging.getLogger(__name__)

BID_HISTORY_LIMIT = 100


class BidLedger:
    def __init__(
        self,
        fanout: NotificationFanout,
        item_repo: ItemRepositoryProtocol | None = None,
        bid_repo: BidRepositoryProtocol | None = None,
        auction_repo: AuctionRepositoryProtocol | None = None,
        membership_repo: MembershipRepositoryProtocol | None = None,
    ) -> None:
        self._fanout = fanout
        self._items: ItemRepositoryProtocol = item_repo or ItemRepository()
        self._bids: BidRepositoryProtocol = bid_repo or BidRepository()
        self._auctions: AuctionRepositoryProtocol = auction_repo or AuctionRepository()
        self._members: MembershipRepositoryProtocol = membership_repo or MembershipRepository()

    async def place_bid(
        self,
        db: AsyncSession,
        auction_id: str,
        item_id: str,
        bidder_id: str,
        amount: int,
        anonymity_requested: bool | None = None,
    ) -> Bid:
        try:
            auction = await self._auctions.get_auction(db, auction_id)
            if auction is None:
                raise AuctionNotFoundError(auction_id)

            item = await self._items.get_item_for_update(db, item_id)
            if item is None or item.auction_id != auction_id:
                raise ItemNotFoundError(item_id)

            if item.creator_id == bidder_id:
                raise OwnItemBidError()
            membership = require_member(
                await self._members.get_membership(db, auction_id, bidder_id), auction_id
            )
            if not item.is_published:
                if not can_view_item(membership, item.creator_id, item.is_published):
                    raise ItemNotFoundError(item_id)
                raise ItemNotPublishedError(item_id)

            now = utc_now()
            if item.is_ended(now):
                raise ItemEndedError(item_id)

            min_bid = calculate_min_bid(item.starting_bid, item.current_bid, item.min_bid_increment)
            if amount < min_bid:
                raise BidAmountTooLowError(amount, min_bid)

            requested = item.bidder_anonymous if anonymity_requested is None else anonymity_requested
            bid = Bid(
                id=generate_id(),
                item_id=item_id,
                user_id=bidder_id,
                amount=amount,
                is_anonymous=resolve_anonymity(auction.bidder_visibility, requested),
                created_at=now,
            )
            previous_bidder_id = item.highest_bidder_id

            await self._bids.insert_bid(db, bid)
            end_date = anti_snipe_end_date(
                item.end_date,
                item.anti_snipe_enabled,
                item.anti_snipe_threshold_seconds,
                item.anti_snipe_extension_seconds,
                auction.end_date,
                now,
            )
            applied = await self._items.apply_bid(
                db, item_id, item.current_bid, amount, bidder_id, end_date
            )
            if not applied:
                raise BidConflictError(item_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if end_date != item.end_date:
            logger.info("Anti-snipe extended item %s to %s", item_id, end_date)

        if previous_bidder_id is not None and previous_bidder_id != bidder_id:
            await self._fanout.notify_outbid(
                db,
                previous_bidder_id,
                auction.id,
                auction.name,
                item.id,
                item.name,
                amount,
                item.currency_code,
            )
        return bid

    async def list_bids(
        self, db: AsyncSession, auction_id: str, item_id: str, viewer_id: str
    ) -> list[BidView]:
        auction = await self._auctions.get_auction(db, auction_id)
        if auction is None:
            raise AuctionNotFoundError(auction_id)
        membership = require_member(
            await self._members.get_membership(db, auction_id, viewer_id), auction_id
        )
        item = await self._get_item_in_auction(db, auction_id, item_id)

        bids = await self._bids.list_bids(db, item_id)
        return redact_bids(
            bids,
            auction.bidder_visibility,
            viewer_id,
            can_see_bidder_identities(membership, item.creator_id),
        )

    async def my_bids(
        self, db: AsyncSession, user_id: str, limit: int = BID_HISTORY_LIMIT
    ) -> list[UserBid]:
        return await self._bids.list_user_bids(db, user_id, limit)

    async def _get_item_in_auction(self, db: AsyncSession, auction_id: str, item_id: str) -> Item:
        item = await self._items.get_item(db, item_id)
        if item is None or item.auction_id != auction_id:
            raise ItemNotFoundError(item_id)
        return item
