"""AuctionService: auction lifecycle: create, update, close, results, sweep.

``close_auction`` is the owner's "end now" action. Under the auction row lock
it ends the auction (unless it already ended), ends every open item in one
UPDATE and computes winners. Each winning item is then claimed and its
AUCTION_WON row written in the same savepoint, so a claim never commits
without its notification. Events go out after commit and only for items this
call claimed, which makes repeated closes and the background sweep safe to
overlap.
"""

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.au_auction.domain.models import Auction, AuctionSummary, Winner
from src.au_auction.domain.repository import AuctionRepositoryProtocol
from src.au_auction.infrastructure.persistence import AuctionRepository
from src.au_common.datetime_utils import is_past, utc_now
from src.au_common.enums import (
    BidderVisibility,
    ItemEndMode,
    JoinMode,
    MemberRole,
)
from src.au_common.errors import (
    AuctionEndedError,
    AuctionNotFoundError,
    InvalidEndDateError,
    ItemHasBidsError,
    ValidationError,
)
from src.au_common.id_generator import generate_id
from src.au_item.domain.repository import ItemRepositoryProtocol
from src.au_item.infrastructure.persistence import ItemRepository
from src.au_membership.domain.gate import (
    can_close_auction,
    can_delete_auction,
    can_manage_auction,
    require,
    require_member,
)
from src.au_membership.domain.models import Membership
from src.au_membership.domain.repository import MembershipRepositoryProtocol
from src.au_membership.infrastructure.persistence import MembershipRepository
from src.au_notification.application.fanout import NotificationFanout, Staged

logger = logging.getLogger(__name__)


@dataclass
class CloseResult:
    auction: Auction
    winners: list[Winner]
    closed_now: bool
    items_ended: int = 0
    notified_item_ids: list[str] = field(default_factory=list)


class AuctionService:
    def __init__(
        self,
        fanout: NotificationFanout,
        auction_repo: AuctionRepositoryProtocol | None = None,
        item_repo: ItemRepositoryProtocol | None = None,
        membership_repo: MembershipRepositoryProtocol | None = None,
    ) -> None:
        self._fanout = fanout
        self._auctions: AuctionRepositoryProtocol = auction_repo or AuctionRepository()
        self._items: ItemRepositoryProtocol = item_repo or ItemRepository()
        self._members: MembershipRepositoryProtocol = membership_repo or MembershipRepository()

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def create_auction(
        self,
        db: AsyncSession,
        user_id: str,
        name: str,
        description: str | None = None,
        join_mode: JoinMode = JoinMode.INVITE_ONLY,
        member_can_invite: bool = False,
        bidder_visibility: BidderVisibility = BidderVisibility.VISIBLE,
        end_date: datetime | None = None,
        item_end_mode: ItemEndMode = ItemEndMode.CUSTOM,
        default_items_editable_by_admin: bool = True,
    ) -> Auction:
        now = utc_now()
        self._check_join_mode(join_mode)
        if end_date is not None and is_past(end_date, now):
            raise InvalidEndDateError("End date must be in the future")

        auction = Auction(
            id=generate_id(),
            name=name,
            description=description,
            creator_id=user_id,
            join_mode=join_mode,
            member_can_invite=member_can_invite,
            invite_token=secrets.token_urlsafe(16) if join_mode == JoinMode.LINK else None,
            bidder_visibility=bidder_visibility,
            end_date=end_date,
            item_end_mode=item_end_mode,
            default_items_editable_by_admin=default_items_editable_by_admin,
            created_at=now,
            updated_at=now,
        )
        owner = Membership(
            id=generate_id(),
            auction_id=auction.id,
            user_id=user_id,
            role=MemberRole.OWNER,
            joined_at=now,
        )
        try:
            await self._auctions.insert_auction(db, auction)
            await self._members.add_member(db, owner)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return auction

    async def get_auction(
        self, db: AsyncSession, auction_id: str, user_id: str
    ) -> tuple[Auction, Membership]:
        auction = await self._get(db, auction_id)
        membership = require_member(
            await self._members.get_membership(db, auction_id, user_id), auction_id
        )
        return auction, membership

    async def list_my_auctions(self, db: AsyncSession, user_id: str) -> list[AuctionSummary]:
        return await self._auctions.list_for_user(db, user_id)

    async def update_auction(
        self, db: AsyncSession, auction_id: str, user_id: str, changes: dict[str, Any]
    ) -> Auction:
        try:
            auction = await self._get(db, auction_id, for_update=True)
            membership = await self._members.get_membership(db, auction_id, user_id)
            require(can_manage_auction(require_member(membership, auction_id)), "edit this auction")

            now = utc_now()
            effective = {k: v for k, v in changes.items() if getattr(auction, k) != v}

            if "join_mode" in effective:
                self._check_join_mode(effective["join_mode"])
                if effective["join_mode"] == JoinMode.LINK and not auction.invite_token:
                    effective["invite_token"] = secrets.token_urlsafe(16)

            if "end_date" in effective:
                if auction.is_ended(now):
                    raise AuctionEndedError(auction_id)
                new_end = effective["end_date"]
                if new_end is not None and is_past(new_end, now):
                    raise InvalidEndDateError(
                        "End date must be in the future; close the auction to end it now"
                    )

            if not effective:
                await db.commit()
                return auction

            updated = await self._auctions.update_auction(db, auction_id, effective)
            if "end_date" in effective or "item_end_mode" in effective:
                await self._items.sync_open_item_end_dates(
                    db,
                    auction_id,
                    updated.end_date,
                    updated.item_end_mode == ItemEndMode.AUCTION_END,
                    now,
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return updated

    async def delete_auction(self, db: AsyncSession, auction_id: str, user_id: str) -> None:
        try:
            await self._get(db, auction_id, for_update=True)
            membership = await self._members.get_membership(db, auction_id, user_id)
            require(can_delete_auction(require_member(membership, auction_id)), "delete this auction")
            if await self._auctions.count_bids(db, auction_id) > 0:
                raise ItemHasBidsError("Cannot delete an auction whose items have bids")
            await self._auctions.delete_auction(db, auction_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Auction %s deleted by %s", auction_id, user_id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close_auction(
        self, db: AsyncSession, auction_id: str, user_id: str
    ) -> CloseResult:
        try:
            auction = await self._get(db, auction_id, for_update=True)
            membership = await self._members.get_membership(db, auction_id, user_id)
            require(can_close_auction(require_member(membership, auction_id)), "close this auction")

            now = utc_now()
            closed_now = await self._auctions.end_auction(db, auction_id, now)
            items_ended = await self._items.end_open_items(db, auction_id, now)
            winners = await self._auctions.list_winners(db, auction_id, now)
            staged = await self._claim_and_stage(db, winners)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if closed_now:
            auction.end_date = now
            logger.info(
                "Auction %s closed by %s: %d items ended, %d winners",
                auction_id, user_id, items_ended, len(winners),
            )
        self._fanout.publish(staged)
        return CloseResult(
            auction=auction,
            winners=winners,
            closed_now=closed_now,
            items_ended=items_ended,
            notified_item_ids=[n.item_id for n, _ in staged if n.item_id],
        )

    async def get_results(
        self, db: AsyncSession, auction_id: str, user_id: str
    ) -> list[Winner]:
        """Winners of every item in the auction that has already ended."""
        await self.get_auction(db, auction_id, user_id)
        return await self._auctions.list_winners(db, auction_id, utc_now())

    async def process_ended_items(
        self, db: AsyncSession, batch_size: int | None = None
    ) -> int:
        """Send AUCTION_WON for items that ended by time. Returns notifications sent."""
        limit = batch_size or settings.ENDED_ITEMS_BATCH_SIZE
        try:
            candidates = await self._items.list_unnotified_ended(db, utc_now(), limit)
            winners = await self._auctions.list_winners_for_items(db, candidates)
            staged = await self._claim_and_stage(db, winners)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if staged:
            logger.info("Notified winners of %d ended items", len(staged))
        self._fanout.publish(staged)
        return len(staged)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get(self, db: AsyncSession, auction_id: str, for_update: bool = False) -> Auction:
        if for_update:
            auction = await self._auctions.get_auction_for_update(db, auction_id)
        else:
            auction = await self._auctions.get_auction(db, auction_id)
        if auction is None:
            raise AuctionNotFoundError(auction_id)
        return auction

    def _check_join_mode(self, join_mode: JoinMode) -> None:
        if join_mode == JoinMode.FREE and not settings.ALLOW_OPEN_AUCTIONS:
            raise ValidationError(
                "Open auctions are not allowed on this server", "OPEN_AUCTIONS_DISABLED"
            )

    async def _claim_and_stage(
        self, db: AsyncSession, winners: list[Winner]
    ) -> list[Staged]:
        """Claim each winning item and write its AUCTION_WON row in one savepoint.

        An item another caller already claimed is skipped. If the row cannot be
        written the savepoint undoes the claim, so the item stays unclaimed and
        the next sweep retries it.
        """
        staged: list[Staged] = []
        for w in winners:
            try:
                async with db.begin_nested():
                    if not await self._items.claim_winner_notifications(db, [w.item_id]):
                        continue
                    staged.append(
                        await self._fanout.stage_auction_won(
                            db,
                            w.winner_id,
                            w.auction_id,
                            w.auction_name,
                            w.item_id,
                            w.item_name,
                            w.amount,
                            w.currency_code,
                        )
                    )
            except Exception:
                logger.exception(
                    "Failed to record AUCTION_WON for item %s, left for the next sweep",
                    w.item_id,
                )
        return staged
