"""ItemService: create, read, edit and delete auction items.

Edits go through ``lifecycle.check_item_edit`` while the item row is locked,
so a bid cannot land between the bid-count check and the write.

Draft items (``is_published`` false) are hidden from everyone but their
creator and the auction admins. Members hear about an item through NEW_ITEM
when it is created published or when a draft is published.
"""

from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.au_auction.domain.models import Auction
from src.au_auction.domain.repository import AuctionRepositoryProtocol
from src.au_auction.infrastructure.persistence import AuctionRepository
from src.au_common.currencies import get_currency
from src.au_common.datetime_utils import utc_now
from src.au_common.errors import (
    AuctionEndedError,
    AuctionNotFoundError,
    ItemHasBidsError,
    ItemNotFoundError,
)
from src.au_common.id_generator import generate_id
from src.au_item.domain.lifecycle import check_item_edit, derive_item_end_date
from src.au_item.domain.models import Item
from src.au_item.domain.repository import ItemRepositoryProtocol
from src.au_item.infrastructure.persistence import ItemRepository
from src.au_membership.domain.gate import (
    can_create_item,
    can_edit_item,
    can_view_item,
    require,
    require_member,
)
from src.au_membership.domain.models import Membership
from src.au_membership.domain.repository import MembershipRepositoryProtocol
from src.au_membership.infrastructure.persistence import MembershipRepository
from src.au_notification.application.fanout import NotificationFanout


class ItemService:
    def __init__(
        self,
        fanout: NotificationFanout,
        item_repo: ItemRepositoryProtocol | None = None,
        auction_repo: AuctionRepositoryProtocol | None = None,
        membership_repo: MembershipRepositoryProtocol | None = None,
    ) -> None:
        self._fanout = fanout
        self._items: ItemRepositoryProtocol = item_repo or ItemRepository()
        self._auctions: AuctionRepositoryProtocol = auction_repo or AuctionRepository()
        self._members: MembershipRepositoryProtocol = membership_repo or MembershipRepository()

    async def create_item(
        self,
        db: AsyncSession,
        auction_id: str,
        user_id: str,
        name: str,
        starting_bid: int,
        min_bid_increment: int = 1,
        currency_code: str = "USD",
        description: str | None = None,
        end_date: datetime | None = None,
        bidder_anonymous: bool = False,
        is_editable_by_admin: bool | None = None,
        discussions_enabled: bool = True,
        is_published: bool = True,
        image_url: str | None = None,
        anti_snipe_enabled: bool = False,
        anti_snipe_threshold_seconds: int = 300,
        anti_snipe_extension_seconds: int = 300,
    ) -> Item:
        try:
            auction, membership = await self._load(db, auction_id, user_id)
            require(can_create_item(membership), "create items in this auction")

            now = utc_now()
            if auction.is_ended(now):
                raise AuctionEndedError(auction_id)

            item = Item(
                id=generate_id(),
                auction_id=auction_id,
                creator_id=user_id,
                name=name,
                description=description,
                currency_code=get_currency(currency_code).code,
                starting_bid=starting_bid,
                min_bid_increment=min_bid_increment,
                bidder_anonymous=bidder_anonymous,
                is_editable_by_admin=(
                    auction.default_items_editable_by_admin
                    if is_editable_by_admin is None
                    else is_editable_by_admin
                ),
                discussions_enabled=discussions_enabled,
                is_published=is_published,
                image_url=image_url,
                end_date=derive_item_end_date(
                    auction.item_end_mode, auction.end_date, end_date, now
                ),
                anti_snipe_enabled=anti_snipe_enabled,
                anti_snipe_threshold_seconds=anti_snipe_threshold_seconds,
                anti_snipe_extension_seconds=anti_snipe_extension_seconds,
                created_at=now,
                updated_at=now,
            )
            await self._items.insert_item(db, item)
            member_ids = await self._members.list_member_user_ids(db, auction_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if item.is_published:
            await self._announce(db, auction, item, member_ids)
        return item

    async def get_item(
        self, db: AsyncSession, auction_id: str, item_id: str, user_id: str
    ) -> Item:
        _, membership = await self._load(db, auction_id, user_id)
        item = await self._get_in_auction(db, auction_id, item_id)
        if not can_view_item(membership, item.creator_id, item.is_published):
            raise ItemNotFoundError(item_id)
        return item

    async def list_items(self, db: AsyncSession, auction_id: str, user_id: str) -> list[Item]:
        _, membership = await self._load(db, auction_id, user_id)
        items = await self._items.list_items(db, auction_id)
        return [i for i in items if can_view_item(membership, i.creator_id, i.is_published)]

    async def update_item(
        self,
        db: AsyncSession,
        auction_id: str,
        item_id: str,
        user_id: str,
        changes: dict[str, Any],
    ) -> Item:
        try:
            auction, membership = await self._load(db, auction_id, user_id)
            item = await self._items.get_item_for_update(db, item_id)
            if item is None or item.auction_id != auction_id:
                raise ItemNotFoundError(item_id)
            require(
                can_edit_item(membership, item.creator_id, item.is_editable_by_admin),
                "edit this item",
            )
            if "is_editable_by_admin" in changes and user_id != item.creator_id:
                require(membership.is_owner, "change admin editability of this item")
            if "currency_code" in changes:
                changes = {**changes, "currency_code": get_currency(changes["currency_code"]).code}

            effective = check_item_edit(
                item, changes, auction.item_end_mode, auction.end_date, utc_now()
            )
            if effective:
                item = await self._items.update_item(db, item_id, effective)
            published_now = effective.get("is_published") is True
            if published_now:
                member_ids = await self._members.list_member_user_ids(db, auction_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if published_now:
            await self._announce(db, auction, item, member_ids)
        return item

    async def delete_item(
        self, db: AsyncSession, auction_id: str, item_id: str, user_id: str
    ) -> None:
        try:
            _, membership = await self._load(db, auction_id, user_id)
            item = await self._items.get_item_for_update(db, item_id)
            if item is None or item.auction_id != auction_id:
                raise ItemNotFoundError(item_id)
            require(
                can_edit_item(membership, item.creator_id, item.is_editable_by_admin),
                "delete this item",
            )
            if item.bid_count > 0:
                raise ItemHasBidsError("Cannot delete an item that has bids")
            await self._items.delete_item(db, item_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def _load(
        self, db: AsyncSession, auction_id: str, user_id: str
    ) -> tuple[Auction, Membership]:
        auction = await self._auctions.get_auction(db, auction_id)
        if auction is None:
            raise AuctionNotFoundError(auction_id)
        membership = require_member(
            await self._members.get_membership(db, auction_id, user_id), auction_id
        )
        return auction, membership

    async def _announce(
        self, db: AsyncSession, auction: Auction, item: Item, member_ids: list[str]
    ) -> None:
        await self._fanout.notify_new_item(
            db,
            member_ids,
            item.creator_id,
            auction.id,
            auction.name,
            item.id,
            item.name,
            item.description,
            item.image_url,
        )

    async def _get_in_auction(self, db: AsyncSession, auction_id: str, item_id: str) -> Item:
        item = await self._items.get_item(db, item_id)
        if item is None or item.auction_id != auction_id:
            raise ItemNotFoundError(item_id)
        return item
