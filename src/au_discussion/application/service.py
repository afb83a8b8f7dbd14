"""DiscussionService: threaded posts under an auction item.

Any member who can see the item may read and post. Posting requires
``discussions_enabled`` on the item. Only the author edits a post; the author,
the item creator and the auction admins may delete one, replies included.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.au_auction.domain.repository import AuctionRepositoryProtocol
from src.au_auction.infrastructure.persistence import AuctionRepository
from src.au_common.datetime_utils import utc_now
from src.au_common.errors import (
    AuctionNotFoundError,
    DiscussionNotFoundError,
    DiscussionsDisabledError,
    ItemNotFoundError,
    ValidationError,
)
from src.au_common.id_generator import generate_id
from src.au_discussion.domain.models import (
    Discussion,
    DiscussionOrder,
    ItemDiscussions,
)
from src.au_discussion.domain.repository import DiscussionRepositoryProtocol
from src.au_discussion.domain.thread_tree import build_threads, normalize_content
from src.au_discussion.infrastructure.persistence import DiscussionRepository
from src.au_item.domain.models import Item
from src.au_item.domain.repository import ItemRepositoryProtocol
from src.au_item.infrastructure.persistence import ItemRepository
from src.au_membership.domain.gate import (
    can_delete_discussion,
    can_edit_discussion,
    can_view_item,
    require,
    require_member,
)
from src.au_membership.domain.models import Membership
from src.au_membership.domain.repository import MembershipRepositoryProtocol
from src.au_membership.infrastructure.persistence import MembershipRepository


class DiscussionService:
    def __init__(
        self,
        discussion_repo: DiscussionRepositoryProtocol | None = None,
        item_repo: ItemRepositoryProtocol | None = None,
        auction_repo: AuctionRepositoryProtocol | None = None,
        membership_repo: MembershipRepositoryProtocol | None = None,
    ) -> None:
        self._discussions: DiscussionRepositoryProtocol = discussion_repo or DiscussionRepository()
        self._items: ItemRepositoryProtocol = item_repo or ItemRepository()
        self._auctions: AuctionRepositoryProtocol = auction_repo or AuctionRepository()
        self._members: MembershipRepositoryProtocol = membership_repo or MembershipRepository()

    async def list_discussions(
        self,
        db: AsyncSession,
        auction_id: str,
        item_id: str,
        user_id: str,
        order: DiscussionOrder = DiscussionOrder.NEWEST,
    ) -> ItemDiscussions:
        _, item = await self._load(db, auction_id, item_id, user_id)
        discussions = await self._discussions.list_for_item(db, item_id)
        return ItemDiscussions(
            threads=build_threads(discussions, order),
            discussions_enabled=item.discussions_enabled,
        )

    async def create_discussion(
        self,
        db: AsyncSession,
        auction_id: str,
        item_id: str,
        user_id: str,
        content: str,
        parent_id: str | None = None,
    ) -> Discussion:
        try:
            _, item = await self._load(db, auction_id, item_id, user_id)
            if not item.discussions_enabled:
                raise DiscussionsDisabledError(item_id)
            text = normalize_content(content)
            if parent_id is not None:
                parent = await self._discussions.get(db, parent_id)
                if parent is None or parent.item_id != item_id:
                    raise ValidationError("Parent discussion not found", "INVALID_PARENT")

            now = utc_now()
            discussion = Discussion(
                id=generate_id(),
                item_id=item_id,
                user_id=user_id,
                content=text,
                parent_id=parent_id,
                created_at=now,
                updated_at=now,
            )
            await self._discussions.insert(db, discussion)
            created = await self._discussions.get(db, discussion.id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return created or discussion

    async def update_discussion(
        self,
        db: AsyncSession,
        auction_id: str,
        item_id: str,
        discussion_id: str,
        user_id: str,
        content: str,
    ) -> Discussion:
        try:
            membership, _ = await self._load(db, auction_id, item_id, user_id)
            discussion = await self._get_on_item(db, item_id, discussion_id)
            require(can_edit_discussion(membership, discussion.user_id), "edit this discussion")
            text = normalize_content(content)
            if text != discussion.content:
                await self._discussions.update_content(db, discussion_id, text, utc_now())
                discussion = await self._get_on_item(db, item_id, discussion_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return discussion

    async def delete_discussion(
        self,
        db: AsyncSession,
        auction_id: str,
        item_id: str,
        discussion_id: str,
        user_id: str,
    ) -> None:
        try:
            membership, item = await self._load(db, auction_id, item_id, user_id)
            discussion = await self._get_on_item(db, item_id, discussion_id)
            require(
                can_delete_discussion(membership, discussion.user_id, item.creator_id),
                "delete this discussion",
            )
            await self._discussions.delete(db, discussion_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def _load(
        self, db: AsyncSession, auction_id: str, item_id: str, user_id: str
    ) -> tuple[Membership, Item]:
        if await self._auctions.get_auction(db, auction_id) is None:
            raise AuctionNotFoundError(auction_id)
        membership = require_member(
            await self._members.get_membership(db, auction_id, user_id), auction_id
        )
        item = await self._items.get_item(db, item_id)
        if item is None or item.auction_id != auction_id:
            raise ItemNotFoundError(item_id)
        if not can_view_item(membership, item.creator_id, item.is_published):
            raise ItemNotFoundError(item_id)
        return membership, item

    async def _get_on_item(
        self, db: AsyncSession, item_id: str, discussion_id: str
    ) -> Discussion:
        discussion = await self._discussions.get(db, discussion_id)
        if discussion is None or discussion.item_id != item_id:
            raise DiscussionNotFoundError(discussion_id)
        return discussion
