"""Domain models for au_auction: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.au_common.datetime_utils import is_past
from src.au_common.enums import BidderVisibility, ItemEndMode, JoinMode, MemberRole
from src.au_membership.domain.models import AuctionPolicy


@dataclass
class Auction:
    id: str
    name: str
    creator_id: str
    description: str | None = None
    join_mode: JoinMode = JoinMode.INVITE_ONLY
    member_can_invite: bool = False
    invite_token: str | None = None
    bidder_visibility: BidderVisibility = BidderVisibility.VISIBLE
    end_date: datetime | None = None
    item_end_mode: ItemEndMode = ItemEndMode.CUSTOM
    default_items_editable_by_admin: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_ended(self, now: datetime | None = None) -> bool:
        return is_past(self.end_date, now)

    def policy(self) -> AuctionPolicy:
        return AuctionPolicy(
            auction_id=self.id,
            owner_id=self.creator_id,
            join_mode=self.join_mode,
            member_can_invite=self.member_can_invite,
            bidder_visibility=self.bidder_visibility,
            item_end_mode=self.item_end_mode,
            end_date=self.end_date,
        )


@dataclass
class AuctionSummary:
    """An auction as seen from one member's auction list."""

    auction: Auction
    role: MemberRole
    item_count: int = 0
    member_count: int = 0


@dataclass(frozen=True)
class Winner:
    """Highest bid on an ended item."""

    auction_id: str
    auction_name: str
    item_id: str
    item_name: str
    winner_id: str
    amount: int
    currency_code: str
    bid_id: str
    bid_at: datetime | None = None
