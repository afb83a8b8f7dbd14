"""Domain models for au_membership: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.au_common.enums import BidderVisibility, ItemEndMode, JoinMode, MemberRole


@dataclass(frozen=True)
class AuctionPolicy:
    """Snapshot of the auction settings the capability checks depend on."""

    auction_id: str
    owner_id: str
    join_mode: JoinMode
    member_can_invite: bool
    bidder_visibility: BidderVisibility
    item_end_mode: ItemEndMode
    end_date: datetime | None = None


@dataclass
class Membership:
    id: str
    auction_id: str
    user_id: str
    role: MemberRole
    invited_by_id: str | None = None
    joined_at: datetime | None = None

    @property
    def is_owner(self) -> bool:
        return self.role == MemberRole.OWNER


@dataclass
class MemberView:
    """Membership joined with the user's public profile, for member lists."""

    membership: Membership
    email: str
    name: str | None


@dataclass
class Invite:
    id: str
    auction_id: str
    email: str
    role: MemberRole
    token: str
    sender_id: str
    expires_at: datetime | None = None
    used_at: datetime | None = None
    created_at: datetime | None = None

    def is_usable(self, now: datetime) -> bool:
        if self.used_at is not None:
            return False
        return self.expires_at is None or self.expires_at > now
