"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class MemberRole(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    CREATOR = "CREATOR"
    BIDDER = "BIDDER"


class JoinMode(str, Enum):
    INVITE_ONLY = "INVITE_ONLY"
    LINK = "LINK"
    FREE = "FREE"


class BidderVisibility(str, Enum):
    VISIBLE = "VISIBLE"
    ANONYMOUS = "ANONYMOUS"
    PER_BID = "PER_BID"


class ItemEndMode(str, Enum):
    """How item end dates relate to the auction end date."""
    AUCTION_END = "AUCTION_END"  # inherit auction end
    CUSTOM = "CUSTOM"            # custom per item
    NONE = "NONE"                # items never end automatically


class NotificationType(str, Enum):
    OUTBID = "OUTBID"
    AUCTION_WON = "AUCTION_WON"
    MEMBER_JOINED = "MEMBER_JOINED"
    NEW_ITEM = "NEW_ITEM"


class EmailKind(str, Enum):
    INVITE = "INVITE"
    OUTBID = "OUTBID"
    ITEM_WON = "ITEM_WON"
    NEW_ITEM = "NEW_ITEM"


class EmailStatus(str, Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


ADMIN_ROLES: frozenset[MemberRole] = frozenset({MemberRole.OWNER, MemberRole.ADMIN})
ITEM_CREATOR_ROLES: frozenset[MemberRole] = frozenset(
    {MemberRole.OWNER, MemberRole.ADMIN, MemberRole.CREATOR}
)
