"""Pure bid rules: minimum bid, anonymity, redaction, winner, anti-snipe.

All amounts are int minor units. No I/O here; the ledger calls these while it
holds the item row lock.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from src.au_bid.domain.models import Bid, BidderBid, BidView
from src.au_common.enums import BidderVisibility

ANONYMOUS_BIDDER_NAME = "Anonymous"


def calculate_min_bid(starting_bid: int, current_bid: int | None, min_increment: int) -> int:
    """Smallest acceptable next bid."""
    if current_bid is None:
        return starting_bid
    return current_bid + min_increment


def resolve_anonymity(visibility: BidderVisibility, requested: bool) -> bool:
    """Stored anonymity flag for a new bid.

    ANONYMOUS hides every bid, VISIBLE none, PER_BID honours the request.
    """
    if visibility == BidderVisibility.ANONYMOUS:
        return True
    if visibility == BidderVisibility.VISIBLE:
        return False
    return requested


def is_identity_hidden(visibility: BidderVisibility, is_anonymous: bool) -> bool:
    return visibility == BidderVisibility.ANONYMOUS or is_anonymous


def redact_bids(
    bids: Iterable[BidderBid],
    visibility: BidderVisibility,
    viewer_id: str,
    can_see_identities: bool,
) -> list[BidView]:
    views = []
    for entry in bids:
        bid = entry.bid
        is_own = bid.user_id == viewer_id
        hidden = (
            not can_see_identities
            and not is_own
            and is_identity_hidden(visibility, bid.is_anonymous)
        )
        views.append(
            BidView(
                id=bid.id,
                item_id=bid.item_id,
                amount=bid.amount,
                is_anonymous=bid.is_anonymous,
                created_at=bid.created_at,
                user_id=None if hidden else bid.user_id,
                bidder_name=ANONYMOUS_BIDDER_NAME if hidden else entry.display_name,
                is_own=is_own,
            )
        )
    return views


def order_bids(bids: Iterable[Bid]) -> list[Bid]:
    """Amount descending, earliest first among equal amounts."""
    return sorted(bids, key=lambda b: (-b.amount, b.created_at, b.id))


def determine_winner(bids: Sequence[Bid]) -> Bid | None:
    """Highest amount wins; on equal amounts the earliest bid wins."""
    if not bids:
        return None
    return order_bids(bids)[0]


def anti_snipe_end_date(
    end_date: datetime | None,
    enabled: bool,
    threshold_seconds: int,
    extension_seconds: int,
    auction_end_date: datetime | None,
    now: datetime,
) -> datetime | None:
    """End date after a bid accepted at ``now``.

    A bid landing within ``threshold_seconds`` of the end pushes the end out by
    ``extension_seconds``, never past the auction end.
    """
    if not enabled or end_date is None:
        return end_date
    remaining = (end_date - now).total_seconds()
    if remaining <= 0 or remaining > threshold_seconds:
        return end_date
    extended = end_date + timedelta(seconds=extension_seconds)
    if auction_end_date is not None and extended > auction_end_date:
        extended = max(auction_end_date, end_date)
    return extended
