"""Item lifecycle rules: end-date derivation and edit restrictions.

An item is OPEN while its end date is unset or in the future and ENDED once
the end date has passed. ENDED never flips back to OPEN through an edit, and
a published item with bids never goes back to draft.
All checks are pure and raise the matching AppError.
"""

from datetime import datetime
from typing import Any

from src.au_common.datetime_utils import is_past
from src.au_common.enums import ItemEndMode
from src.au_common.errors import (
    ConflictError,
    InvalidEndDateError,
    ItemHasBidsError,
    ValidationError,
)
from src.au_item.domain.models import Item

# Editable at any time, whatever the bid count
ALWAYS_EDITABLE_FIELDS = frozenset({
    "name",
    "description",
    "min_bid_increment",
    "bidder_anonymous",
    "discussions_enabled",
    "is_published",
    "image_url",
    "is_editable_by_admin",
    "anti_snipe_enabled",
    "anti_snipe_threshold_seconds",
    "anti_snipe_extension_seconds",
})

# Editable only while the item has no bids
ZERO_BID_FIELDS = frozenset({"currency_code", "starting_bid"})

EDITABLE_FIELDS = ALWAYS_EDITABLE_FIELDS | ZERO_BID_FIELDS | {"end_date"}


def derive_item_end_date(
    item_end_mode: ItemEndMode,
    auction_end_date: datetime | None,
    requested: datetime | None,
    now: datetime,
) -> datetime | None:
    """End date for a new item.

    AUCTION_END inherits the auction end, NONE never ends and CUSTOM takes the
    requested date, bounded by the auction end.
    """
    if item_end_mode == ItemEndMode.AUCTION_END:
        return auction_end_date
    if item_end_mode == ItemEndMode.NONE:
        return None
    if requested is None:
        return auction_end_date
    if is_past(requested, now):
        raise InvalidEndDateError("End date must be in the future")
    if auction_end_date is not None and requested > auction_end_date:
        raise InvalidEndDateError(
            "Item end date cannot be after the auction end date", "END_AFTER_AUCTION"
        )
    return requested


def check_end_date_change(
    item: Item,
    new_end_date: datetime | None,
    item_end_mode: ItemEndMode,
    auction_end_date: datetime | None,
    now: datetime,
) -> None:
    """Validate an end-date edit.

    Ending an item early (a date at or before now) is allowed in every mode.
    Reopening an ended item is a Conflict; custom future dates are only
    accepted in CUSTOM mode and never beyond the auction end.
    """
    ends_now_or_earlier = new_end_date is not None and is_past(new_end_date, now)
    if ends_now_or_earlier:
        return

    if item.is_ended(now):
        raise ConflictError("Cannot extend an item that has already ended", "ITEM_ENDED")

    if new_end_date is None:
        return

    if item_end_mode != ItemEndMode.CUSTOM:
        raise InvalidEndDateError(
            "Custom item end dates are not allowed in this auction", "CUSTOM_END_NOT_ALLOWED"
        )
    if auction_end_date is not None and new_end_date > auction_end_date:
        raise InvalidEndDateError(
            "Item end date cannot be after the auction end date", "END_AFTER_AUCTION"
        )


def check_item_edit(
    item: Item,
    changes: dict[str, Any],
    item_end_mode: ItemEndMode,
    auction_end_date: datetime | None,
    now: datetime,
) -> dict[str, Any]:
    """Validate a partial update and return only the fields that actually change."""
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(
            f"Fields not editable: {', '.join(sorted(unknown))}", "FIELD_NOT_EDITABLE"
        )

    effective = {k: v for k, v in changes.items() if getattr(item, k) != v}

    if item.bid_count > 0:
        blocked = sorted(set(effective) & ZERO_BID_FIELDS)
        if blocked:
            raise ItemHasBidsError(
                f"Cannot change {', '.join(blocked)} after bids have been placed"
            )
        if effective.get("is_published") is False:
            raise ItemHasBidsError("Cannot unpublish an item that has received bids")

    if "end_date" in effective:
        check_end_date_change(
            item, effective["end_date"], item_end_mode, auction_end_date, now
        )

    return effective
