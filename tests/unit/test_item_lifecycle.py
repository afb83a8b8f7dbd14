"""Unit tests for item end-date derivation and edit restrictions."""

from datetime import timedelta

import pytest

from src.au_common.datetime_utils import utc_now
from src.au_common.enums import ItemEndMode
from src.au_common.errors import (
    ConflictError,
    InvalidEndDateError,
    ItemHasBidsError,
    ValidationError,
)
from src.au_item.domain.lifecycle import (
    check_end_date_change,
    check_item_edit,
    derive_item_end_date,
)
from src.au_item.domain.models import Item, ItemState

NOW = utc_now()
AUCTION_END = NOW + timedelta(days=7)


def _item(**kwargs) -> Item:
    defaults = dict(
        id="I1", auction_id="A1", creator_id="creator", name="Guitar",
        starting_bid=100, min_bid_increment=5, end_date=NOW + timedelta(days=1),
    )
    defaults.update(kwargs)
    return Item(**defaults)


class TestItemState:
    def test_open_without_end_date(self) -> None:
        assert _item(end_date=None).state(NOW) == ItemState.OPEN

    def test_ended_once_end_date_reached(self) -> None:
        assert _item(end_date=NOW).state(NOW) == ItemState.ENDED
        assert _item(end_date=NOW + timedelta(seconds=1)).state(NOW) == ItemState.OPEN

    def test_min_bid(self) -> None:
        assert _item().min_bid == 100
        assert _item(current_bid=110, highest_bidder_id="alice").min_bid == 115


class TestDeriveEndDate:
    def test_auction_end_mode_inherits(self) -> None:
        requested = NOW + timedelta(days=1)
        assert derive_item_end_date(ItemEndMode.AUCTION_END, AUCTION_END, requested, NOW) == AUCTION_END

    def test_none_mode_never_ends(self) -> None:
        assert derive_item_end_date(ItemEndMode.NONE, AUCTION_END, None, NOW) is None

    def test_custom_defaults_to_auction_end(self) -> None:
        assert derive_item_end_date(ItemEndMode.CUSTOM, AUCTION_END, None, NOW) == AUCTION_END

    def test_custom_takes_requested(self) -> None:
        requested = NOW + timedelta(days=2)
        assert derive_item_end_date(ItemEndMode.CUSTOM, AUCTION_END, requested, NOW) == requested

    def test_custom_rejects_past(self) -> None:
        with pytest.raises(InvalidEndDateError):
            derive_item_end_date(ItemEndMode.CUSTOM, AUCTION_END, NOW - timedelta(hours=1), NOW)

    def test_custom_rejects_after_auction_end(self) -> None:
        with pytest.raises(InvalidEndDateError) as exc:
            derive_item_end_date(ItemEndMode.CUSTOM, AUCTION_END, AUCTION_END + timedelta(hours=1), NOW)
        assert exc.value.reason == "END_AFTER_AUCTION"


class TestEndDateChange:
    def test_ending_early_always_allowed(self) -> None:
        for mode in ItemEndMode:
            check_end_date_change(_item(), NOW, mode, AUCTION_END, NOW)

    def test_ended_item_cannot_reopen(self) -> None:
        ended = _item(end_date=NOW - timedelta(hours=1))
        with pytest.raises(ConflictError) as exc:
            check_end_date_change(ended, NOW + timedelta(hours=1), ItemEndMode.CUSTOM, AUCTION_END, NOW)
        assert exc.value.reason == "ITEM_ENDED"
        with pytest.raises(ConflictError):
            check_end_date_change(ended, None, ItemEndMode.CUSTOM, AUCTION_END, NOW)

    def test_custom_date_outside_custom_mode(self) -> None:
        with pytest.raises(InvalidEndDateError) as exc:
            check_end_date_change(
                _item(), NOW + timedelta(hours=2), ItemEndMode.AUCTION_END, AUCTION_END, NOW
            )
        assert exc.value.reason == "CUSTOM_END_NOT_ALLOWED"

    def test_custom_date_after_auction_end(self) -> None:
        with pytest.raises(InvalidEndDateError):
            check_end_date_change(
                _item(), AUCTION_END + timedelta(seconds=1), ItemEndMode.CUSTOM, AUCTION_END, NOW
            )

    def test_clearing_end_date_on_open_item(self) -> None:
        check_end_date_change(_item(), None, ItemEndMode.CUSTOM, AUCTION_END, NOW)


class TestCheckItemEdit:
    def test_returns_only_changed_fields(self) -> None:
        effective = check_item_edit(
            _item(), {"name": "Guitar", "description": "Signed"}, ItemEndMode.CUSTOM, AUCTION_END, NOW
        )
        assert effective == {"description": "Signed"}

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc:
            check_item_edit(_item(), {"current_bid": 500}, ItemEndMode.CUSTOM, AUCTION_END, NOW)
        assert exc.value.reason == "FIELD_NOT_EDITABLE"

    @pytest.mark.parametrize("field, value", [("currency_code", "EUR"), ("starting_bid", 50)])
    def test_zero_bid_fields_locked_after_bids(self, field: str, value: object) -> None:
        item = _item(current_bid=100, highest_bidder_id="alice", bid_count=1)
        with pytest.raises(ItemHasBidsError):
            check_item_edit(item, {field: value}, ItemEndMode.CUSTOM, AUCTION_END, NOW)

    def test_zero_bid_fields_editable_without_bids(self) -> None:
        effective = check_item_edit(
            _item(), {"currency_code": "EUR", "starting_bid": 50}, ItemEndMode.CUSTOM, AUCTION_END, NOW
        )
        assert effective == {"currency_code": "EUR", "starting_bid": 50}

    def test_increment_editable_after_bids(self) -> None:
        item = _item(current_bid=100, highest_bidder_id="alice", bid_count=1)
        effective = check_item_edit(item, {"min_bid_increment": 10}, ItemEndMode.CUSTOM, AUCTION_END, NOW)
        assert effective == {"min_bid_increment": 10}

    def test_unchanged_locked_field_is_not_an_error(self) -> None:
        item = _item(current_bid=100, highest_bidder_id="alice", bid_count=1)
        assert check_item_edit(item, {"currency_code": "USD"}, ItemEndMode.CUSTOM, AUCTION_END, NOW) == {}

    def test_unpublish_blocked_after_bids(self) -> None:
        item = _item(current_bid=100, highest_bidder_id="alice", bid_count=1)
        with pytest.raises(ItemHasBidsError, match="unpublish"):
            check_item_edit(item, {"is_published": False}, ItemEndMode.CUSTOM, AUCTION_END, NOW)

    def test_unpublish_allowed_without_bids(self) -> None:
        effective = check_item_edit(
            _item(), {"is_published": False}, ItemEndMode.CUSTOM, AUCTION_END, NOW
        )
        assert effective == {"is_published": False}
