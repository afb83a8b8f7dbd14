"""Unit tests for the raw-SQL repositories using MagicMock AsyncSession."""

import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.au_auction.infrastructure.persistence import AuctionRepository
from src.au_bid.infrastructure.persistence import BidRepository
from src.au_common.enums import EmailKind, JoinMode, MemberRole
from src.au_discussion.domain.models import Discussion
from src.au_discussion.infrastructure.persistence import DiscussionRepository
from src.au_email.domain.models import EmailJob
from src.au_email.infrastructure.persistence import EmailOutbox
from src.au_item.infrastructure.persistence import ItemRepository
from src.au_membership.domain.models import Membership
from src.au_membership.infrastructure.persistence import MembershipRepository


def _make_item_row(**kwargs):
    row = MagicMock()
    row.id = kwargs.get("id", "I1")
    row.auction_id = "A1"
    row.creator_id = "creator"
    row.name = "Guitar"
    row.description = None
    row.currency_code = "USD"
    row.starting_bid = 100
    row.min_bid_increment = 5
    row.current_bid = kwargs.get("current_bid")
    row.highest_bidder_id = kwargs.get("highest_bidder_id")
    row.bidder_anonymous = False
    row.is_editable_by_admin = True
    row.discussions_enabled = True
    row.is_published = kwargs.get("is_published", True)
    row.image_url = None
    row.end_date = None
    row.anti_snipe_enabled = False
    row.anti_snipe_threshold_seconds = 300
    row.anti_snipe_extension_seconds = 300
    row.winner_notified = False
    row.bid_count = kwargs.get("bid_count", 0)
    row.created_at = datetime.now(UTC)
    row.updated_at = datetime.now(UTC)
    return row


def _make_auction_row(**kwargs):
    row = MagicMock()
    row.id = kwargs.get("id", "A1")
    row.name = kwargs.get("name", "Gala")
    row.description = None
    row.creator_id = "owner"
    row.join_mode = kwargs.get("join_mode", "INVITE_ONLY")
    row.member_can_invite = False
    row.invite_token = None
    row.bidder_visibility = "VISIBLE"
    row.end_date = None
    row.item_end_mode = "CUSTOM"
    row.default_items_editable_by_admin = True
    row.created_at = datetime.now(UTC)
    row.updated_at = datetime.now(UTC)
    return row


@pytest.fixture
def db():
    return MagicMock()


def _result(fetchone=None, fetchall=None, rowcount=None):
    result = MagicMock()
    result.fetchone.return_value = fetchone
    result.fetchall.return_value = fetchall or []
    result.rowcount = rowcount
    return result


class TestItemRepository:
    @pytest.mark.asyncio
    async def test_get_item_maps_row(self, db):
        db.execute = AsyncMock(return_value=_result(fetchone=_make_item_row(current_bid=120, highest_bidder_id="bob")))
        item = await ItemRepository().get_item(db, "I1")
        assert item is not None
        assert item.current_bid == 120
        assert item.min_bid == 125

    @pytest.mark.asyncio
    async def test_get_item_missing(self, db):
        db.execute = AsyncMock(return_value=_result(fetchone=None))
        assert await ItemRepository().get_item(db, "nope") is None

    @pytest.mark.asyncio
    async def test_get_for_update_locks_row(self, db):
        db.execute = AsyncMock(return_value=_result(fetchone=_make_item_row()))
        await ItemRepository().get_item_for_update(db, "I1")
        sql = str(db.execute.call_args.args[0])
        assert "FOR UPDATE" in sql

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rowcount, expected", [(1, True), (0, False)])
    async def test_apply_bid_compare_and_set(self, db, rowcount, expected):
        db.execute = AsyncMock(return_value=_result(rowcount=rowcount))
        applied = await ItemRepository().apply_bid(db, "I1", None, 100, "alice", None)
        assert applied is expected
        params = db.execute.call_args.args[1]
        assert params["expected"] is None
        assert params["amount"] == 100
        sql = str(db.execute.call_args.args[0])
        assert "IS NOT DISTINCT FROM :expected" in sql

    @pytest.mark.asyncio
    async def test_update_item_rejects_unknown_columns(self, db):
        db.execute = AsyncMock()
        with pytest.raises(ValueError):
            await ItemRepository().update_item(db, "I1", {"current_bid": 1})
        db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_item_builds_set_clause(self, db):
        db.execute = AsyncMock(return_value=_result(fetchone=_make_item_row()))
        await ItemRepository().update_item(db, "I1", {"name": "Lamp", "min_bid_increment": 10})
        sql = str(db.execute.call_args.args[0])
        assert "min_bid_increment = :min_bid_increment, name = :name" in sql
        assert db.execute.call_args.args[1]["id"] == "I1"

    @pytest.mark.asyncio
    async def test_claim_nothing_skips_query(self, db):
        db.execute = AsyncMock()
        assert await ItemRepository().claim_winner_notifications(db, []) == []
        db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_claim_returns_flipped_ids(self, db):
        row = MagicMock()
        row.id = "I2"
        db.execute = AsyncMock(return_value=_result(fetchall=[row]))
        assert await ItemRepository().claim_winner_notifications(db, ["I1", "I2"]) == ["I2"]

    @pytest.mark.asyncio
    async def test_sync_without_auction_end_is_noop(self, db):
        db.execute = AsyncMock()
        count = await ItemRepository().sync_open_item_end_dates(
            db, "A1", None, False, datetime.now(UTC)
        )
        assert count == 0
        db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_end_open_items_returns_rowcount(self, db):
        db.execute = AsyncMock(return_value=_result(rowcount=3))
        assert await ItemRepository().end_open_items(db, "A1", datetime.now(UTC)) == 3


class TestAuctionRepository:
    @pytest.mark.asyncio
    async def test_get_auction_maps_enums(self, db):
        db.execute = AsyncMock(return_value=_result(fetchone=_make_auction_row(join_mode="LINK")))
        auction = await AuctionRepository().get_auction(db, "A1")
        assert auction.join_mode == JoinMode.LINK

    @pytest.mark.asyncio
    async def test_update_passes_enum_values(self, db):
        db.execute = AsyncMock(return_value=_result(fetchone=_make_auction_row()))
        await AuctionRepository().update_auction(db, "A1", {"join_mode": JoinMode.LINK})
        assert db.execute.call_args.args[1]["join_mode"] == "LINK"

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_columns(self, db):
        db.execute = AsyncMock()
        with pytest.raises(ValueError):
            await AuctionRepository().update_auction(db, "A1", {"creator_id": "me"})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("row, expected", [(MagicMock(), True), (None, False)])
    async def test_end_auction(self, db, row, expected):
        db.execute = AsyncMock(return_value=_result(fetchone=row))
        assert await AuctionRepository().end_auction(db, "A1", datetime.now(UTC)) is expected

    @pytest.mark.asyncio
    async def test_winners_for_no_items(self, db):
        db.execute = AsyncMock()
        assert await AuctionRepository().list_winners_for_items(db, []) == []
        db.execute.assert_not_called()


class TestMembershipRepository:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("row, expected", [(MagicMock(), True), (None, False)])
    async def test_add_member(self, db, row, expected):
        db.execute = AsyncMock(return_value=_result(fetchone=row))
        added = await MembershipRepository().add_member(
            db, Membership(id="m1", auction_id="A1", user_id="u1", role=MemberRole.BIDDER)
        )
        assert added is expected
        assert db.execute.call_args.args[1]["role"] == "BIDDER"


class TestBidRepository:
    @pytest.mark.asyncio
    async def test_list_bids_maps_bidder(self, db):
        row = MagicMock()
        row.id, row.item_id, row.user_id = "b1", "I1", "alice"
        row.amount, row.is_anonymous, row.created_at = 100, False, datetime.now(UTC)
        row.bidder_name, row.bidder_email = None, "alice@example.com"
        db.execute = AsyncMock(return_value=_result(fetchall=[row]))
        [entry] = await BidRepository().list_bids(db, "I1")
        assert entry.bid.amount == 100
        assert entry.display_name == "alice"


class TestEmailOutbox:
    @pytest.mark.asyncio
    async def test_insert_serializes_template_data(self, db):
        db.execute = AsyncMock()
        job = EmailJob(
            id="j1", kind=EmailKind.INVITE, recipient_email="a@example.com",
            subject="Hi", template_data={"invite_url": "http://x/invite/t"},
        )
        await EmailOutbox().insert_job(db, job)
        params = db.execute.call_args.args[1]
        assert params["kind"] == "INVITE"
        assert params["status"] == "PENDING"
        assert json.loads(params["template_data"]) == {"invite_url": "http://x/invite/t"}


class TestDiscussionRepository:
    @pytest.mark.asyncio
    async def test_list_maps_author_in_creation_order(self, db):
        row = MagicMock()
        row.id, row.item_id, row.user_id, row.parent_id = "d1", "I1", "alice", None
        row.content, row.author_name = "Boxed?", "Alice"
        row.created_at = row.updated_at = datetime.now(UTC)
        db.execute = AsyncMock(return_value=_result(fetchall=[row]))
        [d] = await DiscussionRepository().list_for_item(db, "I1")
        assert d.author_name == "Alice"
        assert d.is_edited is False
        sql = str(db.execute.call_args.args[0])
        assert "ORDER BY d.created_at ASC" in sql

    @pytest.mark.asyncio
    async def test_insert_starts_unedited(self, db):
        db.execute = AsyncMock()
        now = datetime.now(UTC)
        await DiscussionRepository().insert(
            db, Discussion(id="d1", item_id="I1", user_id="alice", content="Hi", created_at=now)
        )
        params = db.execute.call_args.args[1]
        assert params["created_at"] == now
        assert ":created_at, :created_at" in str(db.execute.call_args.args[0])
