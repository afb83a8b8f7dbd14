"""Service tests for auction lifecycle: create, update, close, sweep."""

import asyncio
from datetime import timedelta
from unittest.mock import patch

import pytest

from src.au_common.datetime_utils import utc_now
from src.au_common.enums import ItemEndMode, JoinMode, MemberRole, NotificationType
from src.au_common.errors import (
    AuctionEndedError,
    AuctionNotFoundError,
    InsufficientRoleError,
    InvalidEndDateError,
    ItemHasBidsError,
    NotAMemberError,
    ValidationError,
)
from src.au_events.events import EventName
from tests.unit.fakes import FakeSession, seed_auction, seed_bid, seed_item


def _wins(store) -> list:
    return [n for n in store.notifications.values() if n.type == NotificationType.AUCTION_WON]


class TestCreateAuction:
    @pytest.mark.asyncio
    async def test_creator_becomes_owner(self, services, store, db) -> None:
        auction = await services.auctions.create_auction(db, "owner", "Spring Gala")
        assert auction.join_mode == JoinMode.INVITE_ONLY
        assert auction.invite_token is None
        [membership] = [m for m in store.members.values() if m.auction_id == auction.id]
        assert membership.user_id == "owner"
        assert membership.role == MemberRole.OWNER
        assert db.commits == 1

    @pytest.mark.asyncio
    async def test_link_mode_gets_token(self, services, db) -> None:
        auction = await services.auctions.create_auction(db, "owner", "Gala", join_mode=JoinMode.LINK)
        assert auction.invite_token

    @pytest.mark.asyncio
    async def test_open_auctions_disabled(self, services, store, db) -> None:
        with pytest.raises(ValidationError) as exc:
            await services.auctions.create_auction(db, "owner", "Gala", join_mode=JoinMode.FREE)
        assert exc.value.reason == "OPEN_AUCTIONS_DISABLED"
        assert store.auctions == {}

    @pytest.mark.asyncio
    async def test_open_auctions_enabled(self, services, db) -> None:
        with patch("src.au_auction.application.service.settings.ALLOW_OPEN_AUCTIONS", True):
            auction = await services.auctions.create_auction(db, "owner", "Gala", join_mode=JoinMode.FREE)
        assert auction.join_mode == JoinMode.FREE

    @pytest.mark.asyncio
    async def test_past_end_date_rejected(self, services, db) -> None:
        with pytest.raises(InvalidEndDateError):
            await services.auctions.create_auction(
                db, "owner", "Gala", end_date=utc_now() - timedelta(hours=1)
            )


class TestReadAuction:
    @pytest.mark.asyncio
    async def test_get_requires_membership(self, services, store, db) -> None:
        seed_auction(store)
        auction, membership = await services.auctions.get_auction(db, "A1", "alice")
        assert auction.id == "A1"
        assert membership.role == MemberRole.BIDDER
        with pytest.raises(NotAMemberError):
            await services.auctions.get_auction(db, "A1", "carol")
        with pytest.raises(AuctionNotFoundError):
            await services.auctions.get_auction(db, "A404", "alice")

    @pytest.mark.asyncio
    async def test_list_my_auctions(self, services, store, db) -> None:
        seed_auction(store)
        seed_item(store)
        [summary] = await services.auctions.list_my_auctions(db, "alice")
        assert summary.role == MemberRole.BIDDER
        assert summary.item_count == 1
        assert summary.member_count == 5
        assert await services.auctions.list_my_auctions(db, "carol") == []


class TestUpdateAuction:
    @pytest.mark.asyncio
    async def test_admin_can_rename(self, services, store, db) -> None:
        seed_auction(store)
        updated = await services.auctions.update_auction(db, "A1", "admin", {"name": "Autumn Gala"})
        assert updated.name == "Autumn Gala"

    @pytest.mark.asyncio
    async def test_bidder_cannot_edit(self, services, store, db) -> None:
        seed_auction(store)
        with pytest.raises(InsufficientRoleError):
            await services.auctions.update_auction(db, "A1", "alice", {"name": "Mine"})

    @pytest.mark.asyncio
    async def test_switch_to_link_issues_token(self, services, store, db) -> None:
        seed_auction(store)
        updated = await services.auctions.update_auction(db, "A1", "owner", {"join_mode": JoinMode.LINK})
        assert updated.invite_token

    @pytest.mark.asyncio
    async def test_end_date_change_moves_inheriting_items(self, services, store, db) -> None:
        old_end = utc_now() + timedelta(days=3)
        new_end = utc_now() + timedelta(days=5)
        seed_auction(store, end_date=old_end, item_end_mode=ItemEndMode.AUCTION_END)
        seed_item(store, end_date=old_end)
        await services.auctions.update_auction(db, "A1", "owner", {"end_date": new_end})
        assert store.items["I1"].end_date == new_end

    @pytest.mark.asyncio
    async def test_earlier_end_clamps_custom_items(self, services, store, db) -> None:
        seed_auction(store, end_date=utc_now() + timedelta(days=5))
        seed_item(store, "I1", end_date=utc_now() + timedelta(days=4))
        seed_item(store, "I2", end_date=utc_now() + timedelta(hours=1))
        new_end = utc_now() + timedelta(days=2)
        await services.auctions.update_auction(db, "A1", "owner", {"end_date": new_end})
        assert store.items["I1"].end_date == new_end
        assert store.items["I2"].end_date < new_end

    @pytest.mark.asyncio
    async def test_past_end_date_rejected(self, services, store, db) -> None:
        seed_auction(store)
        with pytest.raises(InvalidEndDateError):
            await services.auctions.update_auction(
                db, "A1", "owner", {"end_date": utc_now() - timedelta(minutes=1)}
            )

    @pytest.mark.asyncio
    async def test_ended_auction_cannot_be_reopened(self, services, store, db) -> None:
        seed_auction(store, end_date=utc_now() - timedelta(hours=1))
        with pytest.raises(AuctionEndedError):
            await services.auctions.update_auction(
                db, "A1", "owner", {"end_date": utc_now() + timedelta(days=1)}
            )


class TestDeleteAuction:
    @pytest.mark.asyncio
    async def test_owner_deletes_auction_without_bids(self, services, store, db) -> None:
        seed_auction(store)
        seed_item(store)
        await services.auctions.delete_auction(db, "A1", "owner")
        assert "A1" not in store.auctions
        assert "I1" not in store.items

    @pytest.mark.asyncio
    async def test_auction_with_bids_is_kept(self, services, store, db) -> None:
        seed_auction(store)
        seed_item(store)
        seed_bid(store, "I1", "alice", 100)
        with pytest.raises(ItemHasBidsError):
            await services.auctions.delete_auction(db, "A1", "owner")
        assert "A1" in store.auctions

    @pytest.mark.asyncio
    async def test_admin_cannot_delete(self, services, store, db) -> None:
        seed_auction(store)
        with pytest.raises(InsufficientRoleError):
            await services.auctions.delete_auction(db, "A1", "admin")


@pytest.fixture
def auction_with_bids(store):
    seed_auction(store, end_date=utc_now() + timedelta(days=3))
    seed_item(store, "I1")
    seed_item(store, "I2", name="Painting")
    seed_item(store, "I3", name="Unsold Vase")
    t0 = utc_now() - timedelta(minutes=10)
    seed_bid(store, "I1", "alice", 120, t0)
    seed_bid(store, "I1", "bob", 130, t0 + timedelta(minutes=1))
    seed_bid(store, "I2", "alice", 200, t0 + timedelta(minutes=2))
    return store


class TestCloseAuction:
    @pytest.mark.asyncio
    async def test_close_ends_items_and_notifies_winners(self, services, auction_with_bids, db) -> None:
        store = auction_with_bids
        result = await services.auctions.close_auction(db, "A1", "owner")

        assert result.closed_now is True
        assert result.items_ended == 3
        assert {(w.item_id, w.winner_id, w.amount) for w in result.winners} == {
            ("I1", "bob", 130),
            ("I2", "alice", 200),
        }
        assert sorted(result.notified_item_ids) == ["I1", "I2"]
        assert all(i.is_ended() for i in store.items.values())
        assert store.auctions["A1"].is_ended()
        assert sorted((n.user_id, n.item_id) for n in _wins(store)) == [("alice", "I2"), ("bob", "I1")]

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, services, auction_with_bids, db) -> None:
        store = auction_with_bids
        first = await services.auctions.close_auction(db, "A1", "owner")
        second = await services.auctions.close_auction(db, "A1", "owner")

        assert second.closed_now is False
        assert second.items_ended == 0
        assert second.notified_item_ids == []
        assert {w.item_id: w.winner_id for w in second.winners} == {
            w.item_id: w.winner_id for w in first.winners
        }
        assert len(_wins(store)) == 2

    @pytest.mark.asyncio
    async def test_only_owner_can_close(self, services, auction_with_bids, db) -> None:
        with pytest.raises(InsufficientRoleError):
            await services.auctions.close_auction(db, "A1", "admin")
        assert not auction_with_bids.auctions["A1"].is_ended()

    @pytest.mark.asyncio
    async def test_tie_goes_to_earliest_bid(self, services, store, db) -> None:
        seed_auction(store)
        seed_item(store)
        t0 = utc_now() - timedelta(minutes=5)
        seed_bid(store, "I1", "bob", 150, t0 + timedelta(seconds=30))
        seed_bid(store, "I1", "alice", 150, t0)
        result = await services.auctions.close_auction(db, "A1", "owner")
        assert result.winners[0].winner_id == "alice"

    @pytest.mark.asyncio
    async def test_results_after_close(self, services, auction_with_bids, db) -> None:
        await services.auctions.close_auction(db, "A1", "owner")
        winners = await services.auctions.get_results(db, "A1", "alice")
        assert {w.item_id for w in winners} == {"I1", "I2"}


class TestProcessEndedItems:
    @pytest.mark.asyncio
    async def test_notifies_naturally_ended_items_once(self, services, store, db) -> None:
        seed_auction(store)
        seed_item(store, "I1", end_date=utc_now() - timedelta(minutes=1))
        seed_item(store, "I2", end_date=utc_now() + timedelta(days=1))
        seed_bid(store, "I1", "alice", 100)
        seed_bid(store, "I2", "bob", 100)

        assert await services.auctions.process_ended_items(db) == 1
        assert await services.auctions.process_ended_items(db) == 0
        [won] = _wins(store)
        assert (won.user_id, won.item_id) == ("alice", "I1")

    @pytest.mark.asyncio
    async def test_items_without_bids_are_skipped(self, services, store, db) -> None:
        seed_auction(store)
        seed_item(store, end_date=utc_now() - timedelta(minutes=1))
        assert await services.auctions.process_ended_items(db) == 0
        assert store.items["I1"].winner_notified is False

    @pytest.mark.asyncio
    async def test_batch_size(self, services, store, db) -> None:
        seed_auction(store)
        for n in range(3):
            seed_item(store, f"I{n}", end_date=utc_now() - timedelta(minutes=1))
            seed_bid(store, f"I{n}", "alice", 100)
        assert await services.auctions.process_ended_items(db, batch_size=2) == 2
        assert await services.auctions.process_ended_items(db, batch_size=2) == 1

    @pytest.mark.asyncio
    async def test_sweep_after_close_sends_nothing(self, services, auction_with_bids, db) -> None:
        await services.auctions.close_auction(db, "A1", "owner")
        assert await services.auctions.process_ended_items(db) == 0
        assert len(_wins(auction_with_bids)) == 2

    @pytest.mark.asyncio
    async def test_close_after_sweep_sends_nothing_new(self, services, store, db) -> None:
        seed_auction(store)
        seed_item(store, "I1", end_date=utc_now() - timedelta(minutes=1))
        seed_bid(store, "I1", "alice", 100)
        await services.auctions.process_ended_items(db)
        result = await services.auctions.close_auction(db, "A1", "owner")
        assert result.notified_item_ids == []
        assert len(_wins(store)) == 1

    @pytest.mark.asyncio
    async def test_concurrent_close_and_sweep(self, services, store) -> None:
        seed_auction(store)
        for n in range(4):
            seed_item(store, f"I{n}", end_date=utc_now() - timedelta(seconds=1))
            seed_bid(store, f"I{n}", "bob", 100 + n)

        await asyncio.gather(
            services.auctions.close_auction(FakeSession(), "A1", "owner"),
            services.auctions.process_ended_items(FakeSession()),
            services.auctions.close_auction(FakeSession(), "A1", "owner"),
        )
        assert sorted(n.item_id for n in _wins(store)) == ["I0", "I1", "I2", "I3"]


class TestWinnerNotificationRecovery:
    @pytest.mark.asyncio
    async def test_sweep_retries_after_failed_insert(
        self, services, store, db, notification_repo
    ) -> None:
        seed_auction(store)
        seed_item(store, end_date=utc_now() - timedelta(minutes=1))
        seed_bid(store, "I1", "alice", 100)

        notification_repo.fail = True
        assert await services.auctions.process_ended_items(db) == 0
        assert store.items["I1"].winner_notified is False

        notification_repo.fail = False
        assert await services.auctions.process_ended_items(db) == 1
        assert store.items["I1"].winner_notified is True
        [won] = _wins(store)
        assert won.user_id == "alice"

    @pytest.mark.asyncio
    async def test_close_still_ends_auction_when_insert_fails(
        self, services, auction_with_bids, db, notification_repo
    ) -> None:
        store = auction_with_bids
        notification_repo.fail = True
        result = await services.auctions.close_auction(db, "A1", "owner")

        assert result.closed_now is True
        assert len(result.winners) == 2
        assert result.notified_item_ids == []
        assert store.auctions["A1"].is_ended()
        assert all(i.is_ended() for i in store.items.values())
        assert not any(i.winner_notified for i in store.items.values())
        assert _wins(store) == []

    @pytest.mark.asyncio
    async def test_reclose_recovers_failed_winner_notifications(
        self, services, auction_with_bids, db, notification_repo
    ) -> None:
        store = auction_with_bids
        notification_repo.fail = True
        await services.auctions.close_auction(db, "A1", "owner")

        notification_repo.fail = False
        second = await services.auctions.close_auction(db, "A1", "owner")
        assert second.closed_now is False
        assert sorted(second.notified_item_ids) == ["I1", "I2"]
        assert await services.auctions.process_ended_items(db) == 0
        assert sorted(n.item_id for n in _wins(store)) == ["I1", "I2"]

    @pytest.mark.asyncio
    async def test_sweep_recovers_failed_close(
        self, services, auction_with_bids, db, notification_repo
    ) -> None:
        store = auction_with_bids
        notification_repo.fail = True
        await services.auctions.close_auction(db, "A1", "owner")

        notification_repo.fail = False
        assert await services.auctions.process_ended_items(db) == 2
        assert sorted((n.user_id, n.item_id) for n in _wins(store)) == [
            ("alice", "I2"), ("bob", "I1"),
        ]

    @pytest.mark.asyncio
    async def test_won_event_follows_commit(self, services, auction_with_bids, db) -> None:
        events = []

        def on_won(event) -> None:
            # the notification row is already committed when the event arrives
            assert event.notification_id in auction_with_bids.notifications
            assert db.commits == 1
            events.append(event)

        services.bus.on(EventName.ITEM_WON, on_won)
        await services.auctions.close_auction(db, "A1", "owner")
        assert sorted(e.item_id for e in events) == ["I1", "I2"]
