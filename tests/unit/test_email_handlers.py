"""Tests for the email outbox handlers."""

import pytest

from src.au_common.enums import EmailKind, EmailStatus
from src.au_email.application.handlers import EmailHandlers
from src.au_email.application.queue import EmailQueue
from src.au_email.domain.models import EmailRecipient
from src.au_events.events import (
    EventName,
    InviteCreatedEvent,
    ItemWonEvent,
    NewItemEvent,
    OutbidEvent,
)
from tests.unit.fakes import (
    FakeEmailOutbox,
    FakeSession,
    FakeUserDirectory,
    seed_auction,
    seed_item,
)


@pytest.fixture
def handlers(store) -> EmailHandlers:
    return EmailHandlers(EmailQueue(FakeEmailOutbox(store)), FakeSession, FakeUserDirectory(store))


def _outbid(user_id: str = "alice") -> OutbidEvent:
    return OutbidEvent("n1", user_id, "A1", "Gala", "I1", "Guitar", 12000, "USD")


class TestEmailQueue:
    @pytest.mark.asyncio
    async def test_enqueue_returns_job_id(self, store) -> None:
        queue = EmailQueue(FakeEmailOutbox(store))
        db = FakeSession()
        job_id = await queue.enqueue(
            db, EmailKind.OUTBID, EmailRecipient("a@example.com", "A"), "Subject", {"x": 1}
        )
        [job] = store.email_jobs
        assert job.id == job_id
        assert job.status == EmailStatus.PENDING
        assert job.template_data == {"x": 1}


class TestHandlers:
    @pytest.mark.asyncio
    async def test_outbid_email(self, handlers, store) -> None:
        await handlers.on_outbid(_outbid())
        [job] = store.email_jobs
        assert job.kind == EmailKind.OUTBID
        assert job.recipient_email == "alice@example.com"
        assert job.template_data["new_bid"] == "$120.00"
        assert job.template_data["item_url"].endswith("/auctions/A1/items/I1")

    @pytest.mark.asyncio
    async def test_outbid_respects_preference(self, handlers, store) -> None:
        store.add_user("alice", email_on_outbid=False)
        await handlers.on_outbid(_outbid())
        assert store.email_jobs == []

    @pytest.mark.asyncio
    async def test_unknown_user_gets_nothing(self, handlers, store) -> None:
        await handlers.on_outbid(_outbid("ghost"))
        await handlers.on_item_won(ItemWonEvent("n1", "ghost", "A1", "Gala", "I1", "Guitar", 1, "USD"))
        assert store.email_jobs == []

    @pytest.mark.asyncio
    async def test_item_won_email(self, handlers, store) -> None:
        await handlers.on_item_won(ItemWonEvent("n1", "bob", "A1", "Gala", "I1", "Guitar", 500, "EUR"))
        [job] = store.email_jobs
        assert job.kind == EmailKind.ITEM_WON
        assert job.subject == 'Congratulations! You won "Guitar"'
        assert job.template_data["winning_bid"] == "€5.00"

    @pytest.mark.asyncio
    async def test_new_item_respects_preference(self, handlers, store) -> None:
        store.add_user("bob", email_on_new_item=False)
        await handlers.on_item_created(NewItemEvent("n1", "alice", "A1", "Gala", "I1", "Guitar", None))
        await handlers.on_item_created(NewItemEvent("n2", "bob", "A1", "Gala", "I1", "Guitar", None))
        assert [j.recipient_email for j in store.email_jobs] == ["alice@example.com"]

    @pytest.mark.asyncio
    async def test_invite_email(self, handlers, store) -> None:
        await handlers.on_invite_created(
            InviteCreatedEvent("inv1", "carol@example.com", "A1", "Gala", "Owner", "tok123", "BIDDER")
        )
        [job] = store.email_jobs
        assert job.kind == EmailKind.INVITE
        assert job.recipient_email == "carol@example.com"
        assert job.template_data["invite_url"].endswith("/invite/tok123")

    def test_register_and_unregister(self, handlers, services) -> None:
        handlers.register(services.bus)
        assert handlers.on_outbid in services.bus.handlers(EventName.BID_OUTBID)
        assert handlers.on_invite_created in services.bus.handlers(EventName.INVITE_CREATED)
        assert services.bus.handlers(EventName.MEMBER_JOINED) == []
        handlers.unregister(services.bus)
        assert services.bus.handlers(EventName.BID_OUTBID) == []


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_outbid_bid_queues_email(self, handlers, services, store, db) -> None:
        seed_auction(store)
        seed_item(store)
        handlers.register(services.bus)

        await services.bids.place_bid(db, "A1", "I1", "alice", 100)
        await services.bids.place_bid(db, "A1", "I1", "bob", 105)
        await services.bus.drain()

        [job] = store.email_jobs
        assert job.kind == EmailKind.OUTBID
        assert job.recipient_email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_close_queues_winner_email(self, handlers, services, store, db) -> None:
        seed_auction(store)
        seed_item(store)
        handlers.register(services.bus)
        await services.bids.place_bid(db, "A1", "I1", "alice", 100)

        await services.auctions.close_auction(db, "A1", "owner")
        await services.auctions.close_auction(db, "A1", "owner")
        await services.bus.drain()

        assert [(j.kind, j.recipient_email) for j in store.email_jobs] == [
            (EmailKind.ITEM_WON, "alice@example.com")
        ]
