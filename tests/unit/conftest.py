"""Service fixtures wired to the in-memory repositories."""

import pytest

from src.au_events.bus import EventBus
from src.bootstrap import Services, build_services
from tests.unit.fakes import (
    FakeAuctionRepository,
    FakeBidRepository,
    FakeDiscussionRepository,
    FakeItemRepository,
    FakeMembershipRepository,
    FakeNotificationRepository,
    FakeSession,
    InMemoryStore,
)


@pytest.fixture
def store() -> InMemoryStore:
    s = InMemoryStore()
    for user_id in ("owner", "admin", "creator", "alice", "bob", "carol"):
        s.add_user(user_id)
    return s


@pytest.fixture
def notification_repo(store: InMemoryStore) -> FakeNotificationRepository:
    return FakeNotificationRepository(store)


@pytest.fixture
def services(store: InMemoryStore, notification_repo: FakeNotificationRepository) -> Services:
    return build_services(
        bus=EventBus(),
        auction_repo=FakeAuctionRepository(store),
        item_repo=FakeItemRepository(store),
        bid_repo=FakeBidRepository(store),
        membership_repo=FakeMembershipRepository(store),
        notification_repo=notification_repo,
        discussion_repo=FakeDiscussionRepository(store),
    )


@pytest.fixture
def db() -> FakeSession:
    return FakeSession()


