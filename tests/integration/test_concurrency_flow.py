# tests/integration/test_concurrency_flow.py
"""Concurrent bids, overlapping close and sweep, and discussions against PostgreSQL.

Requires a running PostgreSQL DB with migrations applied (alembic upgrade head).
Users are provisioned by the external auth service in production, so each test
inserts its own fresh users directly and signs tokens for them.
"""

import asyncio
import json
import random
import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import text

from config.settings import settings
from src.au_common.database import async_session_factory
from src.au_common.id_generator import generate_id
from src.au_gateway.auth.jwt_handler import create_access_token

pytestmark = pytest.mark.asyncio(loop_scope="session")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_INSERT_USER_SQL = text("INSERT INTO users (id, email, name) VALUES (:id, :email, :name)")

_INSERT_MEMBER_SQL = text("""
    INSERT INTO auction_members (id, auction_id, user_id, role)
    VALUES (:id, :auction_id, :user_id, 'BIDDER')
""")


async def _create_users(*names: str) -> dict[str, str]:
    """Insert fresh users and return name -> user id."""
    ids = {name: f"{name}_{uuid.uuid4().hex[:10]}" for name in names}
    async with async_session_factory() as db:
        await db.execute(
            _INSERT_USER_SQL,
            [{"id": uid, "email": f"{uid}@example.com", "name": name.title()} for name, uid in ids.items()],
        )
        await db.commit()
    return ids


def _auth(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


async def _create_auction(client: AsyncClient, owner_id: str, bidder_ids: list[str]) -> str:
    resp = await client.post(
        "/api/v1/auctions", json={"name": "Integration Gala"}, headers=_auth(owner_id)
    )
    assert resp.status_code == 201
    auction_id = str(resp.json()["data"]["id"])
    async with async_session_factory() as db:
        await db.execute(
            _INSERT_MEMBER_SQL,
            [{"id": generate_id(), "auction_id": auction_id, "user_id": uid} for uid in bidder_ids],
        )
        await db.commit()
    return auction_id


async def _create_item(
    client: AsyncClient, auction_id: str, owner_id: str, name: str = "Signed Guitar"
) -> str:
    resp = await client.post(
        f"/api/v1/auctions/{auction_id}/items",
        json={"name": name, "starting_bid": 100, "min_bid_increment": 5},
        headers=_auth(owner_id),
    )
    assert resp.status_code == 201
    return str(resp.json()["data"]["id"])


async def _bid(client: AsyncClient, auction_id: str, item_id: str, user_id: str, amount: int):
    return await client.post(
        f"/api/v1/auctions/{auction_id}/items/{item_id}/bids",
        json={"amount": amount},
        headers=_auth(user_id),
    )


# ---------------------------------------------------------------------------
# TestConcurrentBids
# ---------------------------------------------------------------------------


class TestConcurrentBids:
    async def test_accepted_bids_strictly_increase(self, client: AsyncClient) -> None:
        users = await _create_users("owner", "alice", "bob", "carol", "dave")
        bidders = [users[n] for n in ("alice", "bob", "carol", "dave")]
        auction_id = await _create_auction(client, users["owner"], bidders)
        item_id = await _create_item(client, auction_id, users["owner"])

        amounts = list(range(100, 200, 5))
        random.Random(11).shuffle(amounts)
        responses = await asyncio.gather(
            *(
                _bid(client, auction_id, item_id, bidders[i % len(bidders)], amount)
                for i, amount in enumerate(amounts)
            )
        )

        assert {r.status_code for r in responses} <= {201, 409, 422}
        for r in responses:
            if r.status_code == 422:
                body = r.json()["data"]
                assert body["reason"] == "AMOUNT_TOO_LOW"
                assert body["min_bid"] > json.loads(r.request.content)["amount"]

        async with async_session_factory() as db:
            rows = (
                await db.execute(
                    text("SELECT amount FROM bids WHERE item_id = :id ORDER BY created_at, id"),
                    {"id": item_id},
                )
            ).fetchall()
            item = (
                await db.execute(
                    text("SELECT current_bid, bid_count FROM auction_items WHERE id = :id"),
                    {"id": item_id},
                )
            ).one()

        accepted = [row.amount for row in rows]
        assert len(accepted) == sum(1 for r in responses if r.status_code == 201)
        assert accepted
        assert accepted[0] >= 100
        for earlier, later in zip(accepted, accepted[1:]):
            assert later >= earlier + 5
        assert item.current_bid == accepted[-1] == max(accepted)
        assert item.bid_count == len(accepted)


# ---------------------------------------------------------------------------
# TestCloseAndSweep
# ---------------------------------------------------------------------------


class TestCloseAndSweep:
    async def test_each_winner_notified_once(self, client: AsyncClient) -> None:
        users = await _create_users("owner", "alice", "bob")
        auction_id = await _create_auction(client, users["owner"], [users["alice"], users["bob"]])
        ended_early = await _create_item(client, auction_id, users["owner"], "Ended Early")
        still_open = await _create_item(client, auction_id, users["owner"], "Still Open")
        no_bids = await _create_item(client, auction_id, users["owner"], "No Bids")

        assert (await _bid(client, auction_id, ended_early, users["alice"], 100)).status_code == 201
        assert (await _bid(client, auction_id, ended_early, users["bob"], 105)).status_code == 201
        assert (await _bid(client, auction_id, still_open, users["alice"], 100)).status_code == 201

        # Visible to the sweep before the close runs
        async with async_session_factory() as db:
            await db.execute(
                text("UPDATE auction_items SET end_date = NOW() - INTERVAL '1 minute' WHERE id = :id"),
                {"id": ended_early},
            )
            await db.commit()

        owner = _auth(users["owner"])
        cron = {"Authorization": f"Bearer {settings.CRON_SECRET}"}
        responses = await asyncio.gather(
            client.post(f"/api/v1/auctions/{auction_id}/close", headers=owner),
            client.post("/api/v1/cron/process-ended-items", headers=cron),
            client.post(f"/api/v1/auctions/{auction_id}/close", headers=owner),
            client.post("/api/v1/cron/process-ended-items", headers=cron),
        )
        assert [r.status_code for r in responses] == [200, 200, 200, 200]
        closes = [responses[0].json()["data"], responses[2].json()["data"]]
        assert sorted(c["already_closed"] for c in closes) == [False, True]
        for close in closes:
            winners = {w["item_id"]: w["winner_id"] for w in close["winners"]}
            assert winners == {ended_early: users["bob"], still_open: users["alice"]}

        async with async_session_factory() as db:
            won = (
                await db.execute(
                    text("""
                        SELECT item_id, user_id, COUNT(*) AS n FROM notifications
                        WHERE type = 'AUCTION_WON' AND item_id IN (:a, :b, :c)
                        GROUP BY item_id, user_id
                    """),
                    {"a": ended_early, "b": still_open, "c": no_bids},
                )
            ).fetchall()
            flags = (
                await db.execute(
                    text("SELECT id, winner_notified FROM auction_items WHERE auction_id = :id"),
                    {"id": auction_id},
                )
            ).fetchall()

        assert {(r.item_id, r.user_id): r.n for r in won} == {
            (ended_early, users["bob"]): 1,
            (still_open, users["alice"]): 1,
        }
        assert {r.id: r.winner_notified for r in flags} == {
            ended_early: True,
            still_open: True,
            no_bids: False,
        }


# ---------------------------------------------------------------------------
# TestDiscussionFlow
# ---------------------------------------------------------------------------


class TestDiscussionFlow:
    async def test_thread_edit_and_cascade_delete(self, client: AsyncClient) -> None:
        users = await _create_users("owner", "alice", "bob")
        auction_id = await _create_auction(client, users["owner"], [users["alice"], users["bob"]])
        item_id = await _create_item(client, auction_id, users["owner"])
        base = f"/api/v1/auctions/{auction_id}/items/{item_id}/discussions"

        resp = await client.post(base, json={"content": "Still boxed?"}, headers=_auth(users["alice"]))
        assert resp.status_code == 201
        post = resp.json()["data"]
        assert post["author_name"] == "Alice"
        assert post["is_edited"] is False

        resp = await client.post(
            base, json={"content": "Yes", "parent_id": post["id"]}, headers=_auth(users["owner"])
        )
        assert resp.status_code == 201

        resp = await client.patch(
            f"{base}/{post['id']}", json={"content": "Still in the box?"}, headers=_auth(users["alice"])
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["is_edited"] is True

        resp = await client.get(base, headers=_auth(users["bob"]))
        [thread] = resp.json()["data"]["discussions"]
        assert thread["content"] == "Still in the box?"
        assert [r["content"] for r in thread["replies"]] == ["Yes"]

        resp = await client.delete(f"{base}/{post['id']}", headers=_auth(users["owner"]))
        assert resp.status_code == 200
        resp = await client.get(base, headers=_auth(users["bob"]))
        assert resp.json()["data"]["discussions"] == []
