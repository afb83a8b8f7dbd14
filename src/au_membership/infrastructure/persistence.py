"""MembershipRepository: raw SQL persistence for members and invites."""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_common.enums import MemberRole
from src.au_membership.domain.models import Invite, Membership, MemberView

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_MEMBER_COLUMNS = "m.id, m.auction_id, m.user_id, m.role, m.invited_by_id, m.joined_at"

_GET_MEMBERSHIP_SQL = text(f"""
    SELECT {_MEMBER_COLUMNS}
    FROM auction_members m
    WHERE m.auction_id = :auction_id AND m.user_id = :user_id
""")

_GET_MEMBER_BY_ID_SQL = text(f"""
    SELECT {_MEMBER_COLUMNS}
    FROM auction_members m
    WHERE m.id = :member_id AND m.auction_id = :auction_id
""")

_LIST_MEMBERS_SQL = text(f"""
    SELECT {_MEMBER_COLUMNS}, u.email, u.name
    FROM auction_members m
    JOIN users u ON u.id = m.user_id
    WHERE m.auction_id = :auction_id
    ORDER BY CASE m.role
        WHEN 'OWNER' THEN 0 WHEN 'ADMIN' THEN 1 WHEN 'CREATOR' THEN 2 ELSE 3
    END, m.joined_at
""")

_LIST_MEMBER_USER_IDS_SQL = text("""
    SELECT user_id FROM auction_members WHERE auction_id = :auction_id
""")

# ON CONFLICT keeps the (auction_id, user_id) pair unique without a pre-check race
_INSERT_MEMBER_SQL = text("""
    INSERT INTO auction_members (id, auction_id, user_id, role, invited_by_id)
    VALUES (:id, :auction_id, :user_id, :role, :invited_by_id)
    ON CONFLICT (auction_id, user_id) DO NOTHING
    RETURNING id
""")

_UPDATE_ROLE_SQL = text("""
    UPDATE auction_members SET role = :role
    WHERE id = :member_id AND role <> 'OWNER'
""")

_DELETE_MEMBER_SQL = text("""
    DELETE FROM auction_members WHERE id = :member_id AND role <> 'OWNER'
""")

_INVITE_COLUMNS = "id, auction_id, email, role, token, sender_id, expires_at, used_at, created_at"

# Re-inviting the same address refreshes role, sender and expiry and keeps the token
_UPSERT_INVITE_SQL = text(f"""
    INSERT INTO auction_invites (id, auction_id, email, role, token, sender_id, expires_at)
    VALUES (:id, :auction_id, :email, :role, :token, :sender_id, :expires_at)
    ON CONFLICT (auction_id, email) DO UPDATE
    SET role = EXCLUDED.role,
        sender_id = EXCLUDED.sender_id,
        expires_at = EXCLUDED.expires_at,
        used_at = NULL
    RETURNING {_INVITE_COLUMNS}
""")

_GET_INVITE_BY_TOKEN_SQL = text(f"""
    SELECT {_INVITE_COLUMNS} FROM auction_invites WHERE token = :token
""")

_LIST_INVITES_SQL = text(f"""
    SELECT {_INVITE_COLUMNS} FROM auction_invites
    WHERE auction_id = :auction_id
    ORDER BY created_at DESC
""")

_MARK_INVITE_USED_SQL = text("""
    UPDATE auction_invites SET used_at = :used_at
    WHERE id = :id AND used_at IS NULL
    RETURNING id
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_membership(row: Any) -> Membership:
    return Membership(
        id=row.id,  # type: ignore[attr-defined]
        auction_id=row.auction_id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        role=MemberRole(row.role),  # type: ignore[attr-defined]
        invited_by_id=row.invited_by_id,  # type: ignore[attr-defined]
        joined_at=row.joined_at,  # type: ignore[attr-defined]
    )


def _row_to_invite(row: Any) -> Invite:
    return Invite(
        id=row.id,  # type: ignore[attr-defined]
        auction_id=row.auction_id,  # type: ignore[attr-defined]
        email=row.email,  # type: ignore[attr-defined]
        role=MemberRole(row.role),  # type: ignore[attr-defined]
        token=row.token,  # type: ignore[attr-defined]
        sender_id=row.sender_id,  # type: ignore[attr-defined]
        expires_at=row.expires_at,  # type: ignore[attr-defined]
        used_at=row.used_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MembershipRepository:
    """Concrete implementation of MembershipRepositoryProtocol using raw SQL."""

    async def get_membership(
        self, db: AsyncSession, auction_id: str, user_id: str
    ) -> Membership | None:
        result = await db.execute(
            _GET_MEMBERSHIP_SQL, {"auction_id": auction_id, "user_id": user_id}
        )
        row = result.fetchone()
        return _row_to_membership(row) if row else None

    async def get_member_by_id(
        self, db: AsyncSession, auction_id: str, member_id: str
    ) -> Membership | None:
        result = await db.execute(
            _GET_MEMBER_BY_ID_SQL, {"auction_id": auction_id, "member_id": member_id}
        )
        row = result.fetchone()
        return _row_to_membership(row) if row else None

    async def list_members(self, db: AsyncSession, auction_id: str) -> list[MemberView]:
        result = await db.execute(_LIST_MEMBERS_SQL, {"auction_id": auction_id})
        return [
            MemberView(
                membership=_row_to_membership(row),
                email=row.email,  # type: ignore[attr-defined]
                name=row.name,  # type: ignore[attr-defined]
            )
            for row in result.fetchall()
        ]

    async def list_member_user_ids(self, db: AsyncSession, auction_id: str) -> list[str]:
        result = await db.execute(_LIST_MEMBER_USER_IDS_SQL, {"auction_id": auction_id})
        return [row.user_id for row in result.fetchall()]  # type: ignore[attr-defined]

    async def add_member(self, db: AsyncSession, membership: Membership) -> bool:
        """Insert a membership. Returns False if the user is already a member."""
        result = await db.execute(
            _INSERT_MEMBER_SQL,
            {
                "id": membership.id,
                "auction_id": membership.auction_id,
                "user_id": membership.user_id,
                "role": membership.role.value,
                "invited_by_id": membership.invited_by_id,
            },
        )
        return result.fetchone() is not None

    async def update_role(self, db: AsyncSession, member_id: str, role: MemberRole) -> None:
        await db.execute(_UPDATE_ROLE_SQL, {"member_id": member_id, "role": role.value})

    async def remove_member(self, db: AsyncSession, member_id: str) -> None:
        await db.execute(_DELETE_MEMBER_SQL, {"member_id": member_id})

    async def upsert_invite(self, db: AsyncSession, invite: Invite) -> Invite:
        result = await db.execute(
            _UPSERT_INVITE_SQL,
            {
                "id": invite.id,
                "auction_id": invite.auction_id,
                "email": invite.email,
                "role": invite.role.value,
                "token": invite.token,
                "sender_id": invite.sender_id,
                "expires_at": invite.expires_at,
            },
        )
        return _row_to_invite(result.fetchone())

    async def get_invite_by_token(self, db: AsyncSession, token: str) -> Invite | None:
        result = await db.execute(_GET_INVITE_BY_TOKEN_SQL, {"token": token})
        row = result.fetchone()
        return _row_to_invite(row) if row else None

    async def list_invites(self, db: AsyncSession, auction_id: str) -> list[Invite]:
        result = await db.execute(_LIST_INVITES_SQL, {"auction_id": auction_id})
        return [_row_to_invite(row) for row in result.fetchall()]

    async def mark_invite_used(
        self, db: AsyncSession, invite_id: str, used_at: datetime
    ) -> bool:
        """Atomically claim an invite. False if someone used it first."""
        result = await db.execute(_MARK_INVITE_USED_SQL, {"id": invite_id, "used_at": used_at})
        return result.fetchone() is not None
