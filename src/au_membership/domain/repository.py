"""MembershipRepository Protocol: interface contract for persistence layer."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.au_common.enums import MemberRole
from src.au_membership.domain.models import Invite, Membership, MemberView


class MembershipRepositoryProtocol(Protocol):
    async def get_membership(
        self, db: AsyncSession, auction_id: str, user_id: str
    ) -> Membership | None: ...

    async def get_member_by_id(
        self, db: AsyncSession, auction_id: str, member_id: str
    ) -> Membership | None: ...

    async def list_members(self, db: AsyncSession, auction_id: str) -> list[MemberView]: ...

    async def list_member_user_ids(self, db: AsyncSession, auction_id: str) -> list[str]: ...

    async def add_member(self, db: AsyncSession, membership: Membership) -> bool: ...

    async def update_role(self, db: AsyncSession, member_id: str, role: MemberRole) -> None: ...

    async def remove_member(self, db: AsyncSession, member_id: str) -> None: ...

    async def upsert_invite(self, db: AsyncSession, invite: Invite) -> Invite: ...

    async def get_invite_by_token(self, db: AsyncSession, token: str) -> Invite | None: ...

    async def list_invites(self, db: AsyncSession, auction_id: str) -> list[Invite]: ...

    async def mark_invite_used(
        self, db: AsyncSession, invite_id: str, used_at: datetime
    ) -> bool: ...
