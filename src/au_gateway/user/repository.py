"""Read-only user lookups used by notification and email handlers."""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_gateway.user.db_models import UserModel


@dataclass
class UserContact:
    id: str
    email: str
    name: str | None
    email_on_outbid: bool = True
    email_on_new_item: bool = True

    @property
    def display_name(self) -> str:
        return self.name or self.email.split("@")[0]


class UserDirectory:
    async def get_contact(self, db: AsyncSession, user_id: str) -> UserContact | None:
        result = await db.execute(select(UserModel).where(UserModel.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            return None
        return UserContact(
            id=user.id,
            email=user.email,
            name=user.name,
            email_on_outbid=user.email_on_outbid,
            email_on_new_item=user.email_on_new_item,
        )
