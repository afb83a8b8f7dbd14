"""SQLAlchemy ORM model for the users table.

Rows are owned by the external auth service; this core only reads them to
resolve identity, display names and email preferences.
Table is created by Alembic migration: alembic/versions/002_create_users.py
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, text
from sqlalchemy.orm import Mapped, mapped_column

from src.au_common.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    name: Mapped[str | None] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    email_on_outbid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    email_on_new_item: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("NOW()")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("NOW()")
    )

    @property
    def display_name(self) -> str:
        return self.name or self.email.split("@")[0]
