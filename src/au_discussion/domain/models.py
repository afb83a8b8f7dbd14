"""Domain models for au_discussion: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class DiscussionOrder(str, Enum):
    """Order of top-level posts. Replies are always oldest first."""
    NEWEST = "newest"
    OLDEST = "oldest"


@dataclass
class Discussion:
    id: str
    item_id: str
    user_id: str
    content: str
    parent_id: str | None = None       # None for a top-level post
    author_name: str | None = None     # joined from users on read
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_edited(self) -> bool:
        if self.created_at is None or self.updated_at is None:
            return False
        return self.updated_at > self.created_at


@dataclass
class DiscussionThread:
    discussion: Discussion
    replies: list["DiscussionThread"] = field(default_factory=list)


@dataclass
class ItemDiscussions:
    threads: list[DiscussionThread]
    discussions_enabled: bool
