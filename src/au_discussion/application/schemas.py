from datetime import datetime

from pydantic import BaseModel, Field

from src.au_discussion.domain.models import Discussion, DiscussionThread, ItemDiscussions
from src.au_discussion.domain.thread_tree import MAX_CONTENT_LENGTH


class CreateDiscussionRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)
    parent_id: str | None = None


class UpdateDiscussionRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)


class DiscussionResponse(BaseModel):
    id: str
    item_id: str
    user_id: str
    author_name: str | None
    parent_id: str | None
    content: str
    is_edited: bool
    created_at: datetime | None
    updated_at: datetime | None
    replies: list["DiscussionResponse"] = []

    @classmethod
    def from_domain(cls, d: Discussion) -> "DiscussionResponse":
        return cls(
            id=d.id,
            item_id=d.item_id,
            user_id=d.user_id,
            author_name=d.author_name,
            parent_id=d.parent_id,
            content=d.content,
            is_edited=d.is_edited,
            created_at=d.created_at,
            updated_at=d.updated_at,
        )

    @classmethod
    def from_thread(cls, thread: DiscussionThread) -> "DiscussionResponse":
        resp = cls.from_domain(thread.discussion)
        resp.replies = [cls.from_thread(r) for r in thread.replies]
        return resp


class DiscussionListResponse(BaseModel):
    discussions: list[DiscussionResponse]
    discussions_enabled: bool

    @classmethod
    def from_domain(cls, board: ItemDiscussions) -> "DiscussionListResponse":
        return cls(
            discussions=[DiscussionResponse.from_thread(t) for t in board.threads],
            discussions_enabled=board.discussions_enabled,
        )
