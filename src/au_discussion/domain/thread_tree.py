"""Discussion threading and content rules.

Posts are stored flat with an optional ``parent_id``. ``build_threads`` turns
one item's posts into a tree: top-level posts in the requested order, replies
under their parent oldest first, at any depth.
"""

from src.au_common.errors import ValidationError
from src.au_discussion.domain.models import Discussion, DiscussionOrder, DiscussionThread

MAX_CONTENT_LENGTH = 2000


def normalize_content(content: str) -> str:
    """Strip surrounding whitespace and enforce 1..MAX_CONTENT_LENGTH characters."""
    text = content.strip()
    if not text:
        raise ValidationError("Discussion cannot be empty", "EMPTY_DISCUSSION")
    if len(text) > MAX_CONTENT_LENGTH:
        raise ValidationError(
            f"Discussion cannot exceed {MAX_CONTENT_LENGTH} characters",
            "DISCUSSION_TOO_LONG",
            {"max_length": MAX_CONTENT_LENGTH},
        )
    return text


def build_threads(
    discussions: list[Discussion], order: DiscussionOrder = DiscussionOrder.NEWEST
) -> list[DiscussionThread]:
    chronological = sorted(discussions, key=lambda d: (d.created_at, d.id))
    nodes = {d.id: DiscussionThread(discussion=d) for d in chronological}

    top_level: list[DiscussionThread] = []
    for d in chronological:
        node = nodes[d.id]
        if d.parent_id is None:
            top_level.append(node)
        elif d.parent_id in nodes:
            nodes[d.parent_id].replies.append(node)
        # a reply whose parent is gone is dropped with it

    if order == DiscussionOrder.NEWEST:
        top_level.reverse()
    return top_level
