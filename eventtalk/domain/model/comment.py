"""Comment entity.

Comments belong to a discussion context (an event). A comment with a
parent_comment_id is a reply; replies are fetched per parent on demand,
so the cache never materializes a full recursive tree.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from eventtalk.domain.model.common import DomainModel, utcnow
from eventtalk.domain.value import CONTENT_MAX_LENGTH, CommentId, EventId, UserId


class Comment(DomainModel):
    """Comment on an event or reply to another comment.

    Content is written by the author once; afterwards only moderators may
    edit it, which sets is_edited and edited_at. Quotes are immutable.
    """

    id: CommentId
    event_id: EventId
    author_id: UserId
    content: str = Field(min_length=1, max_length=CONTENT_MAX_LENGTH)
    parent_comment_id: Optional[CommentId] = None
    quoted_text: Optional[str] = None
    quoted_comment_id: Optional[CommentId] = None
    is_edited: bool = False
    edited_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # Filled from profile joins when the backend provides them
    author_name: Optional[str] = None
    author_avatar: Optional[str] = None
    author_role: Optional[str] = None

    @property
    def is_reply(self) -> bool:
        return self.parent_comment_id is not None

    def edited(self, content: str, at: datetime | None = None) -> "Comment":
        """Return a copy carrying moderator-edited content."""
        at = at or utcnow()
        return self.model_copy(
            update={
                "content": content,
                "is_edited": True,
                "edited_at": at,
                "updated_at": at,
            }
        )
