"""Notification entity.

Notifications are raised by the backend when someone replies to or quotes
a user's comment. The recipient can only read or delete them.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from eventtalk.domain.model.common import DomainModel, utcnow
from eventtalk.domain.value import (
    CommentId,
    EventId,
    NotificationId,
    NotificationKind,
    UserId,
)


class Notification(DomainModel):
    """Reply or mention notification for one recipient.

    is_read only ever goes from False to True.
    """

    id: NotificationId
    recipient_id: UserId
    sender_id: UserId
    comment_id: CommentId
    event_id: EventId
    kind: NotificationKind
    is_read: bool = False
    created_at: datetime = Field(default_factory=utcnow)

    # Filled from joins when the backend provides them
    sender_name: Optional[str] = None
    sender_avatar: Optional[str] = None
    comment_content: Optional[str] = None
    event_title: Optional[str] = None

    def read(self) -> "Notification":
        """Return a copy marked as read."""
        if self.is_read:
            return self
        return self.model_copy(update={"is_read": True})
