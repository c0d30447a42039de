"""Domain value objects for eventtalk."""

from eventtalk.domain.value.identifiers import (
    CommentId,
    EventId,
    NotificationId,
    SubscriptionId,
    UserId,
)
from eventtalk.domain.value.types import (
    CONTENT_MAX_LENGTH,
    CommentContent,
    CommentDraft,
    NotificationInserted,
    NotificationKind,
    OrderDirection,
    OrderField,
    Quote,
    Role,
    Subscription,
)

__all__ = [
    # Identifiers
    "UserId",
    "EventId",
    "CommentId",
    "NotificationId",
    "SubscriptionId",
    # Types
    "CONTENT_MAX_LENGTH",
    "CommentContent",
    "CommentDraft",
    "NotificationInserted",
    "NotificationKind",
    "OrderDirection",
    "OrderField",
    "Quote",
    "Role",
    "Subscription",
]
