"""Domain value objects for eventtalk.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from eventtalk.domain.value.common import RootValueObject, ValueObject
from eventtalk.domain.value.identifiers import (
    CommentId,
    EventId,
    NotificationId,
    SubscriptionId,
    UserId,
)

CONTENT_MAX_LENGTH = 2000


class OrderField(str, Enum):
    """Column a comment listing is ordered by."""

    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class OrderDirection(str, Enum):
    """Sort direction of a listing."""

    ASC = "asc"
    DESC = "desc"

    @property
    def ascending(self) -> bool:
        return self is OrderDirection.ASC


class NotificationKind(str, Enum):
    """Why a notification was raised."""

    REPLY = "reply"
    MENTION = "mention"


class Role(str, Enum):
    """Profile role of an actor.

    The backend stores both spellings of the administrator role, and either
    one grants moderation rights.
    """

    USER = "user"
    ADMIN = "admin"
    ADMINISTRATOR = "Administrator"

    @property
    def can_moderate(self) -> bool:
        """Whether this role may edit or delete other people's comments."""
        return self in (Role.ADMIN, Role.ADMINISTRATOR)


class CommentContent(RootValueObject[str]):
    """Comment body.

    Leading and trailing whitespace is stripped; what remains must be
    1-2000 characters.
    """

    @field_validator("root")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Strip and validate comment length."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Comment cannot be empty")
        if len(stripped) > CONTENT_MAX_LENGTH:
            raise ValueError(
                f"Comment is too long (maximum {CONTENT_MAX_LENGTH} characters)"
            )
        return stripped


class Quote(ValueObject):
    """Fragment of another comment quoted in a new comment."""

    text: str = Field(min_length=1)
    comment_id: CommentId


class CommentDraft(ValueObject):
    """Everything the backend needs to create a comment.

    The author is not part of the draft: the backend takes it from the
    signed-in session.
    """

    event_id: EventId
    content: CommentContent
    parent_comment_id: Optional[CommentId] = None
    quote: Optional[Quote] = None


class Subscription(ValueObject):
    """Handle for a live push subscription."""

    id: SubscriptionId
    recipient_id: UserId


class NotificationInserted(ValueObject):
    """Payload of a "notification inserted" push event.

    The real-time channel may deliver only some columns of the new row, so
    everything except the id is optional and the full record has to be
    fetched before it is merged.
    """

    id: NotificationId
    recipient_id: Optional[UserId] = None
    comment_id: Optional[CommentId] = None
    event_id: Optional[EventId] = None
    kind: Optional[NotificationKind] = None
