"""Test configuration and fixtures."""

from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

import logfire

from eventtalk.domain.model import Actor, Comment, Notification
from eventtalk.domain.model.common import utcnow
from eventtalk.domain.value import (
    CommentId,
    EventId,
    NotificationId,
    NotificationKind,
    Role,
    UserId,
)

# Keep spans local and quiet during tests
logfire.configure(send_to_logfire=False, console=False)


def make_actor(role: Role = Role.USER, name: Optional[str] = None) -> Actor:
    """Build an actor with a fresh id."""
    return Actor(id=UserId(uuid4()), role=role, name=name)


def make_comment(
    event_id: EventId,
    author_id: UserId,
    content: str = "Interesting talk",
    parent_id: Optional[CommentId] = None,
    created_at: Optional[datetime] = None,
) -> Comment:
    """Build a comment, by default created now."""
    created_at = created_at or utcnow()
    return Comment(
        id=CommentId(uuid4()),
        event_id=event_id,
        author_id=author_id,
        content=content,
        parent_comment_id=parent_id,
        created_at=created_at,
        updated_at=created_at,
    )


def make_notification(
    recipient_id: UserId,
    sender_id: Optional[UserId] = None,
    is_read: bool = False,
    created_at: Optional[datetime] = None,
    kind: NotificationKind = NotificationKind.REPLY,
) -> Notification:
    """Build a notification about an unrelated comment."""
    return Notification(
        id=NotificationId(uuid4()),
        recipient_id=recipient_id,
        sender_id=sender_id or UserId(uuid4()),
        comment_id=CommentId(uuid4()),
        event_id=EventId(uuid4()),
        kind=kind,
        is_read=is_read,
        created_at=created_at or utcnow(),
    )


def minutes_ago(minutes: int) -> datetime:
    return utcnow() - timedelta(minutes=minutes)
