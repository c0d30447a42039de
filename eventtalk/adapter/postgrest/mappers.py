"""Mappers for converting between PostgREST rows and domain models.

Rows arrive as JSON objects; embedded resources (profile, sender, comment,
event) are nested objects or null when the join found nothing.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from eventtalk.domain.model import Comment, Notification
from eventtalk.domain.value import (
    CommentDraft,
    CommentId,
    EventId,
    NotificationId,
    NotificationKind,
    UserId,
)

COMMENT_SELECT = "*,profiles:user_id(name,avatar,role)"
NOTIFICATION_SELECT = (
    "*,sender:sender_user_id(name,avatar),"
    "comment:comment_id(content),"
    "event:event_id(id,title)"
)


def _uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def _optional_uuid(value: Any) -> Optional[UUID]:
    return None if value is None else _uuid(value)


def _embedded(row: Dict[str, Any], name: str) -> Dict[str, Any]:
    return row.get(name) or {}


def row_to_comment(row: Dict[str, Any]) -> Comment:
    """Convert an event_comments row to a Comment domain model.

    Args:
        row: Row as returned by PostgREST, optionally with the profile join

    Returns:
        Comment domain model
    """
    profile = _embedded(row, "profiles")
    parent_id = _optional_uuid(row.get("parent_comment_id"))
    quoted_id = _optional_uuid(row.get("quoted_comment_id"))
    return Comment(
        id=CommentId(_uuid(row["id"])),
        event_id=EventId(_uuid(row["event_id"])),
        author_id=UserId(_uuid(row["user_id"])),
        content=row["content"],
        parent_comment_id=CommentId(parent_id) if parent_id else None,
        quoted_text=row.get("quoted_text"),
        quoted_comment_id=CommentId(quoted_id) if quoted_id else None,
        is_edited=row.get("is_edited") or False,
        edited_at=row.get("edited_at"),
        created_at=row["created_at"],
        updated_at=row.get("updated_at") or row["created_at"],
        author_name=profile.get("name"),
        author_avatar=profile.get("avatar"),
        author_role=profile.get("role"),
    )


def draft_to_row(draft: CommentDraft, author_id: str) -> Dict[str, Any]:
    """Convert a CommentDraft to an event_comments insert payload.

    Args:
        draft: Validated comment draft
        author_id: Id of the signed-in user

    Returns:
        Dict suitable for insertion
    """
    return {
        "event_id": str(draft.event_id),
        "user_id": author_id,
        "content": draft.content.root,
        "parent_comment_id": (
            str(draft.parent_comment_id) if draft.parent_comment_id else None
        ),
        "quoted_text": draft.quote.text if draft.quote else None,
        "quoted_comment_id": str(draft.quote.comment_id) if draft.quote else None,
    }


def row_to_notification(row: Dict[str, Any]) -> Notification:
    """Convert a comment_notifications row to a Notification domain model.

    Args:
        row: Row as returned by PostgREST, optionally with the sender,
            comment and event joins

    Returns:
        Notification domain model
    """
    sender = _embedded(row, "sender")
    comment = _embedded(row, "comment")
    event = _embedded(row, "event")
    return Notification(
        id=NotificationId(_uuid(row["id"])),
        recipient_id=UserId(_uuid(row["recipient_user_id"])),
        sender_id=UserId(_uuid(row["sender_user_id"])),
        comment_id=CommentId(_uuid(row["comment_id"])),
        event_id=EventId(_uuid(row["event_id"])),
        kind=NotificationKind(row["notification_type"]),
        is_read=row.get("is_read") or False,
        created_at=row["created_at"],
        sender_name=sender.get("name"),
        sender_avatar=sender.get("avatar"),
        comment_content=comment.get("content"),
        event_title=event.get("title"),
    )
