"""Shared in-memory backend state for the in-memory gateways."""

from typing import Optional
from uuid import uuid4

import logfire

from eventtalk.adapter.push import PushBroker
from eventtalk.domain.error import AuthorizationError
from eventtalk.domain.model import Actor, Comment, Notification
from eventtalk.domain.value import (
    CommentId,
    EventId,
    NotificationId,
    NotificationKind,
    UserId,
)


class InMemoryStore:
    """Tables, session and push channel of a fake backend.

    Both in-memory gateways share one store, so a comment created through
    the comment gateway raises notifications visible through the
    notification gateway, just like the hosted backend's trigger.
    """

    def __init__(self, broker: PushBroker | None = None) -> None:
        self.comments: dict[CommentId, Comment] = {}
        self.notifications: dict[NotificationId, Notification] = {}
        self.profiles: dict[UserId, Actor] = {}
        self.event_titles: dict[EventId, str] = {}
        self.broker = broker or PushBroker()
        self.session: Optional[Actor] = None

    def add_profile(self, actor: Actor) -> Actor:
        self.profiles[actor.id] = actor
        return actor

    def sign_in(self, actor: Actor) -> None:
        self.add_profile(actor)
        self.session = actor

    def sign_out(self) -> None:
        self.session = None

    def require_session(self, action: str) -> Actor:
        """Return the signed-in actor.

        Raises:
            AuthorizationError: If nobody is signed in
        """
        if self.session is None:
            raise AuthorizationError(action)
        return self.session

    def with_author(self, comment: Comment) -> Comment:
        """Fill the profile join fields of a comment."""
        profile = self.profiles.get(comment.author_id)
        if profile is None:
            return comment
        return comment.model_copy(
            update={
                "author_name": profile.name,
                "author_role": profile.role.value,
            }
        )

    def with_joins(self, notification: Notification) -> Notification:
        """Fill the sender, comment and event join fields of a notification."""
        sender = self.profiles.get(notification.sender_id)
        comment = self.comments.get(notification.comment_id)
        return notification.model_copy(
            update={
                "sender_name": sender.name if sender else None,
                "comment_content": comment.content if comment else None,
                "event_title": self.event_titles.get(notification.event_id),
            }
        )

    async def insert_notification(self, notification: Notification) -> Notification:
        """Store a notification and push it to the recipient's subscribers.

        The pushed payload only carries the id and the recipient, like the
        real-time channel does.
        """
        self.notifications[notification.id] = notification
        await self.broker.publish(
            notification.recipient_id,
            {
                "id": str(notification.id),
                "recipient_id": str(notification.recipient_id),
            },
        )
        return notification

    async def notify_about(self, comment: Comment) -> list[Notification]:
        """Raise the reply and mention notifications a new comment causes.

        Nobody is notified about their own comment, and a reply that also
        quotes the parent only raises the reply notification.
        """
        raised: list[Notification] = []
        targets: list[tuple[CommentId, NotificationKind]] = []
        if comment.parent_comment_id is not None:
            targets.append((comment.parent_comment_id, NotificationKind.REPLY))
        if comment.quoted_comment_id is not None:
            targets.append((comment.quoted_comment_id, NotificationKind.MENTION))

        notified: set[UserId] = set()
        for target_id, kind in targets:
            target = self.comments.get(target_id)
            if target is None:
                continue
            recipient = target.author_id
            if recipient == comment.author_id or recipient in notified:
                continue
            notified.add(recipient)
            notification = Notification(
                id=NotificationId(uuid4()),
                recipient_id=recipient,
                sender_id=comment.author_id,
                comment_id=comment.id,
                event_id=comment.event_id,
                kind=kind,
                created_at=comment.created_at,
            )
            raised.append(await self.insert_notification(notification))
            logfire.info(
                "Notification raised",
                notification_id=str(notification.id),
                kind=kind.value,
                recipient_id=str(recipient),
            )
        return raised
