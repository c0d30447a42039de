"""In-memory notification gateway for testing and local development."""

from datetime import datetime
from typing import Optional

from eventtalk.domain.gateway import ErrorHandler, InsertHandler, NotificationGateway
from eventtalk.domain.model import Notification, Page
from eventtalk.domain.value import (
    NotificationId,
    NotificationKind,
    Subscription,
    UserId,
)

from .store import InMemoryStore


class InMemoryNotificationGateway(NotificationGateway):
    """In-memory implementation of NotificationGateway for testing."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    def _owned_by(self, recipient_id: UserId) -> list[Notification]:
        notifications = [
            n
            for n in self.store.notifications.values()
            if n.recipient_id == recipient_id
        ]
        # Newest first; ties put the later insert first
        ranked = list(enumerate(notifications))
        ranked.sort(key=lambda pair: (pair[1].created_at, pair[0]), reverse=True)
        return [n for _, n in ranked]

    async def list_notifications(
        self,
        recipient_id: UserId,
        *,
        limit: int = 20,
        offset: int = 0,
        unread_only: bool = False,
        kind: Optional[NotificationKind] = None,
    ) -> Page[Notification]:
        """List a recipient's notifications, newest first."""
        notifications = self._owned_by(recipient_id)
        if unread_only:
            notifications = [n for n in notifications if not n.is_read]
        if kind is not None:
            notifications = [n for n in notifications if n.kind == kind]

        items = [
            self.store.with_joins(n) for n in notifications[offset : offset + limit]
        ]
        return Page[Notification](items=items, total=len(notifications))

    async def get_notification(
        self, notification_id: NotificationId
    ) -> Optional[Notification]:
        notification = self.store.notifications.get(notification_id)
        if notification is None:
            return None
        return self.store.with_joins(notification)

    async def count_unread(self, recipient_id: UserId) -> int:
        return sum(1 for n in self._owned_by(recipient_id) if not n.is_read)

    async def mark_read(self, notification_id: NotificationId) -> None:
        notification = self.store.notifications.get(notification_id)
        if notification is not None:
            self.store.notifications[notification_id] = notification.read()

    async def mark_all_read(self, recipient_id: UserId) -> None:
        for n in self._owned_by(recipient_id):
            if not n.is_read:
                self.store.notifications[n.id] = n.read()

    async def delete_notification(self, notification_id: NotificationId) -> None:
        self.store.notifications.pop(notification_id, None)

    async def has_unread_since(self, recipient_id: UserId, since: datetime) -> bool:
        return any(
            not n.is_read and n.created_at > since
            for n in self._owned_by(recipient_id)
        )

    async def subscribe(
        self,
        recipient_id: UserId,
        on_insert: InsertHandler,
        on_error: ErrorHandler,
    ) -> Subscription:
        return self.store.broker.subscribe(recipient_id, on_insert, on_error)

    async def unsubscribe(self, subscription: Subscription) -> None:
        self.store.broker.unsubscribe(subscription)
