"""Notification gateway interface."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, Optional

from eventtalk.domain.model.notification import Notification
from eventtalk.domain.model.page import Page
from eventtalk.domain.value import (
    NotificationId,
    NotificationKind,
    Subscription,
    UserId,
)

InsertHandler = Callable[[dict[str, Any]], Awaitable[None]]
ErrorHandler = Callable[[BaseException], None]


class NotificationGateway(ABC):
    """Remote data gateway for notifications and their push channel.

    Push delivery is at-least-once and may be out of order; consumers must
    merge by id.
    """

    @abstractmethod
    async def list_notifications(
        self,
        recipient_id: UserId,
        *,
        limit: int = 20,
        offset: int = 0,
        unread_only: bool = False,
        kind: Optional[NotificationKind] = None,
    ) -> Page[Notification]:
        """List a recipient's notifications, newest first.

        Args:
            recipient_id: Owner of the feed
            limit: Maximum number of notifications to return
            offset: Number of notifications to skip
            unread_only: Only return unread notifications
            kind: Only return notifications of this kind

        Returns:
            Page of notifications with the total row count of the query
        """
        pass

    @abstractmethod
    async def get_notification(
        self, notification_id: NotificationId
    ) -> Optional[Notification]:
        """Fetch one notification with its joined fields.

        Returns:
            The notification, or None if it no longer exists
        """
        pass

    @abstractmethod
    async def count_unread(self, recipient_id: UserId) -> int:
        """Authoritative number of unread notifications."""
        pass

    @abstractmethod
    async def mark_read(self, notification_id: NotificationId) -> None:
        """Mark one notification read. Idempotent."""
        pass

    @abstractmethod
    async def mark_all_read(self, recipient_id: UserId) -> None:
        """Mark every unread notification of the recipient read in one call."""
        pass

    @abstractmethod
    async def delete_notification(self, notification_id: NotificationId) -> None:
        """Delete one notification."""
        pass

    @abstractmethod
    async def has_unread_since(self, recipient_id: UserId, since: datetime) -> bool:
        """Whether an unread notification was created after ``since``."""
        pass

    @abstractmethod
    async def subscribe(
        self,
        recipient_id: UserId,
        on_insert: InsertHandler,
        on_error: ErrorHandler,
    ) -> Subscription:
        """Start receiving insert events for a recipient.

        Args:
            recipient_id: Recipient whose inserts are delivered
            on_insert: Awaited with the (possibly partial) inserted row
            on_error: Called when delivery or the handler fails

        Returns:
            Handle to pass to unsubscribe
        """
        pass

    @abstractmethod
    async def unsubscribe(self, subscription: Subscription) -> None:
        """Stop a subscription. Unknown handles are ignored."""
        pass
