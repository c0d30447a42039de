"""PostgREST-backed notification gateway.

Reads and writes go to the comment_notifications table. Inserts reach
subscribers through the PushBroker that the real-time transport feeds.
"""

from datetime import datetime
from typing import Optional

from eventtalk.adapter.push import PushBroker
from eventtalk.domain.gateway import ErrorHandler, InsertHandler, NotificationGateway
from eventtalk.domain.model import Notification, Page
from eventtalk.domain.value import (
    NotificationId,
    NotificationKind,
    Subscription,
    UserId,
)

from .client import PostgrestClient
from .mappers import NOTIFICATION_SELECT, row_to_notification

TABLE = "comment_notifications"


class PostgrestNotificationGateway(NotificationGateway):
    """NotificationGateway over the comment_notifications table."""

    def __init__(self, client: PostgrestClient, broker: PushBroker) -> None:
        self.client = client
        self.broker = broker

    async def list_notifications(
        self,
        recipient_id: UserId,
        *,
        limit: int = 20,
        offset: int = 0,
        unread_only: bool = False,
        kind: Optional[NotificationKind] = None,
    ) -> Page[Notification]:
        params = {
            "select": NOTIFICATION_SELECT,
            "recipient_user_id": f"eq.{recipient_id}",
            "order": "created_at.desc",
            "limit": str(limit),
            "offset": str(offset),
        }
        if unread_only:
            params["is_read"] = "eq.false"
        if kind is not None:
            params["notification_type"] = f"eq.{kind.value}"

        rows, total = await self.client.select(
            TABLE, "load notifications", params, count=True
        )
        items = [row_to_notification(row) for row in rows]
        return Page[Notification](
            items=items, total=total if total is not None else offset + len(items)
        )

    async def get_notification(
        self, notification_id: NotificationId
    ) -> Optional[Notification]:
        rows, _ = await self.client.select(
            TABLE,
            "load notification",
            {"select": NOTIFICATION_SELECT, "id": f"eq.{notification_id}"},
        )
        return row_to_notification(rows[0]) if rows else None

    async def count_unread(self, recipient_id: UserId) -> int:
        return await self.client.count(
            TABLE,
            "count unread notifications",
            {
                "select": "id",
                "recipient_user_id": f"eq.{recipient_id}",
                "is_read": "eq.false",
            },
        )

    async def mark_read(self, notification_id: NotificationId) -> None:
        await self.client.update(
            TABLE,
            "mark notification read",
            {"id": f"eq.{notification_id}"},
            {"is_read": True},
        )

    async def mark_all_read(self, recipient_id: UserId) -> None:
        await self.client.update(
            TABLE,
            "mark all notifications read",
            {"recipient_user_id": f"eq.{recipient_id}", "is_read": "eq.false"},
            {"is_read": True},
        )

    async def delete_notification(self, notification_id: NotificationId) -> None:
        await self.client.delete(
            TABLE, "delete notification", {"id": f"eq.{notification_id}"}
        )

    async def has_unread_since(self, recipient_id: UserId, since: datetime) -> bool:
        rows, _ = await self.client.select(
            TABLE,
            "check new notifications",
            {
                "select": "id",
                "recipient_user_id": f"eq.{recipient_id}",
                "is_read": "eq.false",
                "created_at": f"gt.{since.isoformat()}",
                "limit": "1",
            },
        )
        return len(rows) > 0

    async def subscribe(
        self,
        recipient_id: UserId,
        on_insert: InsertHandler,
        on_error: ErrorHandler,
    ) -> Subscription:
        return self.broker.subscribe(recipient_id, on_insert, on_error)

    async def unsubscribe(self, subscription: Subscription) -> None:
        self.broker.unsubscribe(subscription)
