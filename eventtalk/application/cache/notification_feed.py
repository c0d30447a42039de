"""Notification feed cache for one recipient.

Holds a page-sized window of the recipient's notifications, newest first,
alongside counters that describe the whole feed. Because only part of the
feed is loaded, the counters are never recomputed from the loaded items:
they are overwritten by authoritative server counts, or moved by one for
each concrete event (push insert, read, delete).
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any, Optional

import logfire
from pydantic import ValidationError as PydanticValidationError

from eventtalk.domain.error import DomainError, ReconciliationConflict
from eventtalk.domain.gateway import NotificationGateway
from eventtalk.domain.model import Actor, Notification
from eventtalk.domain.model.common import utcnow
from eventtalk.domain.service import AccessPolicy
from eventtalk.domain.value import (
    NotificationId,
    NotificationInserted,
    Subscription,
    UserId,
)

from .pagination import PageCursor
from .reconciliation import ReconcilingCache, index_of, merge_by_id

NotificationCallback = Callable[[Notification], None]


def insert_newest_first(items: list[Notification], notification: Notification) -> None:
    """Insert keeping descending created_at order; ties go first."""
    for i, item in enumerate(items):
        if item.created_at <= notification.created_at:
            items.insert(i, notification)
            return
    items.append(notification)


class NotificationFeedCache(ReconcilingCache):
    """Client-side copy of a recipient's notification feed."""

    def __init__(
        self,
        gateway: NotificationGateway,
        recipient_id: UserId,
        *,
        actor: Optional[Actor] = None,
        access_policy: Optional[AccessPolicy] = None,
        page_size: int = 20,
        recent_limit: int = 5,
        timeout: Optional[float] = None,
        on_new_notification: Optional[NotificationCallback] = None,
    ) -> None:
        """Initialize an empty feed cache.

        Args:
            gateway: Remote notification gateway
            recipient_id: Owner of the feed
            actor: Signed-in user; mutations require it to be the recipient
            access_policy: Capability checks (default policy if omitted)
            page_size: Notifications per page
            recent_limit: Default size of the ``recent`` listing
            timeout: Upper bound in seconds for each remote call
            on_new_notification: Called once per distinct pushed notification
        """
        super().__init__(access_policy or AccessPolicy(), timeout)
        self.gateway = gateway
        self.recipient_id = recipient_id
        self.actor = actor
        self.recent_limit = recent_limit
        self.on_new_notification = on_new_notification

        self.unread_count = 0
        self.total = 0
        self.error: Optional[str] = None
        self.last_checked_at: Optional[datetime] = None

        self._items: list[Notification] = []
        self._cursor = PageCursor(page_size)
        self._loading = False
        self._load_generation = 0
        self._reading: set[NotificationId] = set()
        self._deleting: set[NotificationId] = set()
        self._marking_all = False
        self._subscription: Optional[Subscription] = None
        # Ids merged from the push channel; redeliveries are dropped
        self._pushed: set[NotificationId] = set()
        self._ingesting: set[NotificationId] = set()
        # Pushed while a load was in flight; a reset page may predate them
        self._pushed_during_load: set[NotificationId] = set()

    # Read-only state

    @property
    def items(self) -> list[Notification]:
        return list(self._items)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def has_more(self) -> bool:
        return self._cursor.has_more

    @property
    def marking_all(self) -> bool:
        return self._marking_all

    @property
    def subscription(self) -> Optional[Subscription]:
        return self._subscription

    def is_reading(self, notification_id: NotificationId) -> bool:
        return notification_id in self._reading

    def is_deleting(self, notification_id: NotificationId) -> bool:
        return notification_id in self._deleting

    def get(self, notification_id: NotificationId) -> Optional[Notification]:
        i = index_of(self._items, notification_id)
        return self._items[i] if i is not None else None

    # Loading

    async def load(self, reset: bool = False) -> None:
        """Fetch the next page of notifications, or the first page on reset.

        Same contract as CommentThreadCache.load_roots. ``total`` is taken
        from the server response.
        """
        if self._closed or (self._loading and not reset):
            return

        self._load_generation += 1
        generation = self._load_generation
        page_index = self._cursor.start(reset)
        requested_at = utcnow()
        self._loading = True
        self._pushed_during_load.clear()
        self.error = None

        with logfire.span(
            "notification_feed.load",
            recipient_id=str(self.recipient_id),
            page=page_index,
            reset=reset,
        ):
            try:
                page = await self._call(
                    "load notifications",
                    self.gateway.list_notifications(
                        self.recipient_id,
                        limit=self._cursor.page_size,
                        offset=self._cursor.offset_of(page_index),
                    ),
                )
            except DomainError as e:
                logfire.error(
                    "Failed to load notifications",
                    recipient_id=str(self.recipient_id),
                    error=str(e),
                )
                if self._is_current_load(generation):
                    self.error = str(e)
                return
            finally:
                # Cleared on cancellation and unexpected errors too
                if generation == self._load_generation:
                    self._loading = False

            if not self._is_current_load(generation):
                logfire.info(
                    "Discarding superseded notification page",
                    recipient_id=str(self.recipient_id),
                    page=page_index,
                )
                return

            base = [] if reset else self._items
            carried = [n for n in self._items if n.id in self._pushed_during_load]
            self._items = merge_by_id(base, page.items, skip=self._tombstones)
            self.total = page.total
            for notification in carried:
                if index_of(self._items, notification.id) is None:
                    insert_newest_first(self._items, notification)
                    self.total += 1
            self._pushed_during_load.clear()
            self._cursor.complete(page_index, len(page.items))
            if reset:
                self.last_checked_at = requested_at
            logfire.info(
                "Notifications loaded",
                recipient_id=str(self.recipient_id),
                count=len(page.items),
                total=page.total,
            )

    async def load_more(self) -> None:
        if self._loading or not self._cursor.has_more:
            return
        await self.load()

    async def refresh(self) -> None:
        """Reload the first page and the unread counter."""
        await self.load(reset=True)
        await self.refresh_unread_count()

    def _is_current_load(self, generation: int) -> bool:
        return not self._closed and generation == self._load_generation

    async def refresh_unread_count(self) -> None:
        """Overwrite the unread counter with the server's count.

        Works without any page loaded. Failures are logged and leave the
        counter as it was.
        """
        if self._closed:
            return
        with logfire.span(
            "notification_feed.refresh_unread_count",
            recipient_id=str(self.recipient_id),
        ):
            try:
                count = await self._call(
                    "count unread notifications",
                    self.gateway.count_unread(self.recipient_id),
                )
            except DomainError as e:
                logfire.error(
                    "Failed to refresh unread count",
                    recipient_id=str(self.recipient_id),
                    error=str(e),
                )
                return
            if self._closed:
                return
            self.unread_count = count

    async def recent(self, limit: Optional[int] = None) -> list[Notification]:
        """Newest notifications for a dropdown preview.

        Does not touch the cached feed. Returns an empty list on failure.
        """
        try:
            page = await self._call(
                "load recent notifications",
                self.gateway.list_notifications(
                    self.recipient_id, limit=limit or self.recent_limit, offset=0
                ),
            )
        except DomainError as e:
            logfire.error(
                "Failed to load recent notifications",
                recipient_id=str(self.recipient_id),
                error=str(e),
            )
            return []
        return page.items

    async def has_new_since(self, since: Optional[datetime] = None) -> bool:
        """Whether unread notifications arrived after ``since``.

        Defaults to the time of the last reset load. Returns False on failure.
        """
        since = since or self.last_checked_at
        if since is None:
            return self.unread_count > 0
        try:
            return await self._call(
                "check new notifications",
                self.gateway.has_unread_since(self.recipient_id, since),
            )
        except DomainError as e:
            logfire.error(
                "Failed to check for new notifications",
                recipient_id=str(self.recipient_id),
                error=str(e),
            )
            return False

    # Mutations

    async def mark_read(self, notification_id: NotificationId) -> bool:
        """Mark one notification read.

        The local flip and counter decrement happen before the remote call
        and are kept if it fails: the call is idempotent and can simply be
        retried.

        Returns:
            True when the notification is (now) read, False if a read of it is
            already in flight

        Raises:
            ValidationError: If nobody is signed in
            AuthorizationError: If the actor is not the recipient
            RemoteError: If the backend call fails
        """
        self.access_policy.ensure_recipient(
            self.actor, self.recipient_id, "mark notifications read"
        )
        if notification_id in self._reading:
            return False

        i = index_of(self._items, notification_id)
        loaded = i is not None
        if loaded:
            if self._items[i].is_read:
                return True
            self._items[i] = self._items[i].read()
            self.unread_count = max(0, self.unread_count - 1)

        with (
            self._pending(self._reading, notification_id),
            logfire.span(
                "notification_feed.mark_read", notification_id=str(notification_id)
            ),
        ):
            try:
                await self._call(
                    "mark notification read", self.gateway.mark_read(notification_id)
                )
            except DomainError as e:
                logfire.error(
                    "Failed to mark notification read",
                    notification_id=str(notification_id),
                    error=str(e),
                )
                raise

        if not loaded:
            # Unknown locally whether it was unread; ask the server
            await self.refresh_unread_count()
        return True

    async def mark_all_read(self) -> bool:
        """Mark every notification read with one bulk remote call.

        Rolls back the local flips and the counter if the call fails.

        Returns:
            True on success, False if a bulk read is already in flight

        Raises:
            ValidationError: If nobody is signed in
            AuthorizationError: If the actor is not the recipient
            RemoteError: If the backend call fails
        """
        self.access_policy.ensure_recipient(
            self.actor, self.recipient_id, "mark notifications read"
        )
        if self._marking_all:
            return False

        flipped = {n.id for n in self._items if not n.is_read}
        cleared = self.unread_count
        self._items = [n.read() for n in self._items]
        self.unread_count = 0

        self._marking_all = True
        try:
            with logfire.span(
                "notification_feed.mark_all_read",
                recipient_id=str(self.recipient_id),
                flipped=len(flipped),
            ):
                await self._call(
                    "mark all notifications read",
                    self.gateway.mark_all_read(self.recipient_id),
                )
        except DomainError as e:
            logfire.error(
                "Failed to mark all notifications read",
                recipient_id=str(self.recipient_id),
                error=str(e),
            )
            if not self._closed:
                self._restore_unread(flipped, cleared)
            raise
        finally:
            self._marking_all = False

        logfire.info(
            "All notifications marked read", recipient_id=str(self.recipient_id)
        )
        return True

    def _restore_unread(self, flipped: set[NotificationId], cleared: int) -> None:
        """Undo a failed bulk read for the items still held.

        Flipped items deleted meanwhile stay gone and are not counted again;
        unread notifications outside the loaded window are restored as is.
        """
        restored = 0
        items = []
        for n in self._items:
            if n.id in flipped and n.is_read:
                items.append(n.model_copy(update={"is_read": False}))
                restored += 1
            else:
                items.append(n)
        self._items = items
        self.unread_count += max(0, cleared - len(flipped)) + restored

    async def delete(self, notification_id: NotificationId) -> bool:
        """Delete a notification.

        Removed locally before the remote call; restored if it fails.

        Returns:
            True on success, False if a delete of it is already in flight

        Raises:
            ValidationError: If nobody is signed in
            AuthorizationError: If the actor is not the recipient
            RemoteError: If the backend call fails
        """
        self.access_policy.ensure_recipient(
            self.actor, self.recipient_id, "delete notifications"
        )
        if notification_id in self._deleting:
            return False

        i = index_of(self._items, notification_id)
        removed = self._items.pop(i) if i is not None else None
        unread_decremented = (
            removed is not None and not removed.is_read and self.unread_count > 0
        )
        # Unknown ids may not exist; the next load brings the server total
        total_decremented = removed is not None and self.total > 0
        if unread_decremented:
            self.unread_count -= 1
        if total_decremented:
            self.total -= 1
        self._tombstones.add(notification_id)

        with (
            self._pending(self._deleting, notification_id),
            logfire.span(
                "notification_feed.delete", notification_id=str(notification_id)
            ),
        ):
            try:
                await self._call(
                    "delete notification",
                    self.gateway.delete_notification(notification_id),
                )
            except DomainError as e:
                logfire.error(
                    "Failed to delete notification",
                    notification_id=str(notification_id),
                    error=str(e),
                )
                if not self._closed:
                    self._tombstones.discard(notification_id)
                    if removed is not None and self.get(notification_id) is None:
                        insert_newest_first(self._items, removed)
                    if unread_decremented:
                        self.unread_count += 1
                    if total_decremented:
                        self.total += 1
                raise

        if removed is None:
            await self.refresh_unread_count()
        return True

    # Push channel

    async def ingest_push(self, raw: dict[str, Any]) -> Optional[Notification]:
        """Merge a pushed "notification inserted" event.

        The payload may be partial, so the full record is fetched first.
        Redeliveries and records already loaded by a page are ignored;
        records that cannot be fetched are dropped as conflicts.

        Returns:
            The merged notification, or None if nothing was merged
        """
        if self._closed:
            return None

        with logfire.span(
            "notification_feed.ingest_push", recipient_id=str(self.recipient_id)
        ):
            try:
                event = NotificationInserted.model_validate(raw)
            except PydanticValidationError:
                self._ignore(
                    ReconciliationConflict(
                        "notification", str(raw.get("id")), "malformed payload"
                    )
                )
                return None

            notification_id = event.id
            if (
                event.recipient_id is not None
                and event.recipient_id != self.recipient_id
            ):
                self._ignore(
                    ReconciliationConflict(
                        "notification", str(notification_id), "other recipient"
                    )
                )
                return None
            if self._already_merged(notification_id) or (
                notification_id in self._ingesting
            ):
                logfire.info(
                    "Duplicate notification push ignored",
                    notification_id=str(notification_id),
                )
                return None

            with self._pending(self._ingesting, notification_id):
                try:
                    notification = await self._call(
                        "fetch pushed notification",
                        self.gateway.get_notification(notification_id),
                    )
                except DomainError as e:
                    self._ignore(
                        ReconciliationConflict(
                            "notification", str(notification_id), str(e)
                        )
                    )
                    return None

            if notification is None:
                self._ignore(
                    ReconciliationConflict(
                        "notification", str(notification_id), "no longer exists"
                    )
                )
                return None
            if notification.recipient_id != self.recipient_id:
                self._ignore(
                    ReconciliationConflict(
                        "notification", str(notification_id), "other recipient"
                    )
                )
                return None
            # A page load may have delivered it while we were fetching
            if self._closed or self._already_merged(notification_id):
                return None

            self._pushed.add(notification_id)
            if self._loading:
                self._pushed_during_load.add(notification_id)
            insert_newest_first(self._items, notification)
            if not notification.is_read:
                self.unread_count += 1
            self.total += 1
            logfire.info(
                "Notification received",
                notification_id=str(notification_id),
                kind=notification.kind.value,
                unread_count=self.unread_count,
            )

        if self.on_new_notification:
            self.on_new_notification(notification)
        return notification

    def _already_merged(self, notification_id: NotificationId) -> bool:
        return (
            notification_id in self._pushed
            or notification_id in self._tombstones
            or index_of(self._items, notification_id) is not None
        )

    def _ignore(self, conflict: ReconciliationConflict) -> None:
        logfire.warn(str(conflict), notification_id=conflict.identifier)

    async def subscribe(self) -> Optional[Subscription]:
        """Start merging pushed inserts for the recipient.

        Any previous subscription of this feed is torn down first, so at
        most one is ever live.

        Returns:
            The new subscription, or None if the cache was closed meanwhile
        """
        if self._closed:
            return None
        await self.unsubscribe()

        with logfire.span(
            "notification_feed.subscribe", recipient_id=str(self.recipient_id)
        ):
            subscription = await self._call(
                "subscribe to notifications",
                self.gateway.subscribe(
                    self.recipient_id, self._handle_insert, self._handle_push_error
                ),
            )

        if self._closed:
            await self.gateway.unsubscribe(subscription)
            return None
        # A concurrent subscribe finished first; keep only the newest
        if self._subscription is not None:
            await self.gateway.unsubscribe(self._subscription)
        self._subscription = subscription
        logfire.info(
            "Subscribed to notifications",
            recipient_id=str(self.recipient_id),
            subscription_id=str(subscription.id),
        )
        return subscription

    async def unsubscribe(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            await self.gateway.unsubscribe(subscription)
            logfire.info(
                "Unsubscribed from notifications",
                recipient_id=str(self.recipient_id),
                subscription_id=str(subscription.id),
            )

    async def _handle_insert(self, raw: dict[str, Any]) -> None:
        await self.ingest_push(raw)

    def _handle_push_error(self, error: BaseException) -> None:
        logfire.error(
            "Notification subscription error",
            recipient_id=str(self.recipient_id),
            error=str(error),
        )

    async def _on_close(self) -> None:
        await self.unsubscribe()
