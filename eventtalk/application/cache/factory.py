"""Factories that open caches for a discussion context or a recipient.

The DI container provides one factory of each kind; presentation code opens
a cache per event view or per signed-in user and closes it on teardown.
"""

from typing import Optional

from eventtalk.config import CommentSettings, NotificationSettings
from eventtalk.domain.gateway import CommentGateway, NotificationGateway
from eventtalk.domain.model import Actor
from eventtalk.domain.service import AccessPolicy
from eventtalk.domain.value import EventId

from .comment_thread import CommentCallback, CommentThreadCache, DeletedCallback
from .notification_feed import NotificationCallback, NotificationFeedCache


class CommentThreadCacheFactory:
    """Opens configured CommentThreadCache instances."""

    def __init__(
        self,
        gateway: CommentGateway,
        access_policy: AccessPolicy,
        settings: CommentSettings,
        timeout: Optional[float] = None,
    ) -> None:
        self.gateway = gateway
        self.access_policy = access_policy
        self.settings = settings
        self.timeout = timeout

    async def open(
        self,
        event_id: EventId,
        actor: Optional[Actor] = None,
        *,
        auto_load: bool = True,
        on_created: Optional[CommentCallback] = None,
        on_updated: Optional[CommentCallback] = None,
        on_deleted: Optional[DeletedCallback] = None,
    ) -> CommentThreadCache:
        """Open a thread cache, loading the first page unless told otherwise."""
        cache = CommentThreadCache(
            self.gateway,
            event_id,
            actor=actor,
            access_policy=self.access_policy,
            page_size=self.settings.page_size,
            replies_page_size=self.settings.replies_page_size,
            order_by=self.settings.order_by,
            order_direction=self.settings.order_direction,
            timeout=self.timeout,
            on_created=on_created,
            on_updated=on_updated,
            on_deleted=on_deleted,
        )
        if auto_load:
            await cache.load_roots(reset=True)
        return cache


class NotificationFeedCacheFactory:
    """Opens configured NotificationFeedCache instances."""

    def __init__(
        self,
        gateway: NotificationGateway,
        access_policy: AccessPolicy,
        settings: NotificationSettings,
        timeout: Optional[float] = None,
    ) -> None:
        self.gateway = gateway
        self.access_policy = access_policy
        self.settings = settings
        self.timeout = timeout

    async def open(
        self,
        actor: Actor,
        *,
        auto_load: bool = True,
        on_new_notification: Optional[NotificationCallback] = None,
    ) -> NotificationFeedCache:
        """Open the signed-in actor's feed.

        Subscribes to pushed inserts when real-time delivery is enabled,
        then loads the first page and the unread counter unless told
        otherwise.
        """
        cache = NotificationFeedCache(
            self.gateway,
            actor.id,
            actor=actor,
            access_policy=self.access_policy,
            page_size=self.settings.page_size,
            recent_limit=self.settings.recent_limit,
            timeout=self.timeout,
            on_new_notification=on_new_notification,
        )
        if self.settings.enable_realtime:
            await cache.subscribe()
        if auto_load:
            await cache.refresh()
        return cache
