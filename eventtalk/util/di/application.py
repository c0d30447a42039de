"""Application layer DI providers."""

from dishka import Scope, provide

from eventtalk.application.cache import (
    CommentThreadCacheFactory,
    NotificationFeedCacheFactory,
)
from eventtalk.config import (
    CommentSettings,
    GatewaySettings,
    NotificationSettings,
)
from eventtalk.domain.gateway import CommentGateway, NotificationGateway
from eventtalk.domain.service import AccessPolicy
from eventtalk.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production cache factories provider - concrete, no mocks needed.

    Factories are REQUEST-scoped so they follow the lifecycle of the gateways
    they are built on.
    """

    scope = Scope.REQUEST

    @provide
    def get_comment_thread_cache_factory(
        self,
        gateway: CommentGateway,
        access_policy: AccessPolicy,
        settings: CommentSettings,
        gateway_settings: GatewaySettings,
    ) -> CommentThreadCacheFactory:
        """Provide the factory for per-event comment thread caches."""
        return CommentThreadCacheFactory(
            gateway=gateway,
            access_policy=access_policy,
            settings=settings,
            timeout=gateway_settings.timeout_seconds,
        )

    @provide
    def get_notification_feed_cache_factory(
        self,
        gateway: NotificationGateway,
        access_policy: AccessPolicy,
        settings: NotificationSettings,
        gateway_settings: GatewaySettings,
    ) -> NotificationFeedCacheFactory:
        """Provide the factory for per-recipient notification feed caches."""
        return NotificationFeedCacheFactory(
            gateway=gateway,
            access_policy=access_policy,
            settings=settings,
            timeout=gateway_settings.timeout_seconds,
        )
