"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from eventtalk.config import (
    CommentSettings,
    GatewaySettings,
    NotificationSettings,
    Settings,
)
from eventtalk.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    """

    scope = Scope.APP

    @provide
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide
    def provide_gateway_settings(self, settings: Settings) -> GatewaySettings:
        return settings.gateway

    @provide
    def provide_comment_settings(self, settings: Settings) -> CommentSettings:
        return settings.comments

    @provide
    def provide_notification_settings(
        self, settings: Settings
    ) -> NotificationSettings:
        return settings.notifications
