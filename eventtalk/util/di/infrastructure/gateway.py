"""Remote gateway infrastructure providers."""

from collections.abc import AsyncIterator

import httpx
import logfire
from dishka import Scope, provide

from eventtalk.adapter.postgrest import (
    PostgrestClient,
    PostgrestCommentGateway,
    PostgrestNotificationGateway,
)
from eventtalk.adapter.push import PushBroker
from eventtalk.config import GatewaySettings
from eventtalk.domain.gateway import CommentGateway, NotificationGateway
from eventtalk.util.di.base import ProviderBase


class GatewayProvider(ProviderBase):
    """Gateway component base."""

    __mock_component__ = "gateway"


class ProdGatewayProvider(GatewayProvider):
    """Production gateway provider talking to the hosted PostgREST backend."""

    __is_mock__ = False

    scope = Scope.APP

    @provide
    async def get_http_client(
        self, settings: GatewaySettings
    ) -> AsyncIterator[httpx.AsyncClient]:
        """Provide the shared HTTP client, closed with the container."""
        async with httpx.AsyncClient(timeout=settings.timeout_seconds) as client:
            yield client
        logfire.info("HTTP client closed")

    @provide
    def get_postgrest_client(
        self, http: httpx.AsyncClient, settings: GatewaySettings
    ) -> PostgrestClient:
        return PostgrestClient(http, settings)

    @provide
    def get_push_broker(self) -> PushBroker:
        """Provide the broker the real-time transport publishes into."""
        return PushBroker()

    @provide
    def get_comment_gateway(self, client: PostgrestClient) -> CommentGateway:
        return PostgrestCommentGateway(client)

    @provide
    def get_notification_gateway(
        self, client: PostgrestClient, broker: PushBroker
    ) -> NotificationGateway:
        return PostgrestNotificationGateway(client, broker)
