"""Unit tests for DI container wiring."""

import httpx
import pytest

from eventtalk.adapter.inmemory import InMemoryCommentGateway, InMemoryStore
from eventtalk.adapter.postgrest import (
    PostgrestCommentGateway,
    PostgrestNotificationGateway,
)
from eventtalk.adapter.push import PushBroker
from eventtalk.application.cache import (
    CommentThreadCacheFactory,
    NotificationFeedCacheFactory,
)
from eventtalk.domain.gateway import CommentGateway, NotificationGateway
from eventtalk.util.di import GatewayProvider, ProdConfigProvider, get_provider
from eventtalk.util.di.container import create_container
from tests.di import MockGatewayProvider, build_test_container


class TestGetProvider:
    """Tests for get_provider."""

    def test_concrete_provider_returned_as_is(self):
        assert get_provider(ProdConfigProvider) is ProdConfigProvider

    def test_mockable_component_selected_by_flag(self):
        assert get_provider(GatewayProvider, use_mock=True) is MockGatewayProvider
        assert get_provider(GatewayProvider).__name__ == "ProdGatewayProvider"


class TestProductionContainer:
    """Tests for the production container."""

    @pytest.mark.asyncio
    async def test_wires_postgrest_gateways(self):
        container = create_container()

        async with container() as request_container:
            comments = await request_container.get(CommentGateway)
            notifications = await request_container.get(NotificationGateway)
            feed_factory = await request_container.get(NotificationFeedCacheFactory)
            http = await request_container.get(httpx.AsyncClient)

        assert isinstance(comments, PostgrestCommentGateway)
        assert isinstance(notifications, PostgrestNotificationGateway)
        assert feed_factory.gateway is notifications
        assert notifications.broker is await container.get(PushBroker)

        await container.close()
        assert http.is_closed


class TestTestContainer:
    """Tests for build_test_container."""

    @pytest.mark.asyncio
    async def test_gateways_share_one_store_per_request(self):
        container = build_test_container()

        async with container() as first:
            store = await first.get(InMemoryStore)
            comments = await first.get(CommentGateway)
            factory = await first.get(CommentThreadCacheFactory)
            broker = await first.get(PushBroker)
        async with container() as second:
            other_store = await second.get(InMemoryStore)

        assert isinstance(comments, InMemoryCommentGateway)
        assert comments.store is store
        assert factory.gateway is comments
        assert broker is store.broker
        assert other_store is not store

        await container.close()

    def test_unknown_component_rejected(self):
        with pytest.raises(ValueError, match="Unknown components"):
            build_test_container(unmock={"database"})
