"""Unit tests for the PostgREST client."""

import httpx
import pytest

from eventtalk.adapter.error import PostgrestError
from eventtalk.adapter.postgrest import PostgrestClient, parse_content_range
from eventtalk.config import GatewaySettings
from eventtalk.domain.error import AuthorizationError, RemoteError

SETTINGS = GatewaySettings(
    url="https://backend.test/",
    api_key="anon-key",
    access_token="user-token",
    timeout_seconds=5.0,
)


def _client(handler, settings=SETTINGS):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PostgrestClient(http, settings)


class TestParseContentRange:
    """Tests for parse_content_range."""

    @pytest.mark.parametrize(
        "header,expected",
        [
            ("0-19/57", 57),
            ("*/0", 0),
            ("0-4/*", None),
            ("", None),
            (None, None),
        ],
    )
    def test_parses_total(self, header, expected):
        assert parse_content_range(header) == expected


class TestPostgrestClient:
    """Tests for requests and error mapping."""

    @pytest.mark.asyncio
    async def test_select_sends_keys_and_reads_count(self):
        # Arrange
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200, json=[{"id": 1}], headers={"Content-Range": "0-0/42"}
            )

        client = _client(handler)

        # Act
        rows, total = await client.select(
            "event_comments", "load comments", {"select": "*"}, count=True
        )

        # Assert
        assert rows == [{"id": 1}]
        assert total == 42
        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/event_comments"
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["authorization"] == "Bearer user-token"
        assert request.headers["prefer"] == "count=exact"

    @pytest.mark.asyncio
    async def test_anonymous_requests_use_api_key_as_bearer(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[])

        settings = GatewaySettings(url="https://backend.test", api_key="anon-key")
        client = _client(handler, settings)

        await client.select("event_comments", "load comments", {})

        assert seen[0].headers["authorization"] == "Bearer anon-key"
        assert "prefer" not in seen[0].headers

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_rejected_credentials_raise_authorization_error(self, status):
        client = _client(lambda request: httpx.Response(status, json={}))

        with pytest.raises(AuthorizationError):
            await client.select("event_comments", "load comments", {})

    @pytest.mark.asyncio
    async def test_error_response_raises_postgrest_error(self):
        client = _client(
            lambda request: httpx.Response(400, json={"message": "bad filter"})
        )

        with pytest.raises(PostgrestError) as exc_info:
            await client.select("event_comments", "load comments", {})

        assert isinstance(exc_info.value, RemoteError)
        assert exc_info.value.status_code == 400
        assert "bad filter" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_plain_text_error_body(self):
        client = _client(lambda request: httpx.Response(502, text="upstream down"))

        with pytest.raises(PostgrestError, match="upstream down"):
            await client.delete("event_comments", "delete comment", {"id": "eq.1"})

    @pytest.mark.asyncio
    async def test_transport_failure_raises_postgrest_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(handler)

        with pytest.raises(PostgrestError, match="connection refused") as exc_info:
            await client.select("event_comments", "load comments", {})

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_timeout_raises_postgrest_error(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        client = _client(handler)

        with pytest.raises(PostgrestError, match="timed out"):
            await client.count("event_comments", "count comments", {})

    @pytest.mark.asyncio
    async def test_count_uses_head_request(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, headers={"Content-Range": "*/7"})

        client = _client(handler)

        assert await client.count("event_comments", "count", {"select": "id"}) == 7
        assert seen[0].method == "HEAD"

    @pytest.mark.asyncio
    async def test_count_without_range_header_fails(self):
        client = _client(lambda request: httpx.Response(200))

        with pytest.raises(PostgrestError):
            await client.count("event_comments", "count", {})

    @pytest.mark.asyncio
    async def test_update_without_select_returns_nothing(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(204)

        client = _client(handler)

        rows = await client.update(
            "comment_notifications", "mark read", {"id": "eq.1"}, {"is_read": True}
        )

        assert rows == []
        assert seen[0].method == "PATCH"
        assert seen[0].headers["prefer"] == "return=minimal"

    @pytest.mark.asyncio
    async def test_current_user_requires_session_token(self):
        calls = []
        settings = GatewaySettings(url="https://backend.test", api_key="anon-key")
        client = _client(lambda request: calls.append(request), settings)

        with pytest.raises(AuthorizationError):
            await client.current_user_id("create comment")

        assert calls == []

    @pytest.mark.asyncio
    async def test_current_user_reads_auth_endpoint(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"id": "user-1", "email": "a@b.c"})

        client = _client(handler)

        assert await client.current_user_id("create comment") == "user-1"
        assert seen[0].url.path == "/auth/v1/user"
