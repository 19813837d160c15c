"""Unit tests for the history module."""
import json

import httpx
import pytest

from finnexus.conversation import Role
from finnexus.errors import HistoryError
from finnexus.history import (
    HistoryClient,
    HttpHistoryClient,
    InMemoryHistoryClient,
    create_history_client,
)


def _client(handler) -> HttpHistoryClient:
    return HttpHistoryClient("http://agent.test", transport=httpx.MockTransport(handler))


class TestHistoryClientInterface:
    """Tests for the abstract HistoryClient interface."""

    def test_client_is_abstract(self):
        """Test that HistoryClient cannot be instantiated directly."""
        with pytest.raises(TypeError):
            HistoryClient()  # type: ignore


class TestHttpHistoryClient:
    """Tests for HttpHistoryClient."""

    @pytest.mark.asyncio
    async def test_list_sessions(self):
        """Test listing sessions with a bearer header."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=[
                {
                    "id": "s-1",
                    "title": "Rates",
                    "created_at": "2024-05-01T09:00:00Z",
                    "updated_at": "2024-05-01T10:00:00Z",
                },
                {"title": "missing id"},
            ])

        async with _client(handler) as client:
            sessions = await client.list_sessions("tok")

        assert [s.id for s in sessions] == ["s-1"]
        assert sessions[0].title == "Rates"
        assert requests[0].url.path == "/api/v1/sessions"
        assert requests[0].headers["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_null_sessions_is_empty(self):
        """Test that a null body means no sessions."""
        async with _client(lambda request: httpx.Response(200, content=b"null")) as client:
            assert await client.list_sessions("tok") == []

    @pytest.mark.asyncio
    async def test_get_messages_coerces_roles(self):
        """Test that message roles are mapped onto the closed set."""
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/v1/sessions/s-1"
            return httpx.Response(200, json=[
                {"id": "1", "role": "user", "content": "hi"},
                {"id": "2", "role": "assistant", "content": "hello"},
                {"id": "3", "role": "tool", "content": "raw output"},
                "garbage",
            ])

        async with _client(handler) as client:
            messages = await client.get_messages("tok", "s-1")

        assert [m.role for m in messages] == [Role.USER, Role.ASSISTANT, Role.SYSTEM]
        assert [m.content for m in messages] == ["hi", "hello", "raw output"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [401, 404, 500])
    async def test_http_error_raises(self, status_code):
        """Test that error statuses raise HistoryError with the code."""
        async with _client(lambda request: httpx.Response(status_code)) as client:
            with pytest.raises(HistoryError) as exc_info:
                await client.list_sessions("tok")

        assert exc_info.value.status_code == status_code

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        """Test that network failures raise HistoryError."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(HistoryError, match="failed"):
                await client.get_messages("tok", "s-1")

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        """Test that a non-JSON body raises HistoryError."""
        async with _client(lambda request: httpx.Response(200, content=b"<html>")) as client:
            with pytest.raises(HistoryError, match="not valid JSON"):
                await client.list_sessions("tok")

    @pytest.mark.asyncio
    async def test_non_list_body_raises(self):
        """Test that an object body where a list is expected raises HistoryError."""
        body = json.dumps({"error": "nope"}).encode()
        async with _client(lambda request: httpx.Response(200, content=body)) as client:
            with pytest.raises(HistoryError, match="Expected a list"):
                await client.get_messages("tok", "s-1")


class TestInMemoryHistoryClient:
    """Tests for InMemoryHistoryClient."""

    @pytest.mark.asyncio
    async def test_sessions_newest_first(self):
        """Test that sessions are listed by last update."""
        client = InMemoryHistoryClient()
        client.add_message("old", "user", "first")
        client.add_message("new", "user", "second")

        sessions = await client.list_sessions("tok")

        assert [s.id for s in sessions] == ["new", "old"]
        assert sessions[0].title == "second"

    @pytest.mark.asyncio
    async def test_unknown_session_raises(self):
        """Test that fetching a missing session raises HistoryError."""
        with pytest.raises(HistoryError) as exc_info:
            await InMemoryHistoryClient().get_messages("tok", "missing")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_credentials_checked(self):
        """Test that credentials are enforced when configured."""
        client = InMemoryHistoryClient(valid_credentials={"good"})
        with pytest.raises(HistoryError):
            await client.list_sessions("bad")
        assert await client.list_sessions("good") == []

    @pytest.mark.asyncio
    async def test_returned_messages_are_copies(self):
        """Test that callers cannot alter stored history."""
        client = InMemoryHistoryClient()
        client.add_message("s", "user", "original")

        fetched = await client.get_messages("tok", "s")
        fetched[0].content = "changed"

        assert (await client.get_messages("tok", "s"))[0].content == "original"


class TestHistoryFactory:
    """Tests for history client factory."""

    def test_create_memory_client(self):
        """Test creating an in-memory client via factory."""
        assert isinstance(create_history_client("memory"), InMemoryHistoryClient)

    @pytest.mark.asyncio
    async def test_create_http_client(self):
        """Test creating an HTTP client via factory."""
        client = create_history_client("http", base_url="http://agent.test", timeout=3)
        try:
            assert isinstance(client, HttpHistoryClient)
            assert client.backend_type == "http"
        finally:
            await client.close()

    def test_http_requires_base_url(self):
        """Test that the HTTP client needs a base URL."""
        with pytest.raises(TypeError, match="base_url"):
            create_history_client("http")

    def test_unknown_backend_raises(self):
        """Test that unknown backends are rejected."""
        with pytest.raises(ValueError, match="Unsupported history backend"):
            create_history_client("postgres")
