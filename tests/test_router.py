"""
Tests for gateway/router.py - path dispatch and session-context derivation.

The transports are replaced by recorders so routing is tested without any
MCP traffic.
"""

import pytest
from starlette.responses import PlainTextResponse
from starlette.testclient import TestClient

from core.models import SessionContext
from gateway.router import Router, is_request_response_path, is_streaming_path


class RecordingTransport:
    """Answers every request with its label and remembers the contexts it saw."""

    def __init__(self, label: str):
        self.label = label
        self.contexts: list[SessionContext] = []
        self.scopes: list[dict] = []

    async def handle(self, scope, receive, send, context: SessionContext) -> None:
        self.contexts.append(context)
        self.scopes.append(scope)
        await PlainTextResponse(self.label)(scope, receive, send)


@pytest.fixture
def streaming() -> RecordingTransport:
    return RecordingTransport("streaming")


@pytest.fixture
def request_response() -> RecordingTransport:
    return RecordingTransport("request-response")


@pytest.fixture
def client(settings, streaming, request_response) -> TestClient:
    return TestClient(Router(settings, streaming=streaming, request_response=request_response))


# =============================================================================
# Path matching
# =============================================================================


class TestPathMatching:

    @pytest.mark.parametrize("path", ["/sse", "/sse/message", "/tenant/sse", "/a/b/sse"])
    def test_streaming_paths(self, path) -> None:
        assert is_streaming_path(path)

    @pytest.mark.parametrize("path", ["/", "/mcp", "/sse/other", "/ssex", "/message"])
    def test_non_streaming_paths(self, path) -> None:
        assert not is_streaming_path(path)

    def test_request_response_path_is_exact(self) -> None:
        assert is_request_response_path("/mcp")
        assert not is_request_response_path("/mcp/")
        assert not is_request_response_path("/tenant/mcp")


# =============================================================================
# Dispatch
# =============================================================================


class TestDispatch:

    @pytest.mark.parametrize("path", ["/sse", "/sse/message", "/tenant/sse"])
    def test_streaming_requests(self, client, streaming, request_response, path) -> None:
        response = client.get(path)

        assert response.status_code == 200
        assert response.text == "streaming"
        assert len(streaming.contexts) == 1
        assert request_response.contexts == []

    def test_request_response_requests(self, client, streaming, request_response) -> None:
        response = client.post("/mcp", json={})

        assert response.status_code == 200
        assert response.text == "request-response"
        assert len(request_response.contexts) == 1
        assert streaming.contexts == []

    @pytest.mark.parametrize("path", ["/", "/mcp/extra", "/health", "/sse/elsewhere"])
    def test_unknown_paths_are_not_found(self, client, streaming, request_response, path) -> None:
        response = client.get(path)

        assert response.status_code == 404
        assert response.text == "Not found"
        assert response.headers["content-type"].startswith("text/plain")
        assert streaming.contexts == []
        assert request_response.contexts == []


# =============================================================================
# Session context
# =============================================================================


class TestSessionContext:

    def test_namespace_from_query_parameter(self, client, streaming) -> None:
        client.get("/sse", params={"ss": "acme"})

        assert streaming.contexts == [SessionContext(namespace="acme", credential="secret-token")]

    def test_missing_namespace_defaults_to_empty(self, client, request_response) -> None:
        client.post("/mcp", json={})

        assert request_response.contexts == [SessionContext(namespace="", credential="secret-token")]

    def test_credential_comes_from_settings_not_request(self, client, streaming) -> None:
        client.get("/sse", params={"ss": "acme"}, headers={"Authorization": "Bearer other"})

        assert streaming.contexts[0].credential == "secret-token"

    def test_context_is_stored_on_request_scope(self, client, streaming) -> None:
        client.get("/sse", params={"ss": "acme"})

        assert streaming.scopes[0]["state"]["session_context"] == streaming.contexts[0]
