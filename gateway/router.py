# =============================================================================
# gateway/router.py - Path-based dispatch to the MCP transports
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Looks at each inbound HTTP request, works out which session context it
#   belongs to, and hands it to one of the two transports:
#
#     /sse, /sse/message, anything ending in /sse  →  streaming transport
#     /mcp                                         →  request/response transport
#     everything else                              →  404 "Not found"
#
# SESSION CONTEXT:
#   credential  ← Settings.auth_key (DRY_AUTH_KEY), the same for every request
#   namespace   ← the "ss" query parameter, "" when absent
#
#   A missing "ss" is not rejected: the session still opens and the manifest
#   is requested with an empty namespace.
# =============================================================================

import logging
from typing import Awaitable, Protocol

from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.types import Receive, Scope, Send
from starlette.websockets import WebSocketClose

from core.config import Settings
from core.models import SessionContext

logger = logging.getLogger(__name__)

NAMESPACE_PARAM = "ss"
STREAMING_PATH = "/sse"
STREAMING_MESSAGE_PATH = "/sse/message"
REQUEST_RESPONSE_PATH = "/mcp"


class Transport(Protocol):
    def handle(self, scope: Scope, receive: Receive, send: Send, context: SessionContext) -> Awaitable[None]:
        ...


def is_streaming_path(path: str) -> bool:
    return path in (STREAMING_PATH, STREAMING_MESSAGE_PATH) or path.endswith(STREAMING_PATH)


def is_request_response_path(path: str) -> bool:
    return path == REQUEST_RESPONSE_PATH


def session_context_for(request: Request, settings: Settings) -> SessionContext:
    """Derive the session context of a request."""
    return SessionContext(
        namespace=request.query_params.get(NAMESPACE_PARAM) or "",
        credential=settings.auth_key,
    )


class Router:
    """ASGI app that routes requests to the streaming or request/response transport."""

    def __init__(self, settings: Settings, streaming: Transport, request_response: Transport):
        self._settings = settings
        self._streaming = streaming
        self._request_response = request_response

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "websocket":
            await WebSocketClose()(scope, receive, send)
            return
        if scope["type"] != "http":
            return

        request = Request(scope, receive)
        context = session_context_for(request, self._settings)
        scope.setdefault("state", {})["session_context"] = context

        path = scope["path"]
        if is_streaming_path(path):
            await self._streaming.handle(scope, receive, send, context)
        elif is_request_response_path(path):
            await self._request_response.handle(scope, receive, send, context)
        else:
            logger.debug(f"No route for {scope['method']} {path}")
            await PlainTextResponse("Not found", status_code=404)(scope, receive, send)
