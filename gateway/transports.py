# =============================================================================
# gateway/transports.py - The two MCP transport entry points
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Carries MCP messages between HTTP clients and per-session FastMCP servers.
#
#   SseTransport             "streaming" transport (MCP over Server-Sent Events)
#     GET  /sse                       → opens a session, streams server messages
#     POST /sse/message?session_id=…  → delivers one client message
#
#   StreamableHttpTransport  "request/response" transport (MCP Streamable HTTP)
#     POST /mcp (no mcp-session-id)   → opens a session (kept only if it initializes)
#     GET/DELETE /mcp (no id)         → 400
#     GET/POST/DELETE /mcp (with id)  → talks to that session
#
# SESSION LIFECYCLE:
#   Opening a session calls the session factory (tools/session_server.py),
#   which builds a fresh FastMCP server and provisions its tools before the
#   protocol starts.  The server then lives exactly as long as its session.
#
# The protocol loop itself is the MCP SDK's: both transports hand the SDK's
# read/write streams to the FastMCP server's low-level protocol server.
# =============================================================================

from contextlib import asynccontextmanager
import logging
from typing import AsyncIterator, Awaitable, Callable, Optional
from uuid import uuid4

import anyio
from anyio.abc import TaskGroup
from fastmcp import FastMCP
from mcp.server.sse import SseServerTransport
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER, StreamableHTTPServerTransport
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.types import Receive, Scope, Send

from core.models import SessionContext

logger = logging.getLogger(__name__)

SSE_MESSAGE_PATH = "/sse/message"

SessionFactory = Callable[[SessionContext], Awaitable[FastMCP]]


def _protocol_server(server: FastMCP):
    """The MCP SDK server that speaks the protocol for a FastMCP instance."""
    return server._mcp_server


# =============================================================================
# Streaming transport: MCP over SSE
# =============================================================================
class SseTransport:
    """One long-lived GET per session plus a POST per client message."""

    def __init__(self, session_factory: SessionFactory, message_path: str = SSE_MESSAGE_PATH):
        self._session_factory = session_factory
        self._sse = SseServerTransport(message_path)

    async def handle(self, scope: Scope, receive: Receive, send: Send, context: SessionContext) -> None:
        if scope["method"] == "POST":
            await self._sse.handle_post_message(scope, receive, send)
            return

        server = await self._session_factory(context)
        protocol = _protocol_server(server)
        logger.info(f"SSE session opened for namespace {context.namespace!r}")
        async with self._sse.connect_sse(scope, receive, send) as (read_stream, write_stream):
            await protocol.run(read_stream, write_stream, protocol.create_initialization_options())
        logger.info(f"SSE session closed for namespace {context.namespace!r}")


# =============================================================================
# Request/response transport: MCP Streamable HTTP
# =============================================================================
class StreamableHttpTransport:
    """Stateful Streamable HTTP sessions keyed by the mcp-session-id header.

    Session protocol loops run in a task group owned by run(), which the
    application enters for its whole lifespan:

        transport = StreamableHttpTransport(factory)
        async with transport.run():
            ...  # serve requests
    """

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory
        self._sessions: dict[str, StreamableHTTPServerTransport] = {}
        self._task_group: Optional[TaskGroup] = None

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    @asynccontextmanager
    async def run(self) -> AsyncIterator[None]:
        if self._task_group is not None:
            raise RuntimeError("StreamableHttpTransport.run() is already active")
        async with anyio.create_task_group() as tg:
            self._task_group = tg
            try:
                yield
            finally:
                tg.cancel_scope.cancel()
                self._task_group = None
                self._sessions.clear()

    async def handle(self, scope: Scope, receive: Receive, send: Send, context: SessionContext) -> None:
        if self._task_group is None:
            raise RuntimeError("StreamableHttpTransport.run() must be entered before handling requests")

        session_id = Request(scope, receive).headers.get(MCP_SESSION_ID_HEADER)
        if session_id is not None:
            transport = self._sessions.get(session_id)
            if transport is None:
                response = PlainTextResponse("Session not found", status_code=404)
                await response(scope, receive, send)
                return
            await transport.handle_request(scope, receive, send)
            return

        if scope["method"] != "POST":
            response = PlainTextResponse(
                "Bad Request: No valid session ID provided", status_code=400
            )
            await response(scope, receive, send)
            return

        server = await self._session_factory(context)
        transport = StreamableHTTPServerTransport(mcp_session_id=uuid4().hex)
        self._sessions[transport.mcp_session_id] = transport
        await self._task_group.start(self._run_session, server, transport, context)

        statuses: list[int] = []

        async def send_and_record(message) -> None:
            if message["type"] == "http.response.start":
                statuses.append(message["status"])
            await send(message)

        await transport.handle_request(scope, receive, send_and_record)
        # Only a successful initialize keeps the session.
        if not statuses or statuses[0] >= 400:
            await self._discard(transport)

    async def _discard(self, transport: StreamableHTTPServerTransport) -> None:
        self._sessions.pop(transport.mcp_session_id, None)
        await transport.terminate()
        logger.info(f"MCP session {transport.mcp_session_id} discarded before initialization")

    async def _run_session(
        self,
        server: FastMCP,
        transport: StreamableHTTPServerTransport,
        context: SessionContext,
        *,
        task_status=anyio.TASK_STATUS_IGNORED,
    ) -> None:
        protocol = _protocol_server(server)
        session_id = transport.mcp_session_id
        logger.info(f"MCP session {session_id} opened for namespace {context.namespace!r}")
        async with transport.connect() as (read_stream, write_stream):
            task_status.started()
            try:
                await protocol.run(read_stream, write_stream, protocol.create_initialization_options())
            except Exception:
                # Sessions fail independently of the shared task group.
                logger.exception(f"MCP session {session_id} crashed")
            finally:
                self._sessions.pop(session_id, None)
                logger.info(f"MCP session {session_id} closed")
