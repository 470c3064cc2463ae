# =============================================================================
# gateway/app.py - ASGI application wiring
# =============================================================================
#
# Builds the Starlette app that uvicorn serves:
#
#   Starlette
#     └── Mount("/")  →  Router
#                          ├── SseTransport            (/sse, /sse/message, */sse)
#                          └── StreamableHttpTransport (/mcp)
#
# The app's lifespan owns the two process-wide resources: the shared
# DryClient (HTTP connection pool) and the task group that runs Streamable
# HTTP sessions.
# =============================================================================

from contextlib import asynccontextmanager
from typing import Optional

from starlette.applications import Starlette
from starlette.routing import Mount

from core.config import Settings, load_settings
from core.dry_client import DryClient
from core.models import SessionContext
from gateway.router import Router
from gateway.transports import SseTransport, StreamableHttpTransport
from tools.session_server import create_session_server


def create_app(settings: Optional[Settings] = None, client: Optional[DryClient] = None) -> Starlette:
    """Create the relay's ASGI application.

    Args:
        settings: Configuration; read from the environment when omitted.
        client: Dry.ai client to share between sessions.  When omitted one is
                created from ``settings`` and closed on shutdown.
    """
    settings = settings or load_settings()
    owns_client = client is None
    dry_client = client or DryClient(settings)

    async def session_factory(context: SessionContext):
        return await create_session_server(context, dry_client)

    streaming = SseTransport(session_factory)
    request_response = StreamableHttpTransport(session_factory)
    router = Router(settings, streaming=streaming, request_response=request_response)

    @asynccontextmanager
    async def lifespan(app: Starlette):
        async with request_response.run():
            try:
                yield
            finally:
                if owns_client:
                    await dry_client.aclose()

    app = Starlette(routes=[Mount("/", app=router)], lifespan=lifespan)
    app.state.settings = settings
    app.state.router = router
    app.state.request_response = request_response
    return app
