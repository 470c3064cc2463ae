# =============================================================================
# tools/session_server.py - One FastMCP server per MCP session
# =============================================================================
#
# Every session gets its own FastMCP instance: two clients connected with
# different ``ss`` namespaces see different tool lists, and nothing
# registered for one session is visible to another.
#
# The transports in gateway/transports.py call create_session_server() when
# a client opens a session and then run the MCP protocol against the
# returned server until the session ends.
# =============================================================================

from fastmcp import FastMCP

from core.config import SERVER_NAME, SERVER_VERSION
from core.dry_client import DryClient
from core.models import SessionContext
from tools.provisioner import provision


async def create_session_server(context: SessionContext, client: DryClient) -> FastMCP:
    """Build a FastMCP server for ``context`` and load its tools."""
    server = FastMCP(name=SERVER_NAME, version=SERVER_VERSION)
    await provision(context.namespace, context.credential, server, client)
    return server
