# =============================================================================
# tools/provisioner.py - Manifest → MCP tools
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Turns the Dry.ai tool manifest for a namespace into MCP tools registered
#   on a session's FastMCP server.  Unlike a hand-written server where every
#   tool is a decorated function in the module, here the tools are only
#   known at runtime, so each one is built as a closure over its descriptor.
#
# HOW IT WORKS (the flow):
#   1. A transport opens a new session and calls provision()
#   2. provision() fetches the manifest (core/dry_client.py)
#   3. For every descriptor, in manifest order, it registers a tool named
#      after the descriptor with a single "query: str" argument
#   4. Later, the client calls a tool → the handler POSTs a QueryRequest
#      and returns the answer as plain text
#
# FAILURE CONTRACT:
#   provision() never raises.  A manifest that can't be fetched or parsed
#   leaves the session with zero tools.  A tool handler never raises either:
#   backend failures come back as reply text the end user can read.
# =============================================================================

import logging
from typing import Annotated

from fastmcp import FastMCP
from pydantic import Field

from core.dry_client import DryClient, DryRequestError
from core.models import Manifest, QueryRequest, ToolDescriptor

logger = logging.getLogger(__name__)

# ANSI color codes for terminal output
_CYAN = "\033[36m"     # Requests (tool calls with params)
_GREEN = "\033[32m"    # Responses (reply text)
_YELLOW = "\033[33m"   # Status/progress messages
_RESET = "\033[0m"


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, text: str) -> str:
    """Log the reply text in GREEN, then return it."""
    logger.info(f"{_GREEN}  ← {tool_name} response: {len(text)} chars{_RESET}")
    return text


# =============================================================================
# Reply texts
# =============================================================================
def failed_reply(query: str) -> str:
    return f"Failed to get information for the query: {query}."


def no_context_reply(query: str) -> str:
    return f"No context found for the query: {query}."


# =============================================================================
# Tool handler factory
# =============================================================================
def make_tool_handler(client: DryClient, user: str, descriptor: ToolDescriptor):
    """Build the async handler for one descriptor.

    The handler closes over the manifest user and the descriptor only.
    Queries go to the descriptor's own smartspace, not the namespace the
    session was opened with.

    The ``query`` annotation is built here so the argument's description
    in the tool's input schema is the descriptor's schemaDescription.
    """

    async def handler(
        query: Annotated[str, Field(description=descriptor.schema_description)],
    ) -> str:
        _log_request(descriptor.name, query=query)

        request = QueryRequest(
            user=user,
            smartspace=descriptor.smartspace,
            query=query,
            type=descriptor.type,
        )
        try:
            answer = await client.ask(request)
        except DryRequestError as e:
            logger.error(f"Error making Dry request: {e}")
            return _log_response(descriptor.name, failed_reply(query))

        if not answer.dry_context:
            _log_status("Backend answered without context")
            return _log_response(descriptor.name, no_context_reply(query))
        return _log_response(descriptor.name, answer.dry_context)

    handler.__name__ = descriptor.name
    return handler


def register_manifest(server: FastMCP, client: DryClient, manifest: Manifest) -> list[str]:
    """Register one tool per descriptor on ``server``, in manifest order.

    A name that appears twice keeps its first registration; MCP needs tool
    names to be unique within a server.  A descriptor FastMCP refuses is
    logged and skipped.

    Returns:
        The registered tool names, in order.
    """
    registered: list[str] = []
    for descriptor in manifest.tools:
        if descriptor.name in registered:
            logger.warning(f"Skipping duplicate tool in manifest: {descriptor.name}")
            continue
        try:
            server.tool(
                name=descriptor.name,
                description=descriptor.description,
                output_schema=None,
            )(make_tool_handler(client, manifest.user, descriptor))
        except Exception:
            logger.exception(f"Error registering tool {descriptor.name!r}")
            continue
        registered.append(descriptor.name)
    return registered


# =============================================================================
# provision() - called once per session
# =============================================================================
async def provision(
    namespace: str,
    credential: str,
    registry: FastMCP,
    client: DryClient,
) -> list[str]:
    """Populate ``registry`` with the tools of ``namespace``'s manifest.

    Args:
        namespace: The smartspace the session was opened for ("" allowed).
        credential: Bearer token for the manifest endpoint.
        registry: The session's FastMCP server.
        client: Shared Dry.ai client.

    Returns:
        Names of the registered tools (empty when loading failed).
    """
    logger.info(f"Loading tools from dry.ai: {namespace!r}")

    try:
        manifest = await client.fetch_manifest(namespace, credential)
    except DryRequestError as e:
        logger.error(f"Error loading tools for {namespace!r}: {e}")
        return []

    if not manifest.tools:
        _log_status(f"Manifest for {namespace!r} has no tools")
        return []

    names = register_manifest(registry, client, manifest)
    _log_status(f"Registered {len(names)} tools: {names}")
    return names
