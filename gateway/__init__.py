# =============================================================================
# gateway/__init__.py
# =============================================================================
# The HTTP side of the relay: the ASGI app, the path router and the two MCP
# transports (SSE on /sse, Streamable HTTP on /mcp).
# =============================================================================
