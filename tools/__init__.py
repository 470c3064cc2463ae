# =============================================================================
# tools/__init__.py
# =============================================================================
# This package turns Dry.ai manifests into FastMCP tools.
#
#   provisioner.py     fetch a manifest, register one tool per descriptor
#   session_server.py  build a provisioned FastMCP server for a session
#
# Each tool takes a single "query" string and answers with plain text.
# Backend failures are answered with text as well; a tool never raises.
# =============================================================================
