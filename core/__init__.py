# =============================================================================
# core/__init__.py
# =============================================================================
# Framework-free building blocks of the relay:
#
#   config.py      Settings read from the environment
#   models.py      Session context, manifest and query data models
#   dry_client.py  Async HTTP calls to the Dry.ai manifest and query endpoints
#
# Nothing in this package imports FastMCP or Starlette.
# =============================================================================
