# =============================================================================
# main.py - Entry Point for the Dry.ai MCP Relay
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py
#
# WHAT HAPPENS:
#   1. Loads .env (DRY_AUTH_KEY, endpoint overrides, HOST/PORT, ...)
#   2. Configures logging to stderr
#   3. Builds the ASGI app (gateway/app.py)
#   4. Serves it with uvicorn
#
# CONNECTING A CLIENT:
#   Streaming (SSE):        http://localhost:8787/sse?ss=<smartspace>
#   Streamable HTTP:        http://localhost:8787/mcp?ss=<smartspace>
#
#   Each new session fetches the tool manifest for <smartspace> and exposes
#   one tool per manifest entry.
# =============================================================================

import logging
import sys

from dotenv import load_dotenv

# Load environment variables from .env before the settings are read.
load_dotenv()

import uvicorn

from core.config import load_settings
from gateway.app import create_app


def configure_logging(level: str) -> None:
    """Log to STDERR with a short timestamped format."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def run() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)

    if not settings.auth_key:
        logging.warning("DRY_AUTH_KEY is not set; manifest requests will carry an empty bearer token")

    app = create_app(settings)
    logging.info(f"Dry.ai MCP relay listening on {settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
