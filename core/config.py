# =============================================================================
# core/config.py - Process-wide configuration
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Reads the relay's settings from environment variables into one frozen
#   Settings value.  main.py calls load_dotenv() first, so anything in a
#   local .env file is picked up here too.
#
# ENVIRONMENT VARIABLES:
#   DRY_AUTH_KEY          Bearer token used for every manifest fetch
#   DRY_AI_GET_TOOLS_URL  Manifest endpoint
#   DRY_URL_QA_BASE       Query-answering endpoint
#   DRY_REQUEST_TIMEOUT   Seconds before an outbound call gives up (unset = never)
#   HOST / PORT           Listen address for uvicorn
#   LOG_LEVEL             Root log level (INFO, DEBUG, ...)
# =============================================================================

from dataclasses import dataclass
import os
from typing import Optional


DEFAULT_MANIFEST_URL = "http://velocity-local.dry:8080/api/gtpb"
DEFAULT_QUERY_URL = "http://velocity-local.dry:8080/api/dryqa"

# Sent on every query call; the Dry.ai backend keys its access logs on it.
USER_AGENT = "dry-app/1.0"

SERVER_NAME = "Dry.ai Public MCP Server"
SERVER_VERSION = "1.0.0"


@dataclass(frozen=True)
class Settings:
    """Read-only configuration injected at process start."""

    auth_key: str = ""
    manifest_url: str = DEFAULT_MANIFEST_URL
    query_url: str = DEFAULT_QUERY_URL
    request_timeout: Optional[float] = None
    host: str = "0.0.0.0"
    port: int = 8787
    log_level: str = "INFO"


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"DRY_REQUEST_TIMEOUT must be a number of seconds, got {raw!r}") from None
    return value if value > 0 else None


def load_settings(environ: Optional[dict[str, str]] = None) -> Settings:
    """Build Settings from the environment.

    Args:
        environ: Mapping to read from.  Defaults to os.environ; tests pass
                 a plain dict instead of patching the process environment.
    """
    env = os.environ if environ is None else environ
    return Settings(
        auth_key=env.get("DRY_AUTH_KEY", ""),
        manifest_url=env.get("DRY_AI_GET_TOOLS_URL") or DEFAULT_MANIFEST_URL,
        query_url=env.get("DRY_URL_QA_BASE") or DEFAULT_QUERY_URL,
        request_timeout=_parse_timeout(env.get("DRY_REQUEST_TIMEOUT")),
        host=env.get("HOST") or "0.0.0.0",
        port=int(env.get("PORT") or 8787),
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
    )
