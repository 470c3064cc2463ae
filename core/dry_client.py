# =============================================================================
# core/dry_client.py - Outbound HTTP calls to the Dry.ai backend
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Wraps the two Dry.ai endpoints the relay talks to:
#
#     fetch_manifest()  GET  {manifest_url}?ss=<namespace>   (once per session)
#     ask()             POST {query_url}                     (once per tool call)
#
#   Both are async: a slow backend suspends only the session waiting on it.
#
# ERRORS:
#   Every failure (connection refused, non-2xx status, body that isn't JSON,
#   manifest of the wrong shape) surfaces as DryRequestError.  Callers decide
#   what a failure means: the provisioner logs it and registers no tools,
#   a tool handler turns it into reply text.
#
# NO RETRIES:
#   Each call is a single attempt.  The timeout comes from Settings and is
#   off unless DRY_REQUEST_TIMEOUT is set.
# =============================================================================

from typing import Optional

import httpx

from core.config import Settings, USER_AGENT
from core.models import Manifest, QueryRequest, QueryResponse


class DryRequestError(Exception):
    """An outbound call to the Dry.ai backend did not produce a usable answer."""


class DryClient:
    """Async client for the manifest and query endpoints.

    One instance is shared by every session in the process.  It holds no
    per-call state, only the connection pool of the underlying
    httpx.AsyncClient.

    Usage:
        client = DryClient(settings)
        manifest = await client.fetch_manifest("acme", "token")
        answer = await client.ask(QueryRequest(...))
        await client.aclose()
    """

    def __init__(self, settings: Settings, http: Optional[httpx.AsyncClient] = None):
        self._manifest_url = settings.manifest_url
        self._query_url = settings.query_url
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=settings.request_timeout)

    async def fetch_manifest(self, namespace: str, credential: str) -> Manifest:
        """Fetch and parse the tool manifest for a namespace.

        Raises:
            DryRequestError: on transport failure, non-2xx status or a
                body that is not a manifest.
        """
        headers = {
            "Authorization": f"Bearer {credential}",
            "Content-Type": "application/json",
        }
        try:
            response = await self._http.get(
                self._manifest_url,
                params={"ss": namespace},
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise DryRequestError(f"Manifest request failed: {e}") from e

        if not response.is_success:
            raise DryRequestError(
                f"Failed to fetch tools: {response.status_code} {response.reason_phrase}"
            )

        try:
            return Manifest.from_dict(response.json())
        except ValueError as e:
            raise DryRequestError(f"Invalid manifest body: {e}") from e

    async def ask(self, request: QueryRequest) -> QueryResponse:
        """POST one query to the query-answering endpoint.

        Raises:
            DryRequestError: on transport failure, non-2xx status or a
                body that is not JSON.
        """
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        try:
            response = await self._http.post(
                self._query_url,
                json=request.to_dict(),
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise DryRequestError(f"Query request failed: {e}") from e

        if not response.is_success:
            raise DryRequestError(f"HTTP error! status: {response.status_code}")

        try:
            return QueryResponse.from_dict(response.json())
        except ValueError as e:
            raise DryRequestError(f"Query response is not JSON: {e}") from e

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()
