"""
Shared fixtures for the Dry.ai MCP relay tests.

Outbound HTTP never leaves the process: every DryClient under test is built
on an httpx.AsyncClient whose transport is an httpx.MockTransport driven by
a FakeDryBackend.
"""

import json
import sys
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

# Add project root to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import Settings  # noqa: E402
from core.dry_client import DryClient  # noqa: E402

MANIFEST_URL = "http://dry.test/api/gtpb"
QUERY_URL = "http://dry.test/api/dryqa"


class FakeDryBackend:
    """Stand-in for the manifest and query endpoints.

    Records every request it receives.  Responses are configured per
    endpoint either as (status, json body) or as an exception to raise,
    which is how a connection failure is simulated.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.manifest_status = 200
        self.manifest_body: Any = {"user": "u-1", "smartspaces": []}
        self.manifest_error: Optional[Exception] = None
        self.query_status = 200
        self.query_body: Any = {"dryContext": "ANSWER", "success": True}
        self.query_error: Optional[Exception] = None
        self.query_handler: Optional[Callable[[dict], Any]] = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url.startswith(MANIFEST_URL):
            if self.manifest_error is not None:
                raise self.manifest_error
            return httpx.Response(self.manifest_status, json=self.manifest_body)
        if url.startswith(QUERY_URL):
            if self.query_error is not None:
                raise self.query_error
            body = self.query_body
            if self.query_handler is not None:
                body = self.query_handler(json.loads(request.content))
            return httpx.Response(self.query_status, json=body)
        return httpx.Response(404, text="Not found")

    @property
    def manifest_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url).startswith(MANIFEST_URL)]

    @property
    def query_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url).startswith(QUERY_URL)]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        auth_key="secret-token",
        manifest_url=MANIFEST_URL,
        query_url=QUERY_URL,
    )


@pytest.fixture
def backend() -> FakeDryBackend:
    return FakeDryBackend()


@pytest.fixture
def dry_client(settings, backend) -> DryClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(backend))
    return DryClient(settings, http=http)


def smartspace(name: str, **overrides: str) -> dict[str, str]:
    """One manifest entry in wire format."""
    entry = {
        "name": name,
        "description": f"Ask the {name} knowledge base",
        "schemaDescription": f"Question for {name}",
        "smartspace": f"{name}-space",
        "type": "qa",
    }
    entry.update(overrides)
    return entry
