# =============================================================================
# core/models.py - Data Models (the "nouns" of the relay)
# =============================================================================
#
# These dataclasses define the shape of every piece of information that flows
# between the MCP client, this relay, and the Dry.ai backend.
#
#   SessionContext  →  who is connected (namespace + credential)
#   ToolDescriptor  →  one entry of the remote tool manifest
#   Manifest        →  the whole manifest for a namespace
#   QueryRequest    →  the body we POST when a tool is invoked
#   QueryResponse   →  what the query service answers
#
# WIRE NAMES vs PYTHON NAMES:
#   The Dry.ai API speaks camelCase ("schemaDescription", "dryContext").
#   The from_dict()/to_dict() helpers are the only places that know the
#   wire names; everything else in the codebase uses snake_case attributes.
#
# All models are frozen: a descriptor or a session context never changes
# after it is created, so the tool handlers built from them can be shared
# freely between concurrent invocations.
# =============================================================================

from dataclasses import dataclass, field
import json
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# SessionContext - per-connection identity
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class SessionContext:
    """The namespace and credential a session was opened with.

    namespace comes from the ``ss`` query parameter of the inbound request,
    credential from process configuration.  Both default to "".
    """

    namespace: str = ""
    credential: str = ""


# -----------------------------------------------------------------------------
# ToolDescriptor - one tool from the manifest
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ToolDescriptor:
    """A single remotely-defined tool.

    Every descriptor becomes one MCP tool taking a single ``query`` string.
    ``smartspace`` is the namespace the query is answered against and may
    differ from the namespace the session was opened with.
    """

    name: str
    description: str = ""
    schema_description: str = ""    # Documents the "query" argument
    smartspace: str = ""            # Target namespace for queries
    type: str = ""                  # Opaque category tag, passed through

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolDescriptor":
        """Build a descriptor from one ``smartspaces`` entry.

        Raises:
            ValueError: if the entry is not an object or has no name.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Tool descriptor must be an object, got {type(data).__name__}")
        name = data.get("name")
        if not name:
            raise ValueError("Tool descriptor has no name")
        return cls(
            name=str(name),
            description=str(data.get("description") or ""),
            schema_description=str(data.get("schemaDescription") or ""),
            smartspace=str(data.get("smartspace") or ""),
            type=str(data.get("type") or ""),
        )


# -----------------------------------------------------------------------------
# Manifest - everything GET /api/gtpb returns for a namespace
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Manifest:
    """The tool manifest for one namespace, in manifest order."""

    user: str = ""
    tools: tuple[ToolDescriptor, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Any) -> "Manifest":
        """Parse a manifest body.

        A body without a ``smartspaces`` list (or with an empty one) is a
        valid manifest with no tools.  Entries that are not usable
        descriptors are logged and skipped; the rest keep their order.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Manifest must be a JSON object, got {type(data).__name__}")
        entries = data.get("smartspaces") or []
        if not isinstance(entries, list):
            raise ValueError("Manifest 'smartspaces' field must be a list")
        tools = []
        for index, entry in enumerate(entries):
            try:
                tools.append(ToolDescriptor.from_dict(entry))
            except ValueError as e:
                logger.warning(f"Skipping manifest entry {index}: {e}")
        return cls(user=str(data.get("user") or ""), tools=tuple(tools))


# -----------------------------------------------------------------------------
# QueryRequest / QueryResponse - one tool invocation round-trip
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class QueryRequest:
    user: str
    smartspace: str
    query: str
    type: str

    def to_dict(self) -> dict[str, str]:
        return {
            "user": self.user,
            "smartspace": self.smartspace,
            "query": self.query,
            "type": self.type,
        }


def _context_text(value: Any) -> Optional[str]:
    # Empty or missing context means "no context"; other scalars and
    # structures are passed on as text.
    if value is None or value == "" or value is False:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value)


@dataclass(frozen=True)
class QueryResponse:
    dry_context: Optional[str] = None
    success: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Any) -> "QueryResponse":
        # Anything that isn't an object is treated as "no context".
        if not isinstance(data, dict):
            return cls()
        context = data.get("dryContext")
        success = data.get("success")
        return cls(
            dry_context=_context_text(context),
            success=success if isinstance(success, bool) else None,
        )
