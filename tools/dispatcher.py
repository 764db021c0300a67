# =============================================================================
# tools/dispatcher.py  —  Tool name + argument bag → one Apollo call
# =============================================================================
#
# THE FLOW for call_tool(name, arguments):
#   1. Look the name up in TOOL_CATALOG.  Unknown → McpError(METHOD_NOT_FOUND).
#      That is a protocol error (the caller asked for something that does
#      not exist), so it is raised, not wrapped.
#   2. Parse the bag into the tool's argument record (ValidationError on
#      missing required fields, before any network traffic).
#   3. organization_search only: rewrite "11-50" ranges to "11,50".
#   4. Invoke the bound ApolloClient method.
#   5. Render the result as pretty-printed JSON text.
#
#   Any exception in steps 2-5 becomes an error-flagged ToolResponse
#   "Apollo.io API error: <detail>".  The dispatcher holds no per-call state,
#   so the next call is served normally.
# =============================================================================

import dataclasses
import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from mcp.shared.exceptions import McpError
from mcp.types import METHOD_NOT_FOUND, ErrorData

from core.apollo_client import ApolloClient
from core.formatting import sanitize_ranges
from core.models import OrganizationSearchQuery
from tools.catalog import TOOL_CATALOG, ToolDescriptor

logger = logging.getLogger(__name__)

PROVIDER_NAME = "Apollo.io"


@dataclass(frozen=True)
class ToolResponse:
    """Text payload of one tool call, flagged when it carries an error."""

    text: str
    is_error: bool = False


class ToolDispatcher:
    """Routes MCP tool calls to the Apollo client."""

    def __init__(self, client: ApolloClient, catalog: Mapping[str, ToolDescriptor] = TOOL_CATALOG):
        self._client = client
        self._catalog = catalog

    def list_tools(self) -> list[dict[str, Any]]:
        return [descriptor.to_mcp() for descriptor in self._catalog.values()]

    def lookup(self, name: str) -> ToolDescriptor:
        """Return the descriptor for *name*, or raise METHOD_NOT_FOUND."""
        descriptor = self._catalog.get(name)
        if descriptor is None:
            raise McpError(ErrorData(code=METHOD_NOT_FOUND, message=f"Unknown tool: {name}"))
        return descriptor

    def call_tool(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> ToolResponse:
        descriptor = self.lookup(name)

        try:
            record = descriptor.arguments.from_arguments(arguments)
            if isinstance(record, OrganizationSearchQuery) and record.organization_num_employees_ranges:
                record = dataclasses.replace(
                    record,
                    organization_num_employees_ranges=sanitize_ranges(
                        list(record.organization_num_employees_ranges)
                    ),
                )
            result = descriptor.invoke(self._client, record)
            return ToolResponse(json.dumps(result, indent=2))
        except Exception as exc:
            logger.error("Error executing tool %s: %s", name, exc, exc_info=True)
            return ToolResponse(f"{PROVIDER_NAME} API error: {exc}", is_error=True)
