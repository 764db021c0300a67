# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL Apollo tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Registers the 8 Apollo.io tools with FastMCP.  Each tool is a thin
#   wrapper: it logs the call, hands the arguments to the ToolDispatcher,
#   and returns the dispatcher's pretty-printed JSON text.
#
# HOW IT WORKS (the flow):
#   1. The MCP host calls a tool by name (e.g. "people_search")
#   2. A name outside the catalog is answered with a JSON-RPC
#      METHOD_NOT_FOUND error, before FastMCP looks at it
#   3. FastMCP validates the arguments against the function signature
#   4. The function forwards them to ToolDispatcher.call_tool()
#   5. The dispatcher parses them into an argument record, calls Apollo,
#      and renders the result
#   6. Error responses are raised as ToolError, which FastMCP turns into a
#      result with isError=true and the one-line diagnostic as its text
#
# TOOL NAMING:
#   Names, descriptions and per-argument help all come from tools/catalog.py,
#   so tools/list over MCP and `main.py --list-tools` describe the same tools.
#
# RUNNING THIS SERVER:
#   python main.py --api-key <key>        (stdio transport)
# =============================================================================

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Annotated, Any, Callable, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from mcp import types
from mcp.shared.exceptions import McpError
from pydantic import Field
from pydantic.fields import FieldInfo

from tools.catalog import TOOL_CATALOG
from tools.dispatcher import ToolDispatcher

SERVER_NAME = "apollo-io-manager"

# =============================================================================
# Logging Setup
# =============================================================================
# Logs go to STDERR: stdout is the MCP transport, and anything we print there
# would corrupt the JSON-RPC stream.
#
# ANSI COLOR CODES:
#     - CYAN for incoming requests (tool name + parameters)
#     - GREEN for responses
#     - YELLOW for status messages
#     - RED for error responses
# =============================================================================

_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RED = "\033[31m"
_RESET = "\033[0m"

# Responses can be whole result pages; the log only needs the start.
_MAX_LOGGED_RESPONSE = 500


def configure_logging(level: str = "INFO") -> None:
    """Send log records to stderr in the server's format."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=True,
    )


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its (non-empty) parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items() if v is not None)
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, text: str, is_error: bool) -> None:
    color = _RED if is_error else _GREEN
    shown = text if len(text) <= _MAX_LOGGED_RESPONSE else text[:_MAX_LOGGED_RESPONSE] + "…"
    logging.info(f"{color}  ← {tool_name} response: {shown}{_RESET}")


def log_event_loop_fault(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
    """Event-loop exception handler: log the fault and keep serving."""
    message = context.get("message", "unhandled error")
    logging.error(f"{_RED}Event loop fault: {message}{_RESET}", exc_info=context.get("exception"))


@asynccontextmanager
async def event_loop_fault_logging(server: FastMCP):
    """Server lifespan that routes unretrieved task errors to the log."""
    loop = asyncio.get_running_loop()
    previous = loop.get_exception_handler()
    loop.set_exception_handler(log_event_loop_fault)
    try:
        yield {}
    finally:
        loop.set_exception_handler(previous)


# =============================================================================
# Argument help
# =============================================================================
# The catalog's input_schema is the one place argument descriptions live.
# Attaching them as pydantic Field metadata puts them into the schema that
# FastMCP serves for tools/list.
# =============================================================================


def _described(tool_name: str) -> Callable[[str], FieldInfo]:
    properties = TOOL_CATALOG[tool_name].input_schema["properties"]

    def field_for(arg_name: str) -> FieldInfo:
        return Field(description=properties[arg_name]["description"])

    return field_for


def _reject_unknown_tools(mcp: FastMCP, dispatcher: ToolDispatcher) -> None:
    """Put the catalog check in front of FastMCP's tools/call handler.

    FastMCP reports an unregistered name as an ordinary isError result.
    Raising McpError here makes the low-level server answer with a JSON-RPC
    METHOD_NOT_FOUND error instead.
    """
    handlers = mcp._mcp_server.request_handlers
    call_registered_tool = handlers[types.CallToolRequest]

    async def call_tool(request: types.CallToolRequest) -> types.ServerResult:
        try:
            dispatcher.lookup(request.params.name)
        except McpError:
            _log_response(request.params.name, "unknown tool", is_error=True)
            raise
        return await call_registered_tool(request)

    handlers[types.CallToolRequest] = call_tool


def build_server(dispatcher: ToolDispatcher) -> FastMCP:
    """Create the FastMCP server with every catalog tool bound to *dispatcher*."""
    mcp = FastMCP(SERVER_NAME, lifespan=event_loop_fault_logging)

    def _run(tool_name: str, **arguments) -> str:
        _log_request(tool_name, **arguments)
        response = dispatcher.call_tool(tool_name, arguments)
        _log_response(tool_name, response.text, response.is_error)
        if response.is_error:
            raise ToolError(response.text)
        return response.text

    def _describe(tool_name: str) -> str:
        return TOOL_CATALOG[tool_name].description

    # =========================================================================
    # Enrichment
    # =========================================================================
    arg = _described("people_enrichment")

    @mcp.tool(name="people_enrichment", description=_describe("people_enrichment"))
    def people_enrichment(
        first_name: Annotated[Optional[str], arg("first_name")] = None,
        last_name: Annotated[Optional[str], arg("last_name")] = None,
        email: Annotated[Optional[str], arg("email")] = None,
        domain: Annotated[Optional[str], arg("domain")] = None,
        organization_name: Annotated[Optional[str], arg("organization_name")] = None,
        linkedin_url: Annotated[Optional[str], arg("linkedin_url")] = None,
    ) -> str:
        return _run(
            "people_enrichment",
            first_name=first_name,
            last_name=last_name,
            email=email,
            domain=domain,
            organization_name=organization_name,
            linkedin_url=linkedin_url,
        )

    arg = _described("organization_enrichment")

    @mcp.tool(name="organization_enrichment", description=_describe("organization_enrichment"))
    def organization_enrichment(
        domain: Annotated[Optional[str], arg("domain")] = None,
        name: Annotated[Optional[str], arg("name")] = None,
    ) -> str:
        return _run("organization_enrichment", domain=domain, name=name)

    arg = _described("bulk_people_enrichment")

    @mcp.tool(name="bulk_people_enrichment", description=_describe("bulk_people_enrichment"))
    def bulk_people_enrichment(
        details: Annotated[list[dict[str, Any]], arg("details")],
        reveal_personal_emails: Annotated[Optional[bool], arg("reveal_personal_emails")] = None,
        reveal_phone_number: Annotated[Optional[bool], arg("reveal_phone_number")] = None,
        webhook_url: Annotated[Optional[str], arg("webhook_url")] = None,
    ) -> str:
        # reveal_* may spend Apollo credits; the flags are passed through
        # exactly as the caller set them.
        return _run(
            "bulk_people_enrichment",
            details=details,
            reveal_personal_emails=reveal_personal_emails,
            reveal_phone_number=reveal_phone_number,
            webhook_url=webhook_url,
        )

    # =========================================================================
    # Search
    # =========================================================================
    arg = _described("people_search")

    @mcp.tool(name="people_search", description=_describe("people_search"))
    def people_search(
        q_organization_domains_list: Annotated[
            Optional[list[str]], arg("q_organization_domains_list")
        ] = None,
        person_titles: Annotated[Optional[list[str]], arg("person_titles")] = None,
        include_similar_titles: Annotated[Optional[bool], arg("include_similar_titles")] = None,
        person_locations: Annotated[Optional[list[str]], arg("person_locations")] = None,
        person_seniorities: Annotated[Optional[list[str]], arg("person_seniorities")] = None,
        organization_locations: Annotated[
            Optional[list[str]], arg("organization_locations")
        ] = None,
        contact_email_status: Annotated[Optional[list[str]], arg("contact_email_status")] = None,
        organization_ids: Annotated[Optional[list[str]], arg("organization_ids")] = None,
        organization_num_employees_ranges: Annotated[
            Optional[list[str]], arg("organization_num_employees_ranges")
        ] = None,
        q_keywords: Annotated[Optional[str], arg("q_keywords")] = None,
        page: Annotated[Optional[int], arg("page")] = None,
        per_page: Annotated[Optional[int], arg("per_page")] = None,
    ) -> str:
        return _run(
            "people_search",
            q_organization_domains_list=q_organization_domains_list,
            person_titles=person_titles,
            include_similar_titles=include_similar_titles,
            person_locations=person_locations,
            person_seniorities=person_seniorities,
            organization_locations=organization_locations,
            contact_email_status=contact_email_status,
            organization_ids=organization_ids,
            organization_num_employees_ranges=organization_num_employees_ranges,
            q_keywords=q_keywords,
            page=page,
            per_page=per_page,
        )

    arg = _described("organization_search")

    @mcp.tool(name="organization_search", description=_describe("organization_search"))
    def organization_search(
        q_organization_domains_list: Annotated[
            Optional[list[str]], arg("q_organization_domains_list")
        ] = None,
        organization_locations: Annotated[
            Optional[list[str]], arg("organization_locations")
        ] = None,
        organization_not_locations: Annotated[
            Optional[list[str]], arg("organization_not_locations")
        ] = None,
        organization_num_employees_ranges: Annotated[
            Optional[list[str]], arg("organization_num_employees_ranges")
        ] = None,
        revenue_range: Annotated[Optional[dict[str, float]], arg("revenue_range")] = None,
        currently_using_any_of_technology_uids: Annotated[
            Optional[list[str]], arg("currently_using_any_of_technology_uids")
        ] = None,
        q_organization_keyword_tags: Annotated[
            Optional[list[str]], arg("q_organization_keyword_tags")
        ] = None,
        q_organization_name: Annotated[Optional[str], arg("q_organization_name")] = None,
        organization_ids: Annotated[Optional[list[str]], arg("organization_ids")] = None,
        page: Annotated[Optional[int], arg("page")] = None,
        per_page: Annotated[Optional[int], arg("per_page")] = None,
    ) -> str:
        return _run(
            "organization_search",
            q_organization_domains_list=q_organization_domains_list,
            organization_locations=organization_locations,
            organization_not_locations=organization_not_locations,
            organization_num_employees_ranges=organization_num_employees_ranges,
            revenue_range=revenue_range,
            currently_using_any_of_technology_uids=currently_using_any_of_technology_uids,
            q_organization_keyword_tags=q_organization_keyword_tags,
            q_organization_name=q_organization_name,
            organization_ids=organization_ids,
            page=page,
            per_page=per_page,
        )

    # =========================================================================
    # Lookups by identifier
    # =========================================================================
    arg = _described("organization_job_postings")

    @mcp.tool(name="organization_job_postings", description=_describe("organization_job_postings"))
    def organization_job_postings(
        organization_id: Annotated[str, arg("organization_id")],
    ) -> str:
        return _run("organization_job_postings", organization_id=organization_id)

    arg = _described("get_person_email")

    @mcp.tool(name="get_person_email", description=_describe("get_person_email"))
    def get_person_email(apollo_id: Annotated[str, arg("apollo_id")]) -> str:
        return _run("get_person_email", apollo_id=apollo_id)

    # =========================================================================
    # Compound: employees_of_company
    # =========================================================================
    # Two upstream calls (company search → people search).  If no candidate
    # matches the given URLs, the FIRST company found by name is used.
    # =========================================================================
    arg = _described("employees_of_company")

    @mcp.tool(name="employees_of_company", description=_describe("employees_of_company"))
    def employees_of_company(
        company: Annotated[str, arg("company")],
        website_url: Annotated[Optional[str], arg("website_url")] = None,
        linkedin_url: Annotated[Optional[str], arg("linkedin_url")] = None,
        person_seniorities: Annotated[Optional[str], arg("person_seniorities")] = None,
        contact_email_status: Annotated[Optional[str], arg("contact_email_status")] = None,
    ) -> str:
        return _run(
            "employees_of_company",
            company=company,
            website_url=website_url,
            linkedin_url=linkedin_url,
            person_seniorities=person_seniorities,
            contact_email_status=contact_email_status,
        )

    _reject_unknown_tools(mcp, dispatcher)
    _log_status(f"Registered {len(TOOL_CATALOG)} tools on {SERVER_NAME}")
    return mcp
