# =============================================================================
# tools/catalog.py  —  Static catalog of the 8 Apollo tools
# =============================================================================
#
# One ToolDescriptor per upstream operation:
#   name          → the MCP tool identifier
#   description   → what the LLM reads to decide WHEN to call the tool
#   input_schema  → JSON schema of the accepted arguments (documentation /
#                   boundary only; the argument record does the checking)
#   arguments     → the core.models record the argument bag is parsed into
#   invoke        → the ApolloClient method the record is handed to
#
# The catalog is built once at import and is a read-only mapping.  The
# dispatcher only ever LOOKS THINGS UP here; nothing registers tools at
# runtime.
# =============================================================================

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping

from core.apollo_client import ApolloClient
from core.models import (
    ArgumentRecord,
    BulkPeopleEnrichmentQuery,
    EmployeesOfCompanyQuery,
    OrganizationEnrichmentQuery,
    OrganizationJobPostingsQuery,
    OrganizationSearchQuery,
    PeopleEnrichmentQuery,
    PeopleSearchQuery,
    PersonEmailQuery,
)


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    input_schema: Mapping[str, Any]
    arguments: type[ArgumentRecord]
    invoke: Callable[[ApolloClient, Any], Any]

    def to_mcp(self) -> dict[str, Any]:
        """Shape used by the MCP tools/list response."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": dict(self.input_schema),
        }


def _string(description: str) -> dict[str, Any]:
    return {"type": "string", "description": description}


def _strings(description: str) -> dict[str, Any]:
    return {"type": "array", "items": {"type": "string"}, "description": description}


def _number(description: str) -> dict[str, Any]:
    return {"type": "number", "description": description}


def _boolean(description: str) -> dict[str, Any]:
    return {"type": "boolean", "description": description}


def _schema(properties: dict[str, Any], required: tuple[str, ...] = ()) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = list(required)
    return schema


_PERSON_DETAIL_PROPERTIES = {
    "first_name": _string("Person's first name"),
    "last_name": _string("Person's last name"),
    "email": _string("Person's email address"),
    "domain": _string("Company domain"),
    "organization_name": _string("Organization name"),
    "linkedin_url": _string("Person's LinkedIn profile URL"),
}

_EMPLOYEE_RANGES_HELP = (
    'Employee count ranges. Format: "min,max" (e.g., "1,10", "11,50", "51,200") '
    'or "min-max" (e.g., "1-10", "11-50", "51-200")'
)


_DESCRIPTORS = (
    ToolDescriptor(
        name="people_enrichment",
        description="Use the People Enrichment endpoint to enrich data for 1 person",
        input_schema=_schema(dict(_PERSON_DETAIL_PROPERTIES)),
        arguments=PeopleEnrichmentQuery,
        invoke=ApolloClient.people_enrichment,
    ),
    ToolDescriptor(
        name="organization_enrichment",
        description="Use the Organization Enrichment endpoint to enrich data for 1 company",
        input_schema=_schema({
            "domain": _string("Company domain"),
            "name": _string("Company name"),
        }),
        arguments=OrganizationEnrichmentQuery,
        invoke=ApolloClient.organization_enrichment,
    ),
    ToolDescriptor(
        name="people_search",
        description="Use the People Search endpoint to find people",
        input_schema=_schema({
            "q_organization_domains_list": _strings(
                "The domain names for the person's employer (current or previous). "
                "Do not include www. Up to 1,000 domains per request."
            ),
            "person_titles": _strings(
                "Job titles held by the people you want to find. Results include "
                "similar titles unless include_similar_titles is set to false."
            ),
            "include_similar_titles": _boolean(
                "When false, only returns exact matches for titles specified in "
                "person_titles. Default is true."
            ),
            "person_locations": _strings(
                "Locations where people live. Can search cities, US states, and countries."
            ),
            "person_seniorities": _strings(
                "Job seniority levels. Options: owner, founder, c_suite, partner, vp, "
                "head, director, manager, senior, entry, intern."
            ),
            "organization_locations": _strings(
                "Location of company headquarters for a person's current employer."
            ),
            "contact_email_status": _strings(
                "Email statuses to search for. Options: verified, unverified, "
                "likely to engage, unavailable."
            ),
            "organization_ids": _strings(
                "Apollo IDs for specific companies to include in search results."
            ),
            "organization_num_employees_ranges": _strings(_EMPLOYEE_RANGES_HELP),
            "q_keywords": _string("String of words to filter results by."),
            "page": _number("The page number of results to retrieve."),
            "per_page": _number("Number of search results to return per page."),
        }),
        arguments=PeopleSearchQuery,
        invoke=ApolloClient.people_search,
    ),
    ToolDescriptor(
        name="organization_search",
        description="Use the Organization Search endpoint to find organizations",
        input_schema=_schema({
            "q_organization_domains_list": _strings("List of organization domains to search for"),
            "organization_locations": _strings("List of organization locations to search for"),
            "organization_not_locations": _strings(
                'List of locations to exclude from search (e.g., "ireland", "minnesota")'
            ),
            "organization_num_employees_ranges": _strings(_EMPLOYEE_RANGES_HELP),
            "revenue_range": {
                "type": "object",
                "properties": {
                    "min": _number("Minimum revenue (e.g., 300000)"),
                    "max": _number("Maximum revenue (e.g., 50000000)"),
                },
                "description": "Revenue range to filter by (do not include currency symbols or commas)",
            },
            "currently_using_any_of_technology_uids": _strings(
                'Technologies the company is using (e.g., "salesforce", "google_analytics")'
            ),
            "q_organization_keyword_tags": _strings(
                'Keywords associated with companies (e.g., "mining", "consulting")'
            ),
            "q_organization_name": _string(
                'Filter results by company name (e.g., "apollo" or "mining")'
            ),
            "organization_ids": _strings("Specific Apollo organization IDs to include in search"),
            "page": _number("Page number for pagination"),
            "per_page": _number("Number of results per page"),
        }),
        arguments=OrganizationSearchQuery,
        invoke=ApolloClient.organization_search,
    ),
    ToolDescriptor(
        name="organization_job_postings",
        description=(
            "Use the Organization Job Postings endpoint to find job postings "
            "for a specific organization"
        ),
        input_schema=_schema(
            {"organization_id": _string("Apollo.io organization ID")},
            required=("organization_id",),
        ),
        arguments=OrganizationJobPostingsQuery,
        invoke=ApolloClient.organization_job_postings,
    ),
    ToolDescriptor(
        name="get_person_email",
        description="Get email address for a person using their Apollo ID",
        input_schema=_schema(
            {"apollo_id": _string("Apollo.io person ID")},
            required=("apollo_id",),
        ),
        arguments=PersonEmailQuery,
        invoke=ApolloClient.get_person_email,
    ),
    ToolDescriptor(
        name="employees_of_company",
        description="Find employees of a company using company name or website/LinkedIn URL",
        input_schema=_schema(
            {
                "company": _string("Company name"),
                "website_url": _string("Company website URL"),
                "linkedin_url": _string("Company LinkedIn URL"),
                "person_seniorities": _string(
                    "Comma-separated list of seniority levels to filter by"
                ),
                "contact_email_status": _string(
                    "Comma-separated list of email statuses to filter by"
                ),
            },
            required=("company",),
        ),
        arguments=EmployeesOfCompanyQuery,
        invoke=ApolloClient.employees_of_company,
    ),
    ToolDescriptor(
        name="bulk_people_enrichment",
        description=(
            "Use the Bulk People Enrichment endpoint to enrich data for up to "
            "10 people with a single API call"
        ),
        input_schema=_schema(
            {
                "details": {
                    "type": "array",
                    "items": {"type": "object", "properties": dict(_PERSON_DETAIL_PROPERTIES)},
                    "description": "Array of people to enrich (max 10)",
                },
                "reveal_personal_emails": _boolean(
                    "Set to true to enrich with personal emails (may consume credits). "
                    "Default is false."
                ),
                "reveal_phone_number": _boolean(
                    "Set to true to enrich with phone numbers (may consume credits). "
                    "Requires webhook_url. Default is false."
                ),
                "webhook_url": _string(
                    "Webhook URL where Apollo will send phone number data "
                    "(required if reveal_phone_number is true)"
                ),
            },
            required=("details",),
        ),
        arguments=BulkPeopleEnrichmentQuery,
        invoke=ApolloClient.bulk_people_enrichment,
    ),
)

TOOL_CATALOG: Mapping[str, ToolDescriptor] = MappingProxyType(
    {descriptor.name: descriptor for descriptor in _DESCRIPTORS}
)
