# =============================================================================
# core/apollo_client.py  —  Authenticated calls to the Apollo.io REST API
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   One method per upstream operation.  Each method issues exactly one HTTP
#   request (employees_of_company issues two, in sequence) and returns the
#   parsed JSON, or raises an ApolloError subclass:
#
#     ValidationError    - raised by the argument records before we get here
#     EmptyResultError   - employees_of_company found no usable company
#     UpstreamHTTPError  - Apollo answered, but not with a 2xx
#     TransportError     - DNS failure, timeout, refused connection, ...
#
#   Nothing is retried.  Enrichment calls can spend Apollo credits, so
#   whether to try again is the caller's decision.
#
# WHY ONE httpx.Client?
#   The client holds the connection pool plus the default headers (API key,
#   JSON content type).  It is built from the immutable ApolloConfig and
#   never changes afterwards, so concurrent tool calls can share it.
#   Tests pass an httpx.MockTransport to run without a network.
# =============================================================================

import logging
import time
from typing import Any, Optional
from urllib.parse import quote

import httpx

from core.config import ApolloConfig
from core.exceptions import (
    ApolloError,
    EmptyResultError,
    TransportError,
    UpstreamHTTPError,
)
from core.formatting import format_query_params, split_csv, strip_url, urls_match
from core.models import (
    BulkPeopleEnrichmentQuery,
    EmployeesOfCompanyQuery,
    OrganizationEnrichmentQuery,
    OrganizationJobPostingsQuery,
    OrganizationSearchQuery,
    PeopleEnrichmentQuery,
    PeopleSearchQuery,
    PersonEmailQuery,
)

logger = logging.getLogger(__name__)

# employees_of_company looks at the first page only.
LOOKUP_PAGE_SIZE = 100

_PROSPECT_ANALYTICS_CONTEXT = "Searcher: Individual Add Button"
_PROSPECT_CTA_NAME = "Access email"


def _error_message(response: httpx.Response) -> str:
    """Best human-readable message for a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "message", "error_message"):
            if body.get(key):
                return str(body[key])
    return response.reason_phrase or "HTTP error"


class ApolloClient:
    """Thin, synchronous client over the Apollo.io API."""

    def __init__(self, config: ApolloConfig, transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self._http = httpx.Client(
            headers={
                "Content-Type": "application/json",
                "Cache-Control": "no-cache",
                "x-api-key": config.api_key,
            },
            timeout=config.timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "ApolloClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------
    def _request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: Any = None,
    ) -> Any:
        logger.info("Apollo %s %s", method, url)
        try:
            response = self._http.request(method, url, json=json, params=params)
        except httpx.TransportError as exc:
            detail = str(exc) or type(exc).__name__
            logger.warning("Apollo %s %s failed: %s", method, url, detail)
            raise TransportError(detail) from exc

        if not response.is_success:
            error = UpstreamHTTPError(response.status_code, _error_message(response))
            logger.warning("Apollo %s %s returned %s", method, url, error)
            raise error

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApolloError(f"Invalid JSON received from Apollo API ({response.status_code})") from exc

    # -------------------------------------------------------------------------
    # Enrichment
    # -------------------------------------------------------------------------
    def people_enrichment(self, query: PeopleEnrichmentQuery) -> Any:
        """Enrich one person.  https://docs.apollo.io/reference/people-enrichment"""
        return self._request(
            "POST", f"{self.config.base_url}/people/match", json=query.to_params()
        )

    def bulk_people_enrichment(self, query: BulkPeopleEnrichmentQuery) -> Any:
        """Enrich up to 10 people in one call.

        Apollo returns a ``matches`` list with null entries for inputs it
        could not match.  When phone reveal is requested the numbers arrive
        later on the webhook and the response only carries job status.
        https://docs.apollo.io/reference/bulk-people-enrichment
        """
        return self._request(
            "POST", f"{self.config.base_url}/people/bulk_match", json=query.to_params()
        )

    def organization_enrichment(self, query: OrganizationEnrichmentQuery) -> Any:
        """Enrich one company.  https://docs.apollo.io/reference/organization-enrichment"""
        return self._request(
            "GET", f"{self.config.base_url}/organizations/enrich", params=query.to_params()
        )

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------
    # Both endpoints want an empty JSON body with every filter in the query
    # string (see core/formatting.py for the bracket convention).
    # -------------------------------------------------------------------------
    def people_search(self, query: PeopleSearchQuery) -> Any:
        return self._request(
            "POST",
            f"{self.config.base_url}/mixed_people/search",
            json={},
            params=format_query_params(query.to_params()),
        )

    def organization_search(self, query: OrganizationSearchQuery) -> Any:
        """Find organizations.  https://docs.apollo.io/reference/organization-search"""
        return self._request(
            "POST",
            f"{self.config.base_url}/mixed_companies/search",
            json={},
            params=format_query_params(query.to_params()),
        )

    def organization_job_postings(self, query: OrganizationJobPostingsQuery) -> Any:
        """Job postings of one organization.

        https://docs.apollo.io/reference/organization-jobs-postings
        """
        organization_id = quote(query.organization_id.strip(), safe="")
        return self._request(
            "GET", f"{self.config.base_url}/organizations/{organization_id}/job_postings"
        )

    # -------------------------------------------------------------------------
    # Email lookup
    # -------------------------------------------------------------------------
    def get_person_email(self, query: PersonEmailQuery) -> list:
        """Reveal a person's email by adding them to "my prospects".

        This is the one operation that reshapes the response: only the
        email of each returned contact is kept.
        """
        payload = {
            "entity_ids": [query.apollo_id],
            "analytics_context": _PROSPECT_ANALYTICS_CONTEXT,
            "skip_fetching_people": True,
            "cta_name": _PROSPECT_CTA_NAME,
            "cacheKey": int(time.time() * 1000),
        }
        data = self._request(
            "POST",
            f"{self.config.app_base_url}/mixed_people/add_to_my_prospects",
            json=payload,
        )
        if not data:
            raise ApolloError("No data received from Apollo API")

        contacts = data.get("contacts") or []
        return [contact.get("email") for contact in contacts if isinstance(contact, dict)]

    # -------------------------------------------------------------------------
    # Compound: employees_of_company
    # -------------------------------------------------------------------------
    # 1. search organizations by name (first page)
    # 2. pick the candidate whose LinkedIn or website URL matches the caller's
    #    URL, otherwise the FIRST search result
    # 3. search people at that organization
    #
    # The first-result fallback can pick the wrong company when names
    # collide; it is kept as-is and reported in the log.
    # -------------------------------------------------------------------------
    def employees_of_company(self, query: EmployeesOfCompanyQuery) -> list:
        organizations = self._search_organizations_by_name(query.company)
        if not organizations:
            raise EmptyResultError("No organizations found")

        company = self._pick_organization(organizations, query)
        company_id = company.get("id") if isinstance(company, dict) else None
        if not company_id:
            raise EmptyResultError("Could not determine company ID")

        payload: dict[str, Any] = {
            "organization_ids": [company_id],
            "page": 1,
            "limit": LOOKUP_PAGE_SIZE,
        }
        if query.person_seniorities:
            payload["person_titles"] = split_csv(query.person_seniorities)
        if query.contact_email_status:
            payload["contact_email_status_v2"] = split_csv(query.contact_email_status)

        data = self._request(
            "POST", f"{self.config.legacy_base_url}/mixed_people/search", json=payload
        )
        if not data:
            raise ApolloError("No data received from Apollo API")
        return data.get("people") or []

    def _search_organizations_by_name(self, name: str) -> list:
        data = self._request(
            "POST",
            f"{self.config.legacy_base_url}/mixed_companies/search",
            json={"q_organization_name": name, "page": 1, "limit": LOOKUP_PAGE_SIZE},
        )
        if not data:
            raise ApolloError("No data received from Apollo API")
        return data.get("organizations") or []

    @staticmethod
    def _pick_organization(organizations: list, query: EmployeesOfCompanyQuery) -> Any:
        wanted_linkedin = strip_url(query.linkedin_url)
        wanted_website = strip_url(query.website_url)

        if wanted_linkedin or wanted_website:
            for candidate in organizations:
                if not isinstance(candidate, dict):
                    continue
                if urls_match(candidate.get("linkedin_url"), wanted_linkedin):
                    return candidate
                if urls_match(candidate.get("website_url"), wanted_website):
                    return candidate
            logger.info(
                "No organization matched the supplied URL for %r; using the first result",
                query.company,
            )
        return organizations[0]
