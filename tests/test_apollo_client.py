"""Tests for ApolloClient: every operation against a fake Apollo transport."""

from __future__ import annotations

import json

import httpx
import pytest

from core.exceptions import (
    ApolloError,
    EmptyResultError,
    TransportError,
    UpstreamHTTPError,
)
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

COMPANY_SEARCH = "/v1/mixed_companies/search"
PEOPLE_SEARCH = "/v1/mixed_people/search"


def _json(request: httpx.Request):
    return json.loads(request.content)


# ---------------------------------------------------------------------------
# Headers & transport
# ---------------------------------------------------------------------------


def test_requests_carry_api_key_and_json_headers(client, fake_apollo) -> None:
    fake_apollo.route("POST", "/api/v1/people/match", {"person": None})
    client.people_enrichment(PeopleEnrichmentQuery(email="ada@acme.io"))

    request = fake_apollo.last()
    assert request.headers["x-api-key"] == "test-key"
    assert request.headers["content-type"] == "application/json"
    assert request.headers["cache-control"] == "no-cache"


def test_non_2xx_carries_status_and_upstream_message(client, fake_apollo) -> None:
    fake_apollo.route(
        "POST", "/api/v1/people/match", httpx.Response(422, json={"error": "Invalid email"})
    )
    with pytest.raises(UpstreamHTTPError) as excinfo:
        client.people_enrichment(PeopleEnrichmentQuery(email="nope"))
    assert excinfo.value.status_code == 422
    assert str(excinfo.value) == "422 - Invalid email"


def test_non_2xx_without_body_falls_back_to_reason_phrase(client, fake_apollo) -> None:
    fake_apollo.route("GET", "/api/v1/organizations/enrich", httpx.Response(503))
    with pytest.raises(UpstreamHTTPError, match="503 - Service Unavailable"):
        client.organization_enrichment(OrganizationEnrichmentQuery(domain="acme.io"))


def test_transport_failure_is_reported_with_its_message(failing_client) -> None:
    client = failing_client(httpx.ConnectError("Connection refused"))
    with pytest.raises(TransportError, match="Connection refused"):
        client.people_search(PeopleSearchQuery())


def test_timeout_is_a_transport_failure(failing_client) -> None:
    client = failing_client(httpx.ReadTimeout("timed out"))
    with pytest.raises(TransportError, match="timed out"):
        client.organization_job_postings(OrganizationJobPostingsQuery(organization_id="org1"))


def test_invalid_json_is_an_apollo_error(client, fake_apollo) -> None:
    fake_apollo.route("GET", "/api/v1/organizations/enrich", httpx.Response(200, text="<html>"))
    with pytest.raises(ApolloError, match="Invalid JSON"):
        client.organization_enrichment(OrganizationEnrichmentQuery(domain="acme.io"))


# ---------------------------------------------------------------------------
# Enrichment
# ---------------------------------------------------------------------------


def test_people_enrichment_posts_json_body(client, fake_apollo) -> None:
    fake_apollo.route("POST", "/api/v1/people/match", {"person": {"id": "p1"}})
    result = client.people_enrichment(
        PeopleEnrichmentQuery(first_name="Ada", last_name="Lovelace", domain="acme.io")
    )

    assert result == {"person": {"id": "p1"}}
    assert _json(fake_apollo.last()) == {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "domain": "acme.io",
    }


def test_bulk_people_enrichment_posts_details(client, fake_apollo) -> None:
    fake_apollo.route("POST", "/api/v1/people/bulk_match", {"matches": [{"id": "p1"}, None]})
    query = BulkPeopleEnrichmentQuery(
        details=[{"email": "a@acme.io"}, {"email": "b@acme.io"}],
        reveal_personal_emails=True,
    )
    result = client.bulk_people_enrichment(query)

    assert result == {"matches": [{"id": "p1"}, None]}
    sent = _json(fake_apollo.last())
    assert sent["details"] == [{"email": "a@acme.io"}, {"email": "b@acme.io"}]
    assert sent["reveal_personal_emails"] is True
    assert "webhook_url" not in sent


def test_organization_enrichment_uses_query_params(client, fake_apollo) -> None:
    fake_apollo.route("GET", "/api/v1/organizations/enrich", {"organization": {"id": "o1"}})
    client.organization_enrichment(OrganizationEnrichmentQuery(domain="acme.io"))

    request = fake_apollo.last()
    assert request.method == "GET"
    assert dict(request.url.params) == {"domain": "acme.io"}


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


def test_people_search_sends_filters_as_bracketed_query(client, fake_apollo) -> None:
    envelope = {"people": [], "pagination": {"page": 2}}
    fake_apollo.route("POST", "/api/v1/mixed_people/search", envelope)
    result = client.people_search(PeopleSearchQuery(
        person_titles=["cto", "vp engineering"],
        include_similar_titles=False,
        q_keywords="fintech",
        page=2,
    ))

    assert result == envelope
    request = fake_apollo.last()
    assert _json(request) == {}
    params = request.url.params
    assert params.get_list("person_titles[]") == ["cto", "vp engineering"]
    assert params["include_similar_titles"] == "false"
    assert params["q_keywords"] == "fintech"
    assert params["page"] == "2"
    assert "person_locations[]" not in params


def test_organization_search_sends_revenue_range_sub_keys(client, fake_apollo) -> None:
    fake_apollo.route("POST", "/api/v1/mixed_companies/search", {"organizations": []})
    client.organization_search(OrganizationSearchQuery(
        organization_num_employees_ranges=["1,10", "11,50"],
        revenue_range={"min": 300000, "max": None},
    ))

    params = fake_apollo.last().url.params
    assert params.get_list("organization_num_employees_ranges[]") == ["1,10", "11,50"]
    assert params["revenue_range[min]"] == "300000"
    assert "revenue_range[max]" not in params


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def test_job_postings_passes_response_through(client, fake_apollo) -> None:
    postings = {"organization_job_postings": [{"title": "Engineer"}]}
    fake_apollo.route("GET", "/api/v1/organizations/5f2a/job_postings", postings)
    assert client.organization_job_postings(
        OrganizationJobPostingsQuery(organization_id="5f2a")
    ) == postings


def test_get_person_email_keeps_only_emails(client, fake_apollo) -> None:
    fake_apollo.route(
        "POST",
        "/api/v1/mixed_people/add_to_my_prospects",
        {"contacts": [{"email": "ada@acme.io", "name": "Ada"}, {"email": None}]},
    )
    emails = client.get_person_email(PersonEmailQuery(apollo_id="p1"))

    assert emails == ["ada@acme.io", None]
    request = fake_apollo.last()
    assert request.url.host == "app.apollo.io"
    sent = _json(request)
    assert sent["entity_ids"] == ["p1"]
    assert sent["skip_fetching_people"] is True
    assert isinstance(sent["cacheKey"], int)


def test_get_person_email_without_contacts(client, fake_apollo) -> None:
    fake_apollo.route("POST", "/api/v1/mixed_people/add_to_my_prospects", {"contacts": []})
    assert client.get_person_email(PersonEmailQuery(apollo_id="p1")) == []


def test_get_person_email_empty_response_is_an_error(client, fake_apollo) -> None:
    fake_apollo.route(
        "POST", "/api/v1/mixed_people/add_to_my_prospects", httpx.Response(200, content=b"")
    )
    with pytest.raises(ApolloError, match="No data received"):
        client.get_person_email(PersonEmailQuery(apollo_id="p1"))


# ---------------------------------------------------------------------------
# employees_of_company
# ---------------------------------------------------------------------------


def test_employees_no_organizations_skips_people_search(client, fake_apollo) -> None:
    fake_apollo.route("POST", COMPANY_SEARCH, {"organizations": []})
    fake_apollo.route("POST", PEOPLE_SEARCH, {"people": [{"id": "should-not-happen"}]})

    with pytest.raises(EmptyResultError, match="No organizations found"):
        client.employees_of_company(EmployeesOfCompanyQuery(company="Nobody Inc"))

    assert fake_apollo.paths() == ["api.apollo.io/v1/mixed_companies/search"]


def test_employees_prefers_linkedin_match_over_first_result(client, fake_apollo) -> None:
    fake_apollo.route("POST", COMPANY_SEARCH, {"organizations": [
        {"id": "org-1", "linkedin_url": "http://www.linkedin.com/company/acme-labs"},
        {"id": "org-2", "linkedin_url": "http://www.linkedin.com/company/acme"},
    ]})
    fake_apollo.route("POST", PEOPLE_SEARCH, {"people": [{"id": "p1"}]})

    people = client.employees_of_company(EmployeesOfCompanyQuery(
        company="Acme", linkedin_url="https://linkedin.com/company/ACME/"
    ))

    assert people == [{"id": "p1"}]
    company_request, people_request = fake_apollo.requests
    assert _json(company_request) == {"q_organization_name": "Acme", "page": 1, "limit": 100}
    assert _json(people_request)["organization_ids"] == ["org-2"]


def test_employees_matches_on_website(client, fake_apollo) -> None:
    fake_apollo.route("POST", COMPANY_SEARCH, {"organizations": [
        {"id": "org-1", "website_url": "http://acme.com"},
        {"id": "org-2", "website_url": "https://www.acme.io/"},
    ]})
    fake_apollo.route("POST", PEOPLE_SEARCH, {"people": []})

    client.employees_of_company(EmployeesOfCompanyQuery(company="Acme", website_url="acme.io"))
    assert _json(fake_apollo.last())["organization_ids"] == ["org-2"]


def test_employees_falls_back_to_first_result(client, fake_apollo) -> None:
    fake_apollo.route("POST", COMPANY_SEARCH, {"organizations": [
        {"id": "org-1", "website_url": "http://acme.com"},
        {"id": "org-2", "website_url": "http://acme.io"},
    ]})
    fake_apollo.route("POST", PEOPLE_SEARCH, {"people": None})

    people = client.employees_of_company(
        EmployeesOfCompanyQuery(company="Acme", website_url="https://acme.dev")
    )

    assert people == []
    assert _json(fake_apollo.last())["organization_ids"] == ["org-1"]


def test_employees_candidate_without_id(client, fake_apollo) -> None:
    fake_apollo.route("POST", COMPANY_SEARCH, {"organizations": [{"name": "Acme"}]})
    with pytest.raises(EmptyResultError, match="Could not determine company ID"):
        client.employees_of_company(EmployeesOfCompanyQuery(company="Acme"))
    assert len(fake_apollo.requests) == 1


def test_employees_optional_filters_are_split(client, fake_apollo) -> None:
    fake_apollo.route("POST", COMPANY_SEARCH, {"organizations": [{"id": "org-1"}]})
    fake_apollo.route("POST", PEOPLE_SEARCH, {"people": []})

    client.employees_of_company(EmployeesOfCompanyQuery(
        company="Acme",
        person_seniorities="director, vp",
        contact_email_status="verified,likely to engage",
    ))

    sent = _json(fake_apollo.last())
    assert sent["person_titles"] == ["director", "vp"]
    assert sent["contact_email_status_v2"] == ["verified", "likely to engage"]
    assert sent["limit"] == 100
