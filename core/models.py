# =============================================================================
# core/models.py  —  Argument records (the "nouns" of each tool call)
# =============================================================================
#
# Every MCP tool receives a loosely-typed argument bag.  Before anything
# reaches the Apollo client, the bag is turned into ONE of the dataclasses
# below: a closed set, one record per operation.
#
#   - Unknown keys are ignored (the MCP host may send extras).
#   - Required fields are checked in __post_init__, so a record that exists
#     is a record the client can send.  A missing required field raises
#     ValidationError and no network call is ever made.
#   - Records are frozen: once built they are not mutated on the way to
#     the client.  Range sanitizing builds a NEW record (see replace()).
#
# to_params() gives the non-None fields as a plain dict: the JSON body or
# the filter object that core/formatting.py flattens.
# =============================================================================

from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional

from core.exceptions import ValidationError

# Bulk enrichment accepts at most this many people per request.
MAX_BULK_DETAILS = 10

_STR = {"kind": "str"}
_LIST = {"kind": "list"}
_MAPPING = {"kind": "mapping"}


def _string_field():
    return field(default=None, metadata=_STR)


def _list_field():
    return field(default=None, metadata=_LIST)


def _mapping_field():
    return field(default=None, metadata=_MAPPING)


class ArgumentRecord:
    """Shared behaviour for the per-operation argument dataclasses."""

    @classmethod
    def from_arguments(cls, arguments: Optional[Mapping[str, Any]]):
        """Build the record from a tool argument bag, keeping declared keys only."""
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, Mapping):
            raise ValidationError("Tool arguments must be an object")
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in arguments.items() if k in names})

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            kind = f.metadata.get("kind")
            if kind == "str" and not isinstance(value, str):
                raise ValidationError(f"'{f.name}' must be a string")
            if kind == "list" and not isinstance(value, (list, tuple)):
                raise ValidationError(f"'{f.name}' must be an array")
            if kind == "mapping" and not isinstance(value, Mapping):
                raise ValidationError(f"'{f.name}' must be an object")

    def to_params(self) -> dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


def _require(record: ArgumentRecord, name: str, message: str) -> None:
    value = getattr(record, name)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(message)


# -----------------------------------------------------------------------------
# Enrichment
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class PeopleEnrichmentQuery(ArgumentRecord):
    """Partial identifiers for one person (POST /people/match)."""

    first_name: Optional[str] = _string_field()
    last_name: Optional[str] = _string_field()
    email: Optional[str] = _string_field()
    domain: Optional[str] = _string_field()
    organization_name: Optional[str] = _string_field()
    linkedin_url: Optional[str] = _string_field()


@dataclass(frozen=True)
class BulkPeopleEnrichmentQuery(ArgumentRecord):
    """Up to ten people enriched in one request (POST /people/bulk_match).

    reveal_* flags may consume Apollo credits.  Phone numbers are delivered
    asynchronously, so reveal_phone_number needs a webhook_url.
    """

    details: Optional[list] = _list_field()
    reveal_personal_emails: Optional[bool] = None
    reveal_phone_number: Optional[bool] = None
    webhook_url: Optional[str] = _string_field()

    def __post_init__(self):
        if self.details is None:
            raise ValidationError(
                "The 'details' array is required for bulk people enrichment"
            )
        super().__post_init__()
        if len(self.details) > MAX_BULK_DETAILS:
            raise ValidationError(
                f"Bulk people enrichment accepts at most {MAX_BULK_DETAILS} details, "
                f"got {len(self.details)}"
            )
        if not all(isinstance(item, Mapping) for item in self.details):
            raise ValidationError("Every entry in 'details' must be an object")
        if self.reveal_phone_number and not self.webhook_url:
            raise ValidationError("'webhook_url' is required when reveal_phone_number is true")


@dataclass(frozen=True)
class OrganizationEnrichmentQuery(ArgumentRecord):
    """Domain and/or name of one company (GET /organizations/enrich)."""

    domain: Optional[str] = _string_field()
    name: Optional[str] = _string_field()


# -----------------------------------------------------------------------------
# Search
# -----------------------------------------------------------------------------
# Both search records are flattened by format_query_params() and sent as the
# query string of an empty-bodied POST.  Pagination is passed through as-is;
# the bridge never walks pages on its own.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class PeopleSearchQuery(ArgumentRecord):
    """Filters for POST /mixed_people/search."""

    person_titles: Optional[list[str]] = _list_field()
    include_similar_titles: Optional[bool] = None
    person_locations: Optional[list[str]] = _list_field()
    person_seniorities: Optional[list[str]] = _list_field()
    organization_locations: Optional[list[str]] = _list_field()
    q_organization_domains_list: Optional[list[str]] = _list_field()
    contact_email_status: Optional[list[str]] = _list_field()
    organization_ids: Optional[list[str]] = _list_field()
    organization_num_employees_ranges: Optional[list[str]] = _list_field()
    q_keywords: Optional[str] = _string_field()
    page: Optional[int] = None
    per_page: Optional[int] = None


@dataclass(frozen=True)
class OrganizationSearchQuery(ArgumentRecord):
    """Filters for POST /mixed_companies/search.

    organization_num_employees_ranges entries look like "1,10" or "11,50";
    revenue_range is {"min": 300000, "max": 50000000} without separators.
    """

    q_organization_domains_list: Optional[list[str]] = _list_field()
    organization_locations: Optional[list[str]] = _list_field()
    organization_not_locations: Optional[list[str]] = _list_field()
    organization_num_employees_ranges: Optional[list[str]] = _list_field()
    revenue_range: Optional[dict[str, Any]] = _mapping_field()
    currently_using_any_of_technology_uids: Optional[list[str]] = _list_field()
    q_organization_keyword_tags: Optional[list[str]] = _list_field()
    q_organization_name: Optional[str] = _string_field()
    organization_ids: Optional[list[str]] = _list_field()
    page: Optional[int] = None
    per_page: Optional[int] = None


# -----------------------------------------------------------------------------
# Single-identifier lookups
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class OrganizationJobPostingsQuery(ArgumentRecord):
    organization_id: Optional[str] = _string_field()

    def __post_init__(self):
        super().__post_init__()
        _require(self, "organization_id", "Organization ID is required")


@dataclass(frozen=True)
class PersonEmailQuery(ArgumentRecord):
    apollo_id: Optional[str] = _string_field()

    def __post_init__(self):
        super().__post_init__()
        _require(self, "apollo_id", "Apollo ID is required")


@dataclass(frozen=True)
class EmployeesOfCompanyQuery(ArgumentRecord):
    """Company name plus optional URLs used to pick the right match.

    person_seniorities and contact_email_status are comma-separated strings,
    e.g. "director, vp" and "verified,likely to engage".
    """

    company: Optional[str] = _string_field()
    website_url: Optional[str] = _string_field()
    linkedin_url: Optional[str] = _string_field()
    person_seniorities: Optional[str] = _string_field()
    contact_email_status: Optional[str] = _string_field()

    def __post_init__(self):
        super().__post_init__()
        _require(self, "company", "Company name is required")
