# =============================================================================
# core/formatting.py  —  Query-string flattening & small normalizers
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Apollo's search endpoints take their filters as query parameters using a
#   bracket convention instead of a JSON body:
#
#       {"person_titles": ["cto", "vp"]}        →  person_titles[]=cto
#                                                  person_titles[]=vp
#       {"revenue_range": {"min": 1, "max": 9}} →  revenue_range[min]=1
#                                                  revenue_range[max]=9
#
#   format_query_params() produces that flat form.  It returns a LIST of
#   (key, value) pairs rather than a dict because the same key repeats once
#   per array element, and httpx encodes a list of pairs exactly as given.
#
#   The two other helpers are normalizers used by single operations:
#     - sanitize_ranges(): "11-50" → "11,50" for employee-count ranges
#     - strip_url():       canonical form of a website/LinkedIn URL so two
#                          spellings of the same company page compare equal
#
# Everything here is pure: no I/O, no logging, no shared state.
# =============================================================================

from typing import Any, Mapping


def format_query_params(filters: Mapping[str, Any]) -> list[tuple[str, Any]]:
    """Flatten a filter object into Apollo's bracketed query parameters.

    Args:
        filters: Mapping of filter name to value.  Values may be scalars,
            lists/tuples, or one-level nested mappings (e.g. a min/max range).

    Returns:
        A list of (key, value) pairs.  None values are dropped, sequence
        elements keep their original order under ``key[]``, and nested
        mappings become ``key[sub]`` entries for each non-None sub-value.
    """
    params: list[tuple[str, Any]] = []

    for key, value in filters.items():
        if value is None:
            continue

        if isinstance(value, (list, tuple)):
            params.extend((f"{key}[]", item) for item in value)
        elif isinstance(value, Mapping):
            for sub_key, sub_value in value.items():
                if sub_value is not None:
                    params.append((f"{key}[{sub_key}]", sub_value))
        else:
            params.append((key, value))

    return params


def sanitize_ranges(ranges: Any) -> Any:
    """Rewrite "min-max" employee ranges to Apollo's "min,max" form.

    Only the first hyphen of each string is replaced.  Entries that are not
    strings, and inputs that are not lists, are returned untouched.
    """
    if not isinstance(ranges, list):
        return ranges

    return [
        item.replace("-", ",", 1) if isinstance(item, str) and "-" in item else item
        for item in ranges
    ]


def strip_url(url: Any) -> Any:
    """Reduce a URL to a comparison key.

    "https://www.Example.com/" and "example.com" both become "example.com".
    Empty input gives None; anything that is not a string is returned as-is.
    """
    if not url:
        return None
    if not isinstance(url, str):
        return url

    stripped = url.strip().lower()
    for scheme in ("https://", "http://"):
        if stripped.startswith(scheme):
            stripped = stripped[len(scheme):]
            break
    if stripped.startswith("www."):
        stripped = stripped[len("www."):]
    if stripped.endswith("/"):
        stripped = stripped[:-1]
    return stripped


def urls_match(candidate: Any, wanted: Any) -> bool:
    """True when both URLs are present and strip to the same key."""
    left, right = strip_url(candidate), strip_url(wanted)
    return bool(left) and bool(right) and left == right


def split_csv(value: str | None) -> list[str]:
    """Split a comma-separated tool argument into trimmed, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]
