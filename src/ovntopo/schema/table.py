"""Search and sort for resource list views."""

from typing import Iterable

from ..ingest.resources import creation_timestamp, resource_name, spec_field


def matches(resource: dict, search: str) -> bool:
    """Case-insensitive substring match on the name or any spec value."""
    if not search:
        return True
    needle = search.lower()
    if needle in (resource_name(resource) or "").lower():
        return True
    spec = resource.get("spec") if isinstance(resource, dict) else None
    if isinstance(spec, dict):
        return any(needle in str(v).lower() for v in spec.values())
    return False


def _sort_key(sort_field: str):
    if sort_field == "name":
        return lambda r: resource_name(r) or ""
    if sort_field == "created":
        # RFC 3339 timestamps sort correctly as strings
        return creation_timestamp
    return lambda r: str(spec_field(r, sort_field) or "")


def filter_and_sort(
    resources: Iterable,
    search: str = "",
    sort_field: str = "name",
    descending: bool = False,
) -> list:
    rows = [r for r in resources if matches(r, search)]
    return sorted(rows, key=_sort_key(sort_field), reverse=descending)
