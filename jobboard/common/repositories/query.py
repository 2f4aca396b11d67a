"""
Query building for announcement reads.

Translates plain filter dicts (as received from route handlers) into MongoDB
filters, sort specs and keyset-pagination bounds.

Ordering note: "newest first" sorts on ``_id`` descending. This is only valid
because ObjectIds embed their creation time; a different id scheme needs an
explicit timestamp index instead.
"""

import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING

SortSpec = List[Tuple[str, int]]

# Text fields OR-matched by the free-text ``search`` filter
SEARCH_FIELDS = ("title", "content", "organization", "category", "tags")

# Substring filters: filter key -> document field
SUBSTRING_FILTERS = {
    "category": "category",
    "organization": "organization",
    "qualification": "minQualification",
    "location": "location",
}

# Filters that also accept a comma-separated list of exact values
MULTI_VALUE_FILTERS = {"category", "organization"}

LISTING_CARD_PROJECTION: Dict[str, int] = {
    "_id": 1,
    "title": 1,
    "slug": 1,
    "type": 1,
    "category": 1,
    "organization": 1,
    "deadline": 1,
    "totalPosts": 1,
    "postedAt": 1,
    "viewCount": 1,
}

_REGEX_SPECIALS = re.compile(r"[.*+?^${}()|\[\]\\]")


def escape_regex(value: str) -> str:
    """Escape regex metacharacters so user input matches literally."""
    return _REGEX_SPECIALS.sub(lambda m: "\\" + m.group(0), value)


def substring_match(value: str) -> Dict[str, str]:
    """Case-insensitive literal substring condition."""
    return {"$regex": escape_regex(value), "$options": "i"}


def parse_filter_list(value: Any) -> List[str]:
    """Split a comma-separated filter value, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in str(value).split(",") if item.strip()]


def string_filter(value: Any, multi: bool = False) -> Optional[Dict[str, Any]]:
    """
    Condition for a free-text field filter.

    A single value is a case-insensitive substring match. With ``multi``, two
    or more comma-separated values become an exact ``$in`` match.
    """
    if not value:
        return None
    values = parse_filter_list(value) if multi else [str(value).strip()]
    if not values or not values[0]:
        return None
    if len(values) > 1:
        return {"$in": values}
    return substring_match(values[0])


def _salary_bound(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def salary_clauses(salary_min: Any = None, salary_max: Any = None) -> List[Dict[str, Any]]:
    """
    Overlap conditions for a requested salary range.

    A posting matches ``salary_min`` when either end of its range reaches it,
    and ``salary_max`` when either end stays within it.
    """
    clauses: List[Dict[str, Any]] = []
    low, high = _salary_bound(salary_min), _salary_bound(salary_max)
    if low is not None:
        clauses.append({"$or": [{"salaryMax": {"$gte": low}}, {"salaryMin": {"$gte": low}}]})
    if high is not None:
        clauses.append({"$or": [{"salaryMin": {"$lte": high}}, {"salaryMax": {"$lte": high}}]})
    return clauses


def build_live_query() -> Dict[str, Any]:
    """Active documents; documents predating the flag count as active."""
    return {"isActive": {"$ne": False}}


def _add_clause(query: Dict[str, Any], clause: Dict[str, Any]) -> None:
    query.setdefault("$and", []).append(clause)


def _apply_filters(query: Dict[str, Any], filters: Mapping[str, Any]) -> Dict[str, Any]:
    content_type = filters.get("type")
    if content_type:
        query["type"] = getattr(content_type, "value", content_type)

    for key, field in SUBSTRING_FILTERS.items():
        condition = string_filter(filters.get(key), multi=key in MULTI_VALUE_FILTERS)
        if condition:
            query[field] = condition

    for clause in salary_clauses(filters.get("salary_min"), filters.get("salary_max")):
        _add_clause(query, clause)

    search = (filters.get("search") or "").strip()
    if search:
        condition = substring_match(search)
        _add_clause(query, {"$or": [{field: dict(condition)} for field in SEARCH_FIELDS]})

    return query


def build_public_query(filters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Build the filter for public read paths.

    Supported keys: type, category, organization, qualification, location,
    search, salary_min, salary_max. All are optional and AND-combined;
    ``search`` ORs across SEARCH_FIELDS. category and organization accept a
    comma-separated list of exact values.
    """
    return _apply_filters(build_live_query(), filters or {})


def build_admin_query(filters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Same filters as the public query; inactive documents only with ``include_inactive``."""
    filters = filters or {}
    query: Dict[str, Any] = {} if filters.get("include_inactive") else build_live_query()
    return _apply_filters(query, filters)


def _sort_value(sort: Any) -> Optional[str]:
    return getattr(sort, "value", sort)


def resolve_sort(sort: Any = None) -> SortSpec:
    """
    Map a public sort option onto an ``_id`` ordering.

    ``deadline`` intentionally resolves to newest-first (observed behaviour,
    pending a product decision); unknown values fall back to newest.
    """
    if _sort_value(sort) == "oldest":
        return [("_id", ASCENDING)]
    return [("_id", DESCENDING)]


def resolve_admin_sort(sort: Any = None) -> SortSpec:
    value = _sort_value(sort)
    if value == "updated":
        return [("updatedAt", DESCENDING), ("_id", DESCENDING)]
    if value == "views":
        return [("viewCount", DESCENDING), ("_id", DESCENDING)]
    return resolve_sort(value)


def is_ascending(sort: Any) -> bool:
    return _sort_value(sort) == "oldest"


def parse_object_id(value: Any) -> Optional[ObjectId]:
    """Return an ObjectId for a valid id string, None otherwise."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def apply_cursor(query: Dict[str, Any], cursor: Optional[str], sort: Any = None) -> bool:
    """
    Add the keyset bound for ``cursor`` (the last id of the previous page).

    Returns False when the cursor is malformed; callers answer with an empty
    page instead of raising.
    """
    if not cursor:
        return True

    cursor_id = parse_object_id(cursor)
    if cursor_id is None:
        return False

    query["_id"] = {"$gt": cursor_id} if is_ascending(sort) else {"$lt": cursor_id}
    return True
