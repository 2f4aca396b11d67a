"""
Tests for announcement query building.
"""

import re

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING

from jobboard.common.repositories.query import (
    apply_cursor,
    build_admin_query,
    build_live_query,
    build_public_query,
    escape_regex,
    parse_object_id,
    resolve_admin_sort,
    resolve_sort,
    salary_clauses,
    string_filter,
    SEARCH_FIELDS,
)
from jobboard.common.types import ContentType, SortOrder


class TestEscapeRegex:
    """Tests for regex escaping of user input."""

    def test_escapes_metacharacters(self):
        assert escape_regex("a.b*c") == r"a\.b\*c"
        assert escape_regex("(x|y)") == r"\(x\|y\)"

    def test_escaped_pattern_matches_literally(self):
        """Escaped input should only match the literal text."""
        raw = "C++ (Level-2) [Grade A] $100?"
        pattern = re.compile(escape_regex(raw))

        assert pattern.search(f"Post: {raw} only")
        assert not pattern.search("C (Level-2) [Grade A] $100")

    def test_plain_text_unchanged(self):
        assert escape_regex("SSC CGL 2026") == "SSC CGL 2026"


class TestBuildPublicQuery:
    """Tests for public filter construction."""

    def test_empty_filters_only_excludes_inactive(self):
        assert build_public_query() == {"isActive": {"$ne": False}}
        assert build_public_query({}) == build_live_query()

    def test_type_is_exact(self):
        query = build_public_query({"type": ContentType.RESULT})
        assert query["type"] == "result"

    def test_substring_filters_are_escaped_and_case_insensitive(self):
        query = build_public_query({
            "category": "Bank.*",
            "organization": "SBI",
            "qualification": "B.Tech",
            "location": "Delhi",
        })

        assert query["category"] == {"$regex": r"Bank\.\*", "$options": "i"}
        assert query["organization"] == {"$regex": "SBI", "$options": "i"}
        assert query["minQualification"] == {"$regex": r"B\.Tech", "$options": "i"}
        assert query["location"] == {"$regex": "Delhi", "$options": "i"}

    def test_search_ors_across_text_fields(self):
        query = build_public_query({"search": "  railway  "})

        clause = query["$and"][0]["$or"]
        assert [list(c.keys())[0] for c in clause] == list(SEARCH_FIELDS)
        assert clause[0]["title"] == {"$regex": "railway", "$options": "i"}

    def test_blank_filters_ignored(self):
        query = build_public_query({"category": "", "search": "   ", "type": None})
        assert query == build_live_query()


class TestStringFilter:
    """Tests for single and comma-separated field filters."""

    def test_single_value_is_substring(self):
        assert string_filter("Bank", multi=True) == {"$regex": "Bank", "$options": "i"}

    def test_list_becomes_exact_in(self):
        assert string_filter(" Police, Railway ,, ", multi=True) == {"$in": ["Police", "Railway"]}

    def test_commas_literal_without_multi(self):
        assert string_filter("B.Tech, M.Tech") == {"$regex": r"B\.Tech, M\.Tech", "$options": "i"}

    def test_blank_values(self):
        assert string_filter("", multi=True) is None
        assert string_filter(" , ", multi=True) is None
        assert string_filter(None) is None

    def test_public_query_uses_in_for_organization_lists(self):
        query = build_public_query({"organization": "UPSC,SSC", "qualification": "10th,12th"})

        assert query["organization"] == {"$in": ["UPSC", "SSC"]}
        assert query["minQualification"] == {"$regex": "10th,12th", "$options": "i"}


class TestSalaryClauses:

    def test_both_bounds(self):
        assert salary_clauses(30000, 70000) == [
            {"$or": [{"salaryMax": {"$gte": 30000}}, {"salaryMin": {"$gte": 30000}}]},
            {"$or": [{"salaryMin": {"$lte": 70000}}, {"salaryMax": {"$lte": 70000}}]},
        ]

    def test_invalid_and_missing_bounds_ignored(self):
        assert salary_clauses() == []
        assert salary_clauses("abc", "") == []
        assert salary_clauses("25000")[0]["$or"][0] == {"salaryMax": {"$gte": 25000}}

    def test_added_to_public_query_alongside_search(self):
        query = build_public_query({"salary_min": 50000, "search": "clerk"})

        assert query["$and"][0] == {"$or": [{"salaryMax": {"$gte": 50000}}, {"salaryMin": {"$gte": 50000}}]}
        assert "$or" in query["$and"][1]


class TestBuildAdminQuery:

    def test_excludes_inactive_by_default(self):
        assert build_admin_query({}) == build_live_query()

    def test_include_inactive_drops_live_filter(self):
        query = build_admin_query({"include_inactive": True, "type": "job"})
        assert query == {"type": "job"}


class TestSortResolution:
    """Tests for sort option mapping."""

    def test_newest_is_id_descending(self):
        assert resolve_sort(SortOrder.NEWEST) == [("_id", DESCENDING)]
        assert resolve_sort(None) == [("_id", DESCENDING)]

    def test_oldest_is_id_ascending(self):
        assert resolve_sort("oldest") == [("_id", ASCENDING)]

    def test_deadline_orders_like_newest(self):
        assert resolve_sort("deadline") == resolve_sort("newest")

    def test_unknown_sort_falls_back_to_newest(self):
        assert resolve_sort("bogus") == [("_id", DESCENDING)]

    def test_admin_sorts(self):
        assert resolve_admin_sort("updated")[0] == ("updatedAt", DESCENDING)
        assert resolve_admin_sort("views")[0] == ("viewCount", DESCENDING)
        assert resolve_admin_sort("oldest") == [("_id", ASCENDING)]


class TestCursor:
    """Tests for keyset cursor bounds."""

    def test_no_cursor_leaves_query_untouched(self):
        query = {}
        assert apply_cursor(query, None) is True
        assert query == {}

    def test_newest_uses_less_than(self):
        oid = ObjectId()
        query = {}
        assert apply_cursor(query, str(oid), "newest") is True
        assert query == {"_id": {"$lt": oid}}

    def test_oldest_uses_greater_than(self):
        oid = ObjectId()
        query = {}
        apply_cursor(query, str(oid), SortOrder.OLDEST)
        assert query == {"_id": {"$gt": oid}}

    def test_malformed_cursor_rejected(self):
        query = {}
        assert apply_cursor(query, "not-an-id", "newest") is False
        assert "_id" not in query


class TestParseObjectId:

    def test_valid_string(self):
        oid = ObjectId()
        assert parse_object_id(str(oid)) == oid

    def test_object_id_passthrough(self):
        oid = ObjectId()
        assert parse_object_id(oid) is oid

    def test_invalid_values(self):
        assert parse_object_id("xyz") is None
        assert parse_object_id("") is None
        assert parse_object_id(None) is None
        assert parse_object_id(12345) is None
