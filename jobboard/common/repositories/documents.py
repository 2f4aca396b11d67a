"""
Mapping between stored announcement documents and the public shapes.
"""

import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from ..schemas import AnnouncementCreate, AnnouncementUpdate, BulkUpsertItem, ImportantDateInput
from ..types import Announcement, AnnouncementVersion, ListingCard

MAX_SLUG_BASE_LENGTH = 200

# Newest-first history entries kept per announcement
VERSION_HISTORY_LIMIT = 20

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

# Update fields that may never be cleared with an explicit null
_REQUIRED_FIELDS = {"title", "type", "category", "organization", "tags", "is_active"}

# AnnouncementUpdate/AnnouncementCreate attribute -> stored field
FIELD_MAP = {
    "title": "title",
    "type": "type",
    "category": "category",
    "organization": "organization",
    "content": "content",
    "external_link": "externalLink",
    "location": "location",
    "deadline": "deadline",
    "min_qualification": "minQualification",
    "age_limit": "ageLimit",
    "application_fee": "applicationFee",
    "total_posts": "totalPosts",
    "salary_min": "salaryMin",
    "salary_max": "salaryMax",
    "tags": "tags",
    "important_dates": "importantDates",
    "job_details": "jobDetails",
    "is_active": "isActive",
}

# Stored fields captured in each version snapshot
SNAPSHOT_FIELDS = tuple(FIELD_MAP.values()) + ("postedBy", "postedAt", "updatedAt", "viewCount")


def utcnow() -> datetime:
    """Naive UTC timestamp at millisecond precision (what MongoDB stores)."""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def generate_slug(title: str, now_ms: Optional[int] = None) -> str:
    """
    URL-safe slug: lowercase, non-alphanumeric runs collapsed to '-',
    trimmed, base truncated to 200 chars, suffixed with epoch millis.

    The suffix reduces collisions; it does not guarantee uniqueness.
    """
    base = _NON_ALNUM.sub("-", title.lower()).strip("-")[:MAX_SLUG_BASE_LENGTH]
    suffix = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{base}-{suffix}"


def _iso(value: Any) -> Optional[str]:
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat(timespec="milliseconds")


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _important_dates_to_docs(dates: Optional[List[ImportantDateInput]]) -> List[Dict[str, Any]]:
    return [
        {
            "eventName": date.event_name,
            "eventDate": date.event_date,
            "description": date.description,
        }
        for date in dates or []
    ]


def content_fields(data: AnnouncementCreate) -> Dict[str, Any]:
    """Stored content fields for a create/upsert payload."""
    return {
        "title": data.title,
        "type": _enum_value(data.type),
        "category": data.category,
        "organization": data.organization,
        "content": data.content,
        "externalLink": data.external_link,
        "location": data.location,
        "deadline": data.deadline,
        "minQualification": data.min_qualification,
        "ageLimit": data.age_limit,
        "applicationFee": data.application_fee,
        "totalPosts": data.total_posts,
        "salaryMin": data.salary_min,
        "salaryMax": data.salary_max,
        "tags": list(data.tags),
        "importantDates": _important_dates_to_docs(data.important_dates),
        "jobDetails": data.job_details,
    }


def build_new_document(
    data: AnnouncementCreate,
    user_id: Optional[str],
    now: datetime,
    slug: Optional[str] = None,
) -> Dict[str, Any]:
    """Full document for insertion, with creation-only fields stamped."""
    doc = content_fields(data)
    doc.update({
        "slug": slug or generate_slug(data.title),
        "postedBy": user_id,
        "postedAt": now,
        "updatedAt": now,
        "isActive": True,
        "viewCount": 0,
        "version": 1,
        "versions": [],
    })
    return doc


def _stored_value(name: str, value: Any) -> Any:
    if name == "important_dates":
        return _important_dates_to_docs(value)
    if name == "tags":
        return list(value)
    return _enum_value(value)


def build_update_set(data: AnnouncementUpdate, now: datetime) -> Dict[str, Any]:
    """
    ``$set`` document for a partial update.

    Only explicitly supplied fields are included. Explicit None clears
    optional fields; it is ignored for required ones.
    """
    update: Dict[str, Any] = {"updatedAt": now}

    for name in data.model_fields_set:
        field = FIELD_MAP.get(name)
        if field is None:
            continue
        value = getattr(data, name)
        if value is None and name in _REQUIRED_FIELDS:
            continue
        update[field] = _stored_value(name, value)

    return update


def build_upsert_update(
    data: BulkUpsertItem,
    user_id: Optional[str],
    now: datetime,
) -> Dict[str, Dict[str, Any]]:
    """
    Update document for a slug-keyed upsert.

    Fields present in the import row are ``$set``. Everything else, including
    the creation-only audit fields, goes through ``$setOnInsert``, so a row that
    omits a field never clears a value edited on the stored document.
    """
    supplied = {FIELD_MAP[name] for name in data.model_fields_set if name in FIELD_MAP}
    content = content_fields(data)

    set_fields = {field: value for field, value in content.items() if field in supplied}
    set_fields["updatedAt"] = now

    on_insert = {field: value for field, value in content.items() if field not in supplied}
    on_insert.update({
        "slug": data.slug,
        "postedBy": user_id,
        "postedAt": now,
        "isActive": True,
        "viewCount": 0,
        "version": 1,
        "versions": [],
    })
    return {"$set": set_fields, "$setOnInsert": on_insert}


def build_version_entry(
    existing: Mapping[str, Any],
    now: datetime,
    updated_by: Optional[str] = None,
    note: Optional[str] = None,
) -> Dict[str, Any]:
    """History entry capturing ``existing`` as it was before an update."""
    snapshot = {field: existing.get(field) for field in SNAPSHOT_FIELDS}
    snapshot["tags"] = list(existing.get("tags") or [])
    return {
        "version": existing.get("version") or 1,
        "updatedAt": now,
        "updatedBy": updated_by,
        "note": note,
        "snapshot": snapshot,
    }


def doc_to_version(entry: Mapping[str, Any]) -> AnnouncementVersion:
    snapshot = dict(entry.get("snapshot") or {})
    for field in ("deadline", "postedAt", "updatedAt"):
        snapshot[field] = _iso(snapshot.get(field))
    snapshot["importantDates"] = [
        dict(date, eventDate=_iso(date.get("eventDate")))
        for date in snapshot.get("importantDates") or []
    ]
    return {
        "version": entry.get("version") or 1,
        "updatedAt": _iso(entry.get("updatedAt")),
        "updatedBy": entry.get("updatedBy"),
        "note": entry.get("note"),
        "snapshot": snapshot,
    }


def doc_to_announcement(doc: Mapping[str, Any]) -> Announcement:
    """Convert a stored document to the public Announcement shape."""
    return {
        "id": str(doc["_id"]),
        "title": doc.get("title") or "",
        "slug": doc.get("slug") or "",
        "type": doc.get("type") or "",
        "category": doc.get("category") or "",
        "organization": doc.get("organization") or "",
        "content": doc.get("content"),
        "externalLink": doc.get("externalLink"),
        "location": doc.get("location"),
        "deadline": _iso(doc.get("deadline")),
        "minQualification": doc.get("minQualification"),
        "ageLimit": doc.get("ageLimit"),
        "applicationFee": doc.get("applicationFee"),
        "totalPosts": doc.get("totalPosts"),
        "salaryMin": doc.get("salaryMin"),
        "salaryMax": doc.get("salaryMax"),
        "tags": list(doc.get("tags") or []),
        "importantDates": [
            {
                "eventName": date.get("eventName", ""),
                "eventDate": _iso(date.get("eventDate")),
                "description": date.get("description"),
            }
            for date in doc.get("importantDates") or []
        ],
        "jobDetails": doc.get("jobDetails"),
        "postedBy": doc.get("postedBy"),
        "postedAt": _iso(doc.get("postedAt")),
        "updatedAt": _iso(doc.get("updatedAt")),
        "isActive": doc.get("isActive") is not False,
        "viewCount": doc.get("viewCount") or 0,
        "version": doc.get("version") or 1,
    }


def doc_to_listing_card(doc: Mapping[str, Any]) -> ListingCard:
    """Convert a projected document to a ListingCard."""
    return {
        "id": str(doc["_id"]),
        "title": doc.get("title") or "",
        "slug": doc.get("slug") or "",
        "type": doc.get("type") or "",
        "category": doc.get("category") or "",
        "organization": doc.get("organization") or "",
        "deadline": _iso(doc.get("deadline")),
        "totalPosts": doc.get("totalPosts"),
        "postedAt": _iso(doc.get("postedAt")),
        "viewCount": doc.get("viewCount") or 0,
    }
