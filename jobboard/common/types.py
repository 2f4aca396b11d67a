"""
Canonical types for the job board announcement data layer.

Field names on the output shapes use the same camelCase keys as the stored
documents and the JSON wire format, so route handlers can return them as-is.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, TypedDict

from typing_extensions import NotRequired


class ContentType(str, Enum):
    """Kinds of announcement published on the board."""
    JOB = "job"
    RESULT = "result"
    ADMIT_CARD = "admit-card"
    ANSWER_KEY = "answer-key"
    ADMISSION = "admission"
    SYLLABUS = "syllabus"


class SortOrder(str, Enum):
    """Public listing sort options."""
    NEWEST = "newest"
    OLDEST = "oldest"
    # Accepted for compatibility; currently orders like NEWEST.
    DEADLINE = "deadline"


class AdminSortOrder(str, Enum):
    """Admin listing sort options (superset of SortOrder)."""
    NEWEST = "newest"
    OLDEST = "oldest"
    DEADLINE = "deadline"
    UPDATED = "updated"
    VIEWS = "views"


class ImportantDate(TypedDict):
    eventName: str
    eventDate: Optional[str]           # ISO-8601
    description: NotRequired[Optional[str]]


class Announcement(TypedDict):
    """Public announcement shape returned by the repository."""
    id: str                            # ObjectId hex; ordering embeds creation time
    title: str
    slug: str
    type: str                          # ContentType value
    category: str
    organization: str
    content: Optional[str]
    externalLink: Optional[str]
    location: Optional[str]
    deadline: Optional[str]            # ISO-8601
    minQualification: Optional[str]
    ageLimit: Optional[str]
    applicationFee: Optional[str]
    totalPosts: Optional[int]
    salaryMin: Optional[int]
    salaryMax: Optional[int]
    tags: List[str]                    # display order follows insertion
    importantDates: List[ImportantDate]
    jobDetails: Optional[Any]          # opaque, type-specific
    postedBy: Optional[str]
    postedAt: Optional[str]
    updatedAt: Optional[str]
    isActive: bool
    viewCount: int
    version: int                       # 1 + number of recorded updates


class AnnouncementVersion(TypedDict):
    """One entry of an announcement's update history (newest first)."""
    version: int                       # version the snapshot was taken at
    updatedAt: Optional[str]
    updatedBy: Optional[str]
    note: Optional[str]
    snapshot: Dict[str, Any]           # stored fields before the update


class AdminCounts(TypedDict):
    total: int
    byType: Dict[str, int]             # every ContentType value, zero-filled


class ListingCard(TypedDict):
    """Minimal projection used by list views."""
    id: str
    title: str
    slug: str
    type: str
    category: str
    organization: str
    deadline: Optional[str]
    totalPosts: Optional[int]
    postedAt: Optional[str]
    viewCount: int


class CursorPage(TypedDict):
    """Keyset pagination envelope."""
    data: List[Dict[str, Any]]
    nextCursor: Optional[str]
    hasMore: bool


class TagCount(TypedDict):
    name: str
    count: int


def empty_page() -> CursorPage:
    """Neutral page returned for invalid cursors and degraded reads."""
    return {"data": [], "nextCursor": None, "hasMore": False}


def empty_admin_counts() -> AdminCounts:
    return {"total": 0, "byType": {content_type.value: 0 for content_type in ContentType}}
