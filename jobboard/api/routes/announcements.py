"""
Public Announcement Routes

Read-only endpoints backing the listing, detail and sidebar widgets.

Endpoints:
    GET /api/announcements                 - Offset listing with filters
    GET /api/announcements/feed            - Keyset-paginated listing
    GET /api/announcements/cards           - Keyset-paginated listing cards
    GET /api/announcements/trending        - Most viewed announcements
    GET /api/announcements/deadlines       - Announcements closing in a window
    GET /api/announcements/categories      - Distinct categories
    GET /api/announcements/organizations   - Distinct organizations
    GET /api/announcements/tags            - Tag counts
    GET /api/announcements/{slug}          - Detail by slug (counts a view)
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...common.repositories import AnnouncementRepositoryInterface
from ...common.repositories.documents import utcnow
from ...common.schemas import to_naive_utc
from ...common.types import ContentType, SortOrder
from ..config import settings
from ..dependencies import get_repository
from ..models import ListResponse, PageResponse, TagResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/announcements", tags=["announcements"])

DEFAULT_DEADLINE_WINDOW_DAYS = 30


def _filters(
    type: Optional[ContentType] = Query(None, description="Announcement type"),
    category: Optional[str] = Query(None, description="Category substring, or comma-separated exact values"),
    organization: Optional[str] = Query(None, description="Organization substring, or comma-separated exact values"),
    qualification: Optional[str] = Query(None, description="Minimum qualification substring"),
    location: Optional[str] = Query(None, description="Location substring"),
    search: Optional[str] = Query(None, description="Free-text search"),
    salary_min: Optional[int] = Query(None, ge=0, description="Lowest acceptable salary"),
    salary_max: Optional[int] = Query(None, ge=0, description="Highest acceptable salary"),
    sort: SortOrder = Query(SortOrder.NEWEST, description="newest, oldest or deadline"),
    limit: Optional[int] = Query(
        None,
        ge=1,
        le=settings.max_page_size,
        description="Page size (default 100 for offset listings, 20 for cursor pages)",
    ),
) -> Dict[str, Any]:
    return {
        "type": type.value if type else None,
        "category": category,
        "organization": organization,
        "qualification": qualification,
        "location": location,
        "search": search,
        "salary_min": salary_min,
        "salary_max": salary_max,
        "sort": sort.value,
        "limit": limit,
    }


@router.get("", response_model=ListResponse)
def list_announcements(
    offset: int = Query(0, ge=0, description="Pagination offset"),
    filters: Dict[str, Any] = Depends(_filters),
    repo: AnnouncementRepositoryInterface = Depends(get_repository),
):
    data = repo.find_all({**filters, "offset": offset})
    return ListResponse(data=data, count=len(data))


@router.get("/feed", response_model=PageResponse)
def announcement_feed(
    cursor: Optional[str] = Query(None, description="Last id of the previous page"),
    filters: Dict[str, Any] = Depends(_filters),
    repo: AnnouncementRepositoryInterface = Depends(get_repository),
):
    return repo.find_all_with_cursor({**filters, "cursor": cursor})


@router.get("/cards", response_model=PageResponse)
def listing_cards(
    cursor: Optional[str] = Query(None, description="Last id of the previous page"),
    filters: Dict[str, Any] = Depends(_filters),
    repo: AnnouncementRepositoryInterface = Depends(get_repository),
):
    """Minimal card projection for listing pages."""
    return repo.find_listing_cards({**filters, "cursor": cursor})


@router.get("/trending", response_model=List[Dict[str, Any]])
def trending(
    type: Optional[ContentType] = Query(None),
    limit: int = Query(10, ge=1, le=50),
    repo: AnnouncementRepositoryInterface = Depends(get_repository),
):
    return repo.get_trending(type.value if type else None, limit)


@router.get("/deadlines", response_model=List[Dict[str, Any]])
def upcoming_deadlines(
    start: Optional[datetime] = Query(None, description="Window start (default: now)"),
    end: Optional[datetime] = Query(None, description="Window end (default: start + 30 days)"),
    limit: int = Query(100, ge=1, le=500),
    repo: AnnouncementRepositoryInterface = Depends(get_repository),
):
    start = to_naive_utc(start) if start else utcnow()
    end = to_naive_utc(end) if end else start + timedelta(days=DEFAULT_DEADLINE_WINDOW_DAYS)
    if end < start:
        raise HTTPException(status_code=400, detail="end must not be before start")

    return repo.get_by_deadline_range(start, end, limit)


@router.get("/categories", response_model=List[str])
def categories(repo: AnnouncementRepositoryInterface = Depends(get_repository)):
    return repo.get_categories()


@router.get("/organizations", response_model=List[str])
def organizations(repo: AnnouncementRepositoryInterface = Depends(get_repository)):
    return repo.get_organizations()


@router.get("/tags", response_model=List[TagResponse])
def tags(repo: AnnouncementRepositoryInterface = Depends(get_repository)):
    return repo.get_tags()


@router.get("/{slug}", response_model=Dict[str, Any])
def announcement_detail(
    slug: str,
    repo: AnnouncementRepositoryInterface = Depends(get_repository),
):
    """
    Get a single active announcement by slug.

    The detail may be served from cache; the view counter is incremented on
    every hit and never fails the request.
    """
    announcement = repo.find_by_slug(slug)
    if announcement is None:
        raise HTTPException(status_code=404, detail="Announcement not found")

    repo.increment_view_count(announcement["id"])
    return announcement
