"""
Admin Announcement Routes

Authenticated endpoints for editors and import tooling. All routes require
the admin bearer token (see jobboard.api.auth).

Endpoints:
    GET    /api/admin/announcements              - Listing incl. inactive, with total
    GET    /api/admin/announcements/lookup       - Several announcements by id
    GET    /api/admin/announcements/counts       - Totals overall and per type
    GET    /api/admin/announcements/{id}         - Single announcement by id
    GET    /api/admin/announcements/{id}/versions - Update history, newest first
    POST   /api/admin/announcements              - Create
    PATCH  /api/admin/announcements/{id}         - Partial update (records a version)
    DELETE /api/admin/announcements/{id}         - Soft delete (?hard=true removes)
    POST   /api/admin/announcements/bulk/insert  - Batch insert
    POST   /api/admin/announcements/bulk/update  - Batch update
    POST   /api/admin/announcements/bulk/upsert  - Slug-keyed upsert
    POST   /api/admin/announcements/bulk/views   - Batch view increment
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...common.repositories import AnnouncementRepositoryInterface
from ...common.schemas import AnnouncementCreate, AnnouncementUpdate
from ...common.types import AdminSortOrder, ContentType
from ..auth import verify_token
from ..config import settings
from ..dependencies import get_repository
from ..models import (
    AdminListResponse,
    BulkInsertRequest,
    BulkUpdateRequest,
    BulkUpsertRequest,
    BulkViewsRequest,
    BulkViewsResponse,
    DeleteResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin/announcements",
    tags=["admin"],
    dependencies=[Depends(verify_token)],
)


@router.get("", response_model=AdminListResponse)
def admin_list(
    type: Optional[ContentType] = Query(None),
    category: Optional[str] = Query(None),
    organization: Optional[str] = Query(None),
    qualification: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    include_inactive: bool = Query(True, description="Include soft-deleted announcements"),
    sort: AdminSortOrder = Query(AdminSortOrder.NEWEST),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    repo: AnnouncementRepositoryInterface = Depends(get_repository),
):
    filters: Dict[str, Any] = {
        "type": type.value if type else None,
        "category": category,
        "organization": organization,
        "qualification": qualification,
        "location": location,
        "search": search,
        "include_inactive": include_inactive,
        "sort": sort.value,
        "limit": limit,
        "offset": offset,
    }
    data = repo.find_all_admin(filters)
    return AdminListResponse(data=data, count=len(data), total=repo.count_admin(filters))


@router.get("/lookup", response_model=List[Dict[str, Any]])
def admin_lookup(
    ids: str = Query(..., description="Comma-separated announcement ids"),
    repo: AnnouncementRepositoryInterface = Depends(get_repository),
):
    return repo.find_by_ids([i.strip() for i in ids.split(",") if i.strip()])


@router.get("/counts", response_model=Dict[str, Any])
def admin_counts(
    include_inactive: bool = Query(True, description="Count soft-deleted announcements"),
    repo: AnnouncementRepositoryInterface = Depends(get_repository),
):
    return repo.get_admin_counts(include_inactive)


@router.get("/{id}", response_model=Dict[str, Any])
def admin_get(id: str, repo: AnnouncementRepositoryInterface = Depends(get_repository)):
    announcement = repo.find_by_id(id)
    if announcement is None:
        raise HTTPException(status_code=404, detail="Announcement not found")
    return announcement


@router.get("/{id}/versions", response_model=List[Dict[str, Any]])
def admin_versions(id: str, repo: AnnouncementRepositoryInterface = Depends(get_repository)):
    versions = repo.find_versions(id)
    if versions is None:
        raise HTTPException(status_code=404, detail="Announcement not found")
    return versions


@router.post("", response_model=Dict[str, Any], status_code=201)
def admin_create(
    payload: AnnouncementCreate,
    user_id: Optional[str] = Query(None, description="Creator reference"),
    repo: AnnouncementRepositoryInterface = Depends(get_repository),
):
    return repo.create(payload, user_id)


@router.patch("/{id}", response_model=Dict[str, Any])
def admin_update(
    id: str,
    payload: AnnouncementUpdate,
    user_id: Optional[str] = Query(None, description="Editor reference stored with the version"),
    note: Optional[str] = Query(None, max_length=500, description="Change note stored with the version"),
    repo: AnnouncementRepositoryInterface = Depends(get_repository),
):
    announcement = repo.update(id, payload, updated_by=user_id, note=note)
    if announcement is None:
        raise HTTPException(status_code=404, detail="Announcement not found")
    return announcement


@router.delete("/{id}", response_model=DeleteResponse)
def admin_delete(
    id: str,
    hard: bool = Query(False, description="Remove the document instead of deactivating it"),
    repo: AnnouncementRepositoryInterface = Depends(get_repository),
):
    removed = repo.delete(id) if hard else repo.soft_delete(id)
    if not removed:
        raise HTTPException(status_code=404, detail="Announcement not found")

    logger.info(f"{'Deleted' if hard else 'Deactivated'} announcement {id}")
    return DeleteResponse(success=True, id=id, hard=hard)


# =============================================================================
# Bulk endpoints
# =============================================================================

@router.post("/bulk/insert", response_model=Dict[str, Any])
def bulk_insert(
    request: BulkInsertRequest,
    user_id: Optional[str] = Query(None),
    repo: AnnouncementRepositoryInterface = Depends(get_repository),
):
    return repo.batch_insert(request.items, user_id).to_dict()


@router.post("/bulk/update", response_model=Dict[str, Any])
def bulk_update(
    request: BulkUpdateRequest,
    repo: AnnouncementRepositoryInterface = Depends(get_repository),
):
    return repo.batch_update(request.updates).to_dict()


@router.post("/bulk/upsert", response_model=Dict[str, Any])
def bulk_upsert(
    request: BulkUpsertRequest,
    user_id: Optional[str] = Query(None),
    repo: AnnouncementRepositoryInterface = Depends(get_repository),
):
    return repo.bulk_upsert(request.items, user_id).to_dict()


@router.post("/bulk/views", response_model=BulkViewsResponse)
def bulk_views(
    request: BulkViewsRequest,
    repo: AnnouncementRepositoryInterface = Depends(get_repository),
):
    return BulkViewsResponse(modified=repo.batch_increment_views(request.ids))
