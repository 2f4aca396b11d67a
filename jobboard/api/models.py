"""
Request and response models for the REST adapter.

Announcement payloads themselves are validated by jobboard.common.schemas;
bulk requests carry raw items so one bad item is reported per item instead
of rejecting the whole batch.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ListResponse(BaseModel):
    """Offset listing payload."""

    data: List[Dict[str, Any]]
    count: int


class AdminListResponse(ListResponse):
    """Admin listing payload with the unpaginated total."""

    total: int


class PageResponse(BaseModel):
    """Keyset page payload."""

    data: List[Dict[str, Any]]
    nextCursor: Optional[str] = None
    hasMore: bool = False


class TagResponse(BaseModel):
    name: str
    count: int


class DeleteResponse(BaseModel):
    success: bool
    id: str
    hard: bool


class BulkInsertRequest(BaseModel):
    """Request body for a batch insert."""

    items: List[Dict[str, Any]] = Field(..., min_length=1, max_length=1000)


class BulkUpdateRequest(BaseModel):
    """Request body for a batch update: [{"id": ..., "data": {...}}, ...]."""

    updates: List[Dict[str, Any]] = Field(..., min_length=1, max_length=1000)


class BulkUpsertRequest(BaseModel):
    """Request body for a slug-keyed bulk upsert."""

    items: List[Dict[str, Any]] = Field(..., min_length=1, max_length=1000)


class BulkViewsRequest(BaseModel):
    ids: List[str] = Field(..., min_length=1, max_length=1000)


class BulkViewsResponse(BaseModel):
    modified: int
