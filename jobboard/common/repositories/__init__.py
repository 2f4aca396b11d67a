"""
Repository Pattern for announcement data access.

Public API:
- get_announcement_repository(): Factory to get the repository instance
- AnnouncementRepositoryInterface: Abstract interface for announcements
- MongoAnnouncementRepository: MongoDB implementation
- BatchInsertResult / BatchUpdateResult / BulkUpsertResult: bulk write reports

Usage:
    from jobboard.common.repositories import get_announcement_repository

    repo = get_announcement_repository()
    page = repo.find_listing_cards({"type": "job", "limit": 20})
    if page["hasMore"]:
        next_page = repo.find_listing_cards({"type": "job", "cursor": page["nextCursor"]})
"""

from .base import (
    AnnouncementRepositoryInterface,
    BatchInsertResult,
    BatchUpdateResult,
    BulkUpsertResult,
)
from .announcement_repository import MongoAnnouncementRepository
from .config import (
    get_announcement_repository,
    reset_repository,
    RepositoryConfig,
)

__all__ = [
    "get_announcement_repository",
    "reset_repository",
    "RepositoryConfig",
    "AnnouncementRepositoryInterface",
    "MongoAnnouncementRepository",
    "BatchInsertResult",
    "BatchUpdateResult",
    "BulkUpsertResult",
]
