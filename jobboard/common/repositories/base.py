"""
Repository Interface Definitions

Defines the abstract interface for announcement data access and the result
envelopes returned by bulk operations. Route handlers and scripts depend on
this interface only, so the MongoDB implementation can be swapped or mocked.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..types import AdminCounts, Announcement, AnnouncementVersion, CursorPage, TagCount


@dataclass
class BatchInsertResult:
    """
    Result of a best-effort batch insert.

    Attributes:
        inserted: Number of documents committed
        errors: Per-item preparation and write errors
    """
    inserted: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BatchUpdateResult:
    """Result of a best-effort batch update."""
    updated: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BulkUpsertResult:
    """
    Result of a slug-keyed bulk upsert.

    Attributes:
        upserted: Number of new documents created
        modified: Number of existing documents changed
        errors: Per-item validation and write errors
    """
    upserted: int = 0
    modified: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class AnnouncementRepositoryInterface(ABC):
    """
    Abstract interface for the announcements collection.

    Read methods are fail-open (logged, neutral value) unless the
    implementation is configured otherwise. Single-document writes are
    fail-fast. Bulk writes never raise and report per-item errors.
    """

    # ----- Public reads -----

    @abstractmethod
    def find_all(self, filters: Optional[Mapping[str, Any]] = None) -> List[Announcement]:
        """
        Offset-paginated listing of active announcements.

        Args:
            filters: type, category, organization, qualification, location,
                search, sort, limit (default 100), offset (default 0)
        """
        pass

    @abstractmethod
    def find_all_with_cursor(self, filters: Optional[Mapping[str, Any]] = None) -> CursorPage:
        """
        Keyset-paginated listing of active announcements.

        Args:
            filters: Same as find_all, plus cursor; limit defaults to 20

        Returns:
            {data, nextCursor, hasMore}
        """
        pass

    @abstractmethod
    def find_listing_cards(self, filters: Optional[Mapping[str, Any]] = None) -> CursorPage:
        """Keyset-paginated listing with the minimal card projection."""
        pass

    @abstractmethod
    def find_by_slug(self, slug: str) -> Optional[Announcement]:
        """Cached lookup of an active announcement by slug."""
        pass

    @abstractmethod
    def find_by_id(self, id: str) -> Optional[Announcement]:
        """Uncached lookup by id, including inactive documents."""
        pass

    @abstractmethod
    def find_by_ids(self, ids: Sequence[str]) -> List[Announcement]:
        """Uncached lookup of several ids, including inactive documents."""
        pass

    @abstractmethod
    def get_trending(self, type: Optional[str] = None, limit: int = 10) -> List[Announcement]:
        pass

    @abstractmethod
    def get_by_deadline_range(
        self,
        start: datetime,
        end: datetime,
        limit: int = 100,
    ) -> List[Announcement]:
        pass

    @abstractmethod
    def get_categories(self) -> List[str]:
        pass

    @abstractmethod
    def get_organizations(self) -> List[str]:
        pass

    @abstractmethod
    def get_tags(self) -> List[TagCount]:
        pass

    @abstractmethod
    def ensure_indexes(self) -> int:
        """Create the collection indexes; returns how many were created or confirmed."""
        pass

    # ----- Admin reads -----

    @abstractmethod
    def find_all_admin(self, filters: Optional[Mapping[str, Any]] = None) -> List[Announcement]:
        pass

    @abstractmethod
    def count_admin(self, filters: Optional[Mapping[str, Any]] = None) -> int:
        pass

    @abstractmethod
    def get_admin_counts(self, include_inactive: bool = True) -> AdminCounts:
        pass

    @abstractmethod
    def find_versions(self, id: str) -> Optional[List[AnnouncementVersion]]:
        """Update history, newest first; None for unknown or malformed ids."""
        pass

    # ----- Single-document writes -----

    @abstractmethod
    def create(self, data: Any, user_id: Optional[str] = None) -> Announcement:
        """
        Insert a new announcement.

        Args:
            data: AnnouncementCreate or a dict accepted by it
            user_id: Creator reference stored as postedBy

        Raises:
            pydantic.ValidationError: If data is invalid
            pymongo.errors.PyMongoError: If the write fails
        """
        pass

    @abstractmethod
    def update(
        self,
        id: str,
        data: Any,
        updated_by: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Optional[Announcement]:
        """Partial update recording a version snapshot; None for unknown or malformed ids."""
        pass

    @abstractmethod
    def delete(self, id: str) -> bool:
        pass

    @abstractmethod
    def soft_delete(self, id: str) -> bool:
        pass

    @abstractmethod
    def increment_view_count(self, id: str) -> int:
        pass

    # ----- Bulk writes -----

    @abstractmethod
    def batch_insert(self, items: Sequence[Any], user_id: Optional[str] = None) -> BatchInsertResult:
        pass

    @abstractmethod
    def batch_update(self, updates: Sequence[Mapping[str, Any]]) -> BatchUpdateResult:
        pass

    @abstractmethod
    def bulk_upsert(self, items: Sequence[Any], user_id: Optional[str] = None) -> BulkUpsertResult:
        pass

    @abstractmethod
    def batch_increment_views(self, ids: Sequence[str]) -> int:
        pass
