"""
MongoDB Announcement Repository

Data-access facade for the announcements collection: filtered listings with
offset or keyset pagination, a projected listing-card variant, cached slug
lookups, single-document writes and unordered bulk writes.

Connection Management:
- Uses a class-level MongoClient singleton for connection pooling
- A pre-built collection can be injected instead (tests, scripts)

Error Handling:
- Reads: fail-open by default (logged, neutral value); see read_operation
- Single-document writes: fail-fast, errors propagate to the caller
- Bulk writes: never raise; partial success is reported with per-item errors
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument, UpdateOne
from pymongo.collection import Collection
from pymongo.errors import BulkWriteError, PyMongoError

from ..cache import RedisCache, get_cache
from ..error_handling import ErrorCollector, read_operation, safe_execute
from ..schemas import (
    AnnouncementCreate,
    AnnouncementUpdate,
    BatchUpdateItem,
    BulkUpsertItem,
    to_naive_utc,
)
from ..types import (
    AdminCounts,
    Announcement,
    AnnouncementVersion,
    CursorPage,
    TagCount,
    empty_admin_counts,
    empty_page,
)
from .base import (
    AnnouncementRepositoryInterface,
    BatchInsertResult,
    BatchUpdateResult,
    BulkUpsertResult,
)
from .documents import (
    VERSION_HISTORY_LIMIT,
    build_new_document,
    build_update_set,
    build_upsert_update,
    build_version_entry,
    doc_to_announcement,
    doc_to_listing_card,
    doc_to_version,
    generate_slug,
    utcnow,
)
from .query import (
    LISTING_CARD_PROJECTION,
    apply_cursor,
    build_admin_query,
    build_live_query,
    build_public_query,
    parse_object_id,
    resolve_admin_sort,
    resolve_sort,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _coerce(model: Type[ModelT], value: Any) -> ModelT:
    if isinstance(value, model):
        return value
    if isinstance(value, BaseModel):
        value = value.model_dump(exclude_unset=True)
    return model.model_validate(value)


def _describe_validation_error(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'item'}: {err['msg']}"
        for err in error.errors()
    )


def _item_title(item: Any) -> str:
    if isinstance(item, Mapping):
        return str(item.get("title") or "<untitled>")
    return str(getattr(item, "title", None) or "<untitled>")


def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


class MongoAnnouncementRepository(AnnouncementRepositoryInterface):
    """
    MongoDB implementation of AnnouncementRepositoryInterface.

    Slug lookups are cached under ``job:{slug}`` for an hour. Writes do not
    invalidate those entries: an edited or deactivated announcement may be
    served stale from its slug URL until the entry expires.
    """

    _client: Optional[MongoClient] = None

    SLUG_CACHE_PREFIX = "job:"
    DEFAULT_LIMIT = 100
    DEFAULT_CURSOR_LIMIT = 20
    DEFAULT_TRENDING_LIMIT = 10
    TAG_LIMIT = 30

    def __init__(
        self,
        mongodb_uri: Optional[str] = None,
        database: str = "jobboard",
        collection: str = "announcements",
        mongo_collection: Optional[Collection] = None,
        cache: Optional[RedisCache] = None,
        fail_open: bool = True,
        slug_cache_ttl: int = 3600,
    ):
        """
        Initialize the repository.

        Args:
            mongodb_uri: MongoDB connection string (ignored if mongo_collection given)
            database: Database name
            collection: Collection name
            mongo_collection: Pre-built collection to use instead of connecting
            cache: Cache for slug lookups (defaults to the process-wide cache)
            fail_open: Degrade read errors to neutral values instead of raising
            slug_cache_ttl: TTL in seconds for cached slug lookups
        """
        if mongo_collection is None and not mongodb_uri:
            raise ValueError("MongoDB URI is required")

        self._mongodb_uri = mongodb_uri
        self._database_name = database
        self._collection_name = collection
        self._collection = mongo_collection
        self._cache = cache if cache is not None else get_cache()
        self.fail_open = fail_open
        self.slug_cache_ttl = slug_cache_ttl

    def _get_collection(self) -> Collection:
        """
        Get the announcements collection, creating the pooled client if needed.
        """
        if self._collection is None:
            if MongoAnnouncementRepository._client is None:
                MongoAnnouncementRepository._client = MongoClient(self._mongodb_uri)
                logger.info(
                    f"Announcement repository connected: {self._database_name}.{self._collection_name}"
                )
            client = MongoAnnouncementRepository._client
            self._collection = client[self._database_name][self._collection_name]
        return self._collection

    @classmethod
    def reset_connection(cls) -> None:
        """
        Reset the connection pool.

        Used for testing or connection recovery.
        """
        if cls._client:
            cls._client.close()
        cls._client = None
        logger.info("Announcement repository connection reset")

    def ensure_indexes(self) -> int:
        from ..database import ensure_announcement_indexes

        return ensure_announcement_indexes(self._get_collection())

    # =========================================================================
    # Public reads
    # =========================================================================

    @read_operation("findAll", fallback=list)
    def find_all(self, filters: Optional[Mapping[str, Any]] = None) -> List[Announcement]:
        filters = filters or {}
        query = build_public_query(filters)
        limit = _positive_int(filters.get("limit"), self.DEFAULT_LIMIT)
        skip = max(_positive_int(filters.get("offset"), 0), 0)

        cursor = (
            self._get_collection()
            .find(query)
            .sort(resolve_sort(filters.get("sort")))
            .skip(skip)
            .limit(limit)
        )
        return [doc_to_announcement(doc) for doc in cursor]

    def _paginate(
        self,
        filters: Mapping[str, Any],
        mapper: Callable[[Mapping[str, Any]], Dict[str, Any]],
        projection: Optional[Dict[str, int]] = None,
    ) -> CursorPage:
        query = build_public_query(filters)
        sort = filters.get("sort")

        if not apply_cursor(query, filters.get("cursor"), sort):
            logger.debug(f"Ignoring malformed cursor: {filters.get('cursor')!r}")
            return empty_page()

        limit = _positive_int(filters.get("limit"), self.DEFAULT_CURSOR_LIMIT)

        # One extra row tells us whether another page exists
        docs = list(
            self._get_collection()
            .find(query, projection)
            .sort(resolve_sort(sort))
            .limit(limit + 1)
        )

        has_more = len(docs) > limit
        docs = docs[:limit]
        next_cursor = str(docs[-1]["_id"]) if has_more and docs else None

        return {
            "data": [mapper(doc) for doc in docs],
            "nextCursor": next_cursor,
            "hasMore": has_more,
        }

    @read_operation("findAllWithCursor", fallback=empty_page)
    def find_all_with_cursor(self, filters: Optional[Mapping[str, Any]] = None) -> CursorPage:
        return self._paginate(filters or {}, doc_to_announcement)

    @read_operation("findListingCards", fallback=empty_page)
    def find_listing_cards(self, filters: Optional[Mapping[str, Any]] = None) -> CursorPage:
        return self._paginate(filters or {}, doc_to_listing_card, LISTING_CARD_PROJECTION)

    def find_by_slug(self, slug: str) -> Optional[Announcement]:
        if not slug:
            return None

        return self._cache.get_or_fetch(
            f"{self.SLUG_CACHE_PREFIX}{slug}",
            lambda: self._load_by_slug(slug),
            self.slug_cache_ttl,
        )

    @read_operation("findBySlug", fallback=lambda: None)
    def _load_by_slug(self, slug: str) -> Optional[Announcement]:
        query = build_live_query()
        query["slug"] = slug
        doc = self._get_collection().find_one(query)
        return doc_to_announcement(doc) if doc else None

    @read_operation("findById", fallback=lambda: None)
    def find_by_id(self, id: str) -> Optional[Announcement]:
        object_id = parse_object_id(id)
        if object_id is None:
            return None

        doc = self._get_collection().find_one({"_id": object_id})
        return doc_to_announcement(doc) if doc else None

    @read_operation("findByIds", fallback=list)
    def find_by_ids(self, ids: Sequence[str]) -> List[Announcement]:
        object_ids = [oid for oid in (parse_object_id(i) for i in ids or []) if oid is not None]
        if not object_ids:
            return []

        docs = self._get_collection().find({"_id": {"$in": object_ids}})
        return [doc_to_announcement(doc) for doc in docs]

    @read_operation("getTrending", fallback=list)
    def get_trending(self, type: Optional[str] = None, limit: int = DEFAULT_TRENDING_LIMIT) -> List[Announcement]:
        query = build_public_query({"type": type})
        docs = (
            self._get_collection()
            .find(query)
            .sort([("viewCount", DESCENDING), ("postedAt", DESCENDING)])
            .limit(_positive_int(limit, self.DEFAULT_TRENDING_LIMIT))
        )
        return [doc_to_announcement(doc) for doc in docs]

    @read_operation("getByDeadlineRange", fallback=list)
    def get_by_deadline_range(
        self,
        start: datetime,
        end: datetime,
        limit: int = DEFAULT_LIMIT,
    ) -> List[Announcement]:
        query = build_live_query()
        query["deadline"] = {"$gte": to_naive_utc(start), "$lte": to_naive_utc(end)}

        docs = (
            self._get_collection()
            .find(query)
            .sort([("deadline", ASCENDING)])
            .limit(_positive_int(limit, self.DEFAULT_LIMIT))
        )
        return [doc_to_announcement(doc) for doc in docs]

    @read_operation("getCategories", fallback=list)
    def get_categories(self) -> List[str]:
        values = self._get_collection().distinct("category", build_live_query())
        return sorted(value for value in values if value)

    @read_operation("getOrganizations", fallback=list)
    def get_organizations(self) -> List[str]:
        values = self._get_collection().distinct("organization", build_live_query())
        return sorted(value for value in values if value)

    @read_operation("getTags", fallback=list)
    def get_tags(self) -> List[TagCount]:
        pipeline = [
            {"$match": build_live_query()},
            {"$unwind": "$tags"},
            {"$group": {"_id": "$tags", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": self.TAG_LIMIT},
            {"$project": {"name": "$_id", "count": 1, "_id": 0}},
        ]
        return [
            {"name": row["name"], "count": row["count"]}
            for row in self._get_collection().aggregate(pipeline)
        ]

    # =========================================================================
    # Admin reads
    # =========================================================================

    @read_operation("findAllAdmin", fallback=list)
    def find_all_admin(self, filters: Optional[Mapping[str, Any]] = None) -> List[Announcement]:
        filters = filters or {}
        cursor = (
            self._get_collection()
            .find(build_admin_query(filters))
            .sort(resolve_admin_sort(filters.get("sort")))
            .skip(max(_positive_int(filters.get("offset"), 0), 0))
            .limit(_positive_int(filters.get("limit"), self.DEFAULT_LIMIT))
        )
        return [doc_to_announcement(doc) for doc in cursor]

    @read_operation("countAdmin", fallback=int)
    def count_admin(self, filters: Optional[Mapping[str, Any]] = None) -> int:
        return self._get_collection().count_documents(build_admin_query(filters))

    @read_operation("getAdminCounts", fallback=empty_admin_counts)
    def get_admin_counts(self, include_inactive: bool = True) -> AdminCounts:
        """Document totals, overall and per content type."""
        counts = empty_admin_counts()
        pipeline = [
            {"$match": build_admin_query({"include_inactive": include_inactive})},
            {"$group": {"_id": "$type", "count": {"$sum": 1}}},
        ]
        for row in self._get_collection().aggregate(pipeline):
            counts["total"] += row["count"]
            if row["_id"] in counts["byType"]:
                counts["byType"][row["_id"]] = row["count"]
        return counts

    @read_operation("findVersions", fallback=lambda: None)
    def find_versions(self, id: str) -> Optional[List[AnnouncementVersion]]:
        """Update history of one announcement, newest first; None if it does not exist."""
        object_id = parse_object_id(id)
        if object_id is None:
            return None

        doc = self._get_collection().find_one({"_id": object_id}, {"versions": 1})
        if doc is None:
            return None
        return [doc_to_version(entry) for entry in doc.get("versions") or []]

    # =========================================================================
    # Single-document writes (fail-fast)
    # =========================================================================

    def create(self, data: Any, user_id: Optional[str] = None) -> Announcement:
        payload = _coerce(AnnouncementCreate, data)
        doc = build_new_document(payload, user_id, utcnow())

        result = self._get_collection().insert_one(doc)
        doc["_id"] = result.inserted_id

        logger.info(f"Created announcement {result.inserted_id} ({doc['slug']})")
        return doc_to_announcement(doc)

    def update(
        self,
        id: str,
        data: Any,
        updated_by: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Optional[Announcement]:
        """
        Apply a partial update.

        When any content field changes, the previous state is pushed onto the
        document's ``versions`` history (newest first, capped at
        VERSION_HISTORY_LIMIT) and ``version`` is incremented.
        """
        object_id = parse_object_id(id)
        if object_id is None:
            return None

        payload = _coerce(AnnouncementUpdate, data)
        collection = self._get_collection()
        existing = collection.find_one({"_id": object_id})
        if existing is None:
            return None

        now = utcnow()
        set_fields = build_update_set(payload, now)
        operations: Dict[str, Any] = {"$set": set_fields}

        if len(set_fields) > 1:
            entry = build_version_entry(existing, now, updated_by, (note or "").strip() or None)
            set_fields["version"] = (existing.get("version") or 1) + 1
            operations["$push"] = {
                "versions": {"$each": [entry], "$position": 0, "$slice": VERSION_HISTORY_LIMIT},
            }

        doc = collection.find_one_and_update(
            {"_id": object_id},
            operations,
            return_document=ReturnDocument.AFTER,
        )
        return doc_to_announcement(doc) if doc else None

    def delete(self, id: str) -> bool:
        object_id = parse_object_id(id)
        if object_id is None:
            return False

        result = self._get_collection().delete_one({"_id": object_id})
        return result.deleted_count > 0

    def soft_delete(self, id: str) -> bool:
        object_id = parse_object_id(id)
        if object_id is None:
            return False

        result = self._get_collection().update_one(
            {"_id": object_id},
            {"$set": {"isActive": False, "updatedAt": utcnow()}},
        )
        return result.modified_count > 0

    def increment_view_count(self, id: str) -> int:
        object_id = parse_object_id(id)
        if object_id is None:
            return 0

        def _increment() -> int:
            result = self._get_collection().update_one(
                {"_id": object_id},
                {"$inc": {"viewCount": 1}},
            )
            return result.modified_count

        return safe_execute(
            _increment,
            operation_name="incrementViewCount",
            logger=logger,
            fallback=0,
        )

    # =========================================================================
    # Bulk writes (unordered, best-effort)
    # =========================================================================

    def batch_insert(self, items: Sequence[Any], user_id: Optional[str] = None) -> BatchInsertResult:
        collector = ErrorCollector()
        docs: List[Dict[str, Any]] = []
        now = utcnow()
        base_ms = int(now.replace(tzinfo=timezone.utc).timestamp() * 1000)

        for item in items:
            try:
                payload = _coerce(AnnouncementCreate, item)
            except ValidationError as e:
                collector.add(f'Failed to prepare "{_item_title(item)}": {_describe_validation_error(e)}')
                continue
            # Offset the suffix per item so identical titles in one batch get distinct slugs
            slug = generate_slug(payload.title, base_ms + len(docs))
            docs.append(build_new_document(payload, user_id, now, slug=slug))

        if not docs:
            return BatchInsertResult(inserted=0, errors=collector.errors)

        try:
            result = self._get_collection().insert_many(docs, ordered=False)
            inserted = len(result.inserted_ids)
        except BulkWriteError as e:
            # Unordered: documents without write errors are still committed
            inserted = e.details.get("nInserted", 0)
            for write_error in e.details.get("writeErrors", []):
                index = write_error.get("index", -1)
                title = docs[index]["title"] if 0 <= index < len(docs) else "<unknown>"
                collector.add(f'Insert failed for "{title}": {write_error.get("errmsg")}')
        except PyMongoError as e:
            inserted = 0
            collector.add_exception("Batch insert error", e)

        logger.info(f"[BatchInsert] Inserted {inserted}/{len(items)} documents, {len(collector)} errors")
        return BatchInsertResult(inserted=inserted, errors=collector.errors)

    def batch_update(self, updates: Sequence[Any]) -> BatchUpdateResult:
        collector = ErrorCollector()
        operations: List[UpdateOne] = []
        op_ids: List[str] = []
        now = utcnow()

        for entry in updates:
            if isinstance(entry, BatchUpdateItem):
                raw_id, data = entry.id, entry.data
            elif isinstance(entry, Mapping):
                raw_id, data = entry.get("id"), entry.get("data") or {}
            else:
                collector.add(f"Invalid update entry: {entry!r}")
                continue

            object_id = parse_object_id(raw_id)
            if object_id is None:
                collector.add(f"Invalid ID: {raw_id}")
                continue

            try:
                payload = _coerce(AnnouncementUpdate, data)
            except ValidationError as e:
                collector.add(f"Invalid update for {raw_id}: {_describe_validation_error(e)}")
                continue

            operations.append(UpdateOne({"_id": object_id}, {"$set": build_update_set(payload, now)}))
            op_ids.append(str(object_id))

        if not operations:
            return BatchUpdateResult(updated=0, errors=collector.errors)

        try:
            result = self._get_collection().bulk_write(operations, ordered=False)
            updated = result.modified_count
            missing = len(operations) - result.matched_count
            if missing > 0:
                collector.add(f"{missing} announcement(s) not found")
        except BulkWriteError as e:
            updated = e.details.get("nModified", 0)
            for write_error in e.details.get("writeErrors", []):
                index = write_error.get("index", -1)
                target = op_ids[index] if 0 <= index < len(op_ids) else "<unknown>"
                collector.add(f"Update failed for {target}: {write_error.get('errmsg')}")
        except PyMongoError as e:
            updated = 0
            collector.add_exception("Batch update error", e)

        logger.info(f"[BatchUpdate] Modified {updated}/{len(updates)} documents, {len(collector)} errors")
        return BatchUpdateResult(updated=updated, errors=collector.errors)

    def bulk_upsert(self, items: Sequence[Any], user_id: Optional[str] = None) -> BulkUpsertResult:
        """
        Insert or update announcements keyed by slug.

        Only the fields each row supplies are written to an existing document.
        Creation-only fields go through ``$setOnInsert`` so repeated imports
        never reset postedBy/postedAt/isActive/viewCount.
        """
        collector = ErrorCollector()
        operations: List[UpdateOne] = []
        slugs: List[str] = []
        now = utcnow()

        for item in items:
            try:
                payload = _coerce(BulkUpsertItem, item)
            except ValidationError as e:
                collector.add(f'Failed to prepare "{_item_title(item)}": {_describe_validation_error(e)}')
                continue

            operations.append(
                UpdateOne({"slug": payload.slug}, build_upsert_update(payload, user_id, now), upsert=True)
            )
            slugs.append(payload.slug)

        if not operations:
            return BulkUpsertResult(upserted=0, modified=0, errors=collector.errors)

        try:
            result = self._get_collection().bulk_write(operations, ordered=False)
            upserted, modified = result.upserted_count, result.modified_count
        except BulkWriteError as e:
            upserted = e.details.get("nUpserted", 0)
            modified = e.details.get("nModified", 0)
            for write_error in e.details.get("writeErrors", []):
                index = write_error.get("index", -1)
                slug = slugs[index] if 0 <= index < len(slugs) else "<unknown>"
                collector.add(f"Upsert failed for {slug}: {write_error.get('errmsg')}")
        except PyMongoError as e:
            upserted = modified = 0
            collector.add_exception("Bulk upsert error", e)

        logger.info(f"[BulkUpsert] Upserted: {upserted}, Modified: {modified}, Errors: {len(collector)}")
        return BulkUpsertResult(upserted=upserted, modified=modified, errors=collector.errors)

    def batch_increment_views(self, ids: Sequence[str]) -> int:
        object_ids = [oid for oid in (parse_object_id(i) for i in ids or []) if oid is not None]
        if not object_ids:
            return 0

        def _increment() -> int:
            operations = [UpdateOne({"_id": oid}, {"$inc": {"viewCount": 1}}) for oid in object_ids]
            return self._get_collection().bulk_write(operations, ordered=False).modified_count

        return safe_execute(
            _increment,
            operation_name="batchIncrementViews",
            logger=logger,
            fallback=0,
        )
