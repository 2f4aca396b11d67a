"""
MongoDB database utilities for the job board.

Provides connection management, collection access, and index creation for
the unified announcements collection and the legacy per-type collections.
"""

from typing import Any, Dict, List, Optional, Tuple
from pymongo import MongoClient, ASCENDING, DESCENDING, TEXT
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConfigurationError, PyMongoError
from tenacity import retry, stop_after_attempt, wait_exponential
import logging

from .config import Config
from .legacy_schemas import LEGACY_INDEXES

logger = logging.getLogger(__name__)

IndexSpec = Tuple[str, List[Tuple[str, Any]], Dict[str, Any]]

ANNOUNCEMENT_INDEXES: List[IndexSpec] = [
    # Slug lookups back the public detail page
    ("slug", [("slug", ASCENDING)], {"unique": True}),

    # Filtered listings sorted newest-first
    ("type_active", [("type", ASCENDING), ("isActive", ASCENDING), ("_id", DESCENDING)], {}),
    ("category", [("category", ASCENDING)], {}),
    ("organization", [("organization", ASCENDING)], {}),
    ("tags", [("tags", ASCENDING)], {}),

    # Trending and deadline calendars
    ("trending", [("isActive", ASCENDING), ("viewCount", DESCENDING), ("postedAt", DESCENDING)], {}),
    ("deadline", [("deadline", ASCENDING)], {}),
    ("updated_at", [("updatedAt", DESCENDING)], {}),

    ("text_search", [("title", TEXT), ("content", TEXT), ("organization", TEXT)], {}),
]


def _create_indexes(collection: Collection, indexes: List[IndexSpec]) -> int:
    created = 0
    for name, keys, options in indexes:
        try:
            collection.create_index(keys, name=name, **options)
            logger.info(f"✓ Created index: {collection.name}.{name}")
            created += 1
        except PyMongoError as e:
            logger.warning(f"Index {collection.name}.{name} may already exist: {e}")
    return created


def ensure_announcement_indexes(collection: Collection) -> int:
    """
    Create the announcements collection indexes.

    Returns:
        Number of indexes created (or confirmed) without error
    """
    return _create_indexes(collection, ANNOUNCEMENT_INDEXES)


def ensure_indexes(db: Database, announcements_collection: str = "announcements") -> Dict[str, int]:
    """
    Create all required indexes for efficient querying.

    Called once during setup; safe to repeat.

    Returns:
        Dict of collection name -> indexes created
    """
    logger.info("Creating indexes...")

    results = {
        announcements_collection: ensure_announcement_indexes(db[announcements_collection]),
    }
    for collection_name, indexes in LEGACY_INDEXES.items():
        results[collection_name] = _create_indexes(db[collection_name], indexes)

    logger.info("✓ All indexes created")
    return results


class DatabaseClient:
    """
    MongoDB client for the job board.

    Manages the connection and provides access to collections.
    """

    _instance: Optional['DatabaseClient'] = None
    _client: Optional[MongoClient] = None
    _db: Optional[Database] = None

    def __new__(cls):
        """Singleton pattern - only one database client instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize the database client if not already initialized."""
        if self._client is None:
            self.connect()

    def connect(self) -> None:
        """
        Connect to MongoDB using configuration from Config.

        Raises:
            ValueError: If MONGODB_URI is not configured
        """
        if not Config.MONGODB_URI:
            raise ValueError("MONGODB_URI not configured in .env")

        self._client = MongoClient(Config.MONGODB_URI)
        # Use database from URI or default to MONGO_DB_NAME
        try:
            self._db = self._client.get_database()
        except ConfigurationError:
            self._db = self._client[Config.MONGO_DB_NAME]
        logger.info(f"Connected to MongoDB: {self._db.name}")

    def disconnect(self) -> None:
        """Close the MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._db = None
            logger.info("Disconnected from MongoDB")

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton (used by tests)."""
        if cls._instance is not None:
            cls._instance.disconnect()
        cls._instance = None
        cls._client = None
        cls._db = None

    @property
    def db(self) -> Database:
        """Get the database instance."""
        if self._db is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._db

    @property
    def announcements(self) -> Collection:
        """Get the unified announcements collection."""
        return self.db[Config.ANNOUNCEMENTS_COLLECTION]

    @property
    def jobs(self) -> Collection:
        """Get the legacy jobs collection."""
        return self.db["jobs"]

    @property
    def results(self) -> Collection:
        """Get the legacy results collection."""
        return self.db["results"]

    @property
    def admit_cards(self) -> Collection:
        """Get the legacy admit_cards collection."""
        return self.db["admit_cards"]

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        reraise=True
    )
    def ping(self) -> bool:
        """
        Check connectivity, retrying transient failures.

        Raises:
            PyMongoError: If the server is still unreachable after 3 attempts
        """
        self.db.command("ping")
        return True

    def ensure_indexes(self) -> Dict[str, int]:
        return ensure_indexes(self.db, Config.ANNOUNCEMENTS_COLLECTION)
