"""
Repository Configuration and Factory

Provides the factory function returning the process-wide announcement
repository, configured from environment variables.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from .base import AnnouncementRepositoryInterface

logger = logging.getLogger(__name__)


@dataclass
class RepositoryConfig:
    """
    Configuration for repository initialization.

    Loaded from environment variables with sensible defaults.
    """
    mongodb_uri: str

    # Database/collection names
    database: str = "jobboard"
    collection: str = "announcements"

    # Read policy: degrade datastore errors to neutral values
    fail_open: bool = True

    slug_cache_ttl: int = 3600

    @classmethod
    def from_env(cls) -> "RepositoryConfig":
        """
        Load configuration from environment variables.

        Environment variables:
        - MONGODB_URI (required): MongoDB connection string
        - MONGO_DB_NAME: Database name (default: jobboard)
        - ANNOUNCEMENTS_COLLECTION: Collection name (default: announcements)
        - REPOSITORY_FAIL_OPEN: Fail-open reads (true/false, default: true)
        - SLUG_CACHE_TTL_SECONDS: Slug cache TTL (default: 3600)

        Returns:
            RepositoryConfig instance

        Raises:
            ValueError: If MONGODB_URI is not set
        """
        mongodb_uri = os.getenv("MONGODB_URI")
        if not mongodb_uri:
            raise ValueError("MONGODB_URI environment variable is required")

        ttl_str = os.getenv("SLUG_CACHE_TTL_SECONDS", "3600")
        try:
            slug_cache_ttl = int(ttl_str)
        except ValueError:
            logger.warning(f"Invalid SLUG_CACHE_TTL_SECONDS '{ttl_str}', defaulting to 3600")
            slug_cache_ttl = 3600

        return cls(
            mongodb_uri=mongodb_uri,
            database=os.getenv("MONGO_DB_NAME", "jobboard"),
            collection=os.getenv("ANNOUNCEMENTS_COLLECTION", "announcements"),
            fail_open=os.getenv("REPOSITORY_FAIL_OPEN", "true").lower() == "true",
            slug_cache_ttl=slug_cache_ttl,
        )


# Singleton repository instance
_repository_instance: Optional[AnnouncementRepositoryInterface] = None


def get_announcement_repository() -> AnnouncementRepositoryInterface:
    """
    Get the announcement repository instance.

    Uses singleton pattern for connection pooling.

    Returns:
        AnnouncementRepositoryInterface implementation

    Raises:
        ValueError: If MongoDB URI is not configured
    """
    global _repository_instance

    if _repository_instance is None:
        config = RepositoryConfig.from_env()

        from .announcement_repository import MongoAnnouncementRepository
        _repository_instance = MongoAnnouncementRepository(
            mongodb_uri=config.mongodb_uri,
            database=config.database,
            collection=config.collection,
            fail_open=config.fail_open,
            slug_cache_ttl=config.slug_cache_ttl,
        )
        logger.info(
            f"Initialized announcement repository "
            f"({config.database}.{config.collection}, fail_open={config.fail_open})"
        )

    return _repository_instance


def reset_repository() -> None:
    """
    Reset the repository singleton.

    Used for testing or when configuration changes.
    """
    global _repository_instance

    if _repository_instance is not None:
        from .announcement_repository import MongoAnnouncementRepository
        if isinstance(_repository_instance, MongoAnnouncementRepository):
            MongoAnnouncementRepository.reset_connection()

    _repository_instance = None
    logger.info("Repository singleton reset")
