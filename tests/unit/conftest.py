"""
Global fixtures for all unit tests.

Repositories run against an in-memory mongomock collection and a memory-only
cache, so no test talks to a real MongoDB or Redis server.
"""

import os

# Set test environment BEFORE any imports to prevent Config from loading real values
os.environ["ENVIRONMENT"] = "development"
os.environ.pop("REDIS_URL", None)

import mongomock
import pytest

from jobboard.common.cache import RedisCache, reset_cache
from jobboard.common.crypto import get_secret_cipher
from jobboard.common.repositories import reset_repository
from jobboard.common.repositories.announcement_repository import MongoAnnouncementRepository


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """
    Isolate tests from real credentials and shared singletons.
    """
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.delenv("REDIS_URL", raising=False)

    reset_cache()
    reset_repository()
    get_secret_cipher.cache_clear()
    yield
    reset_cache()
    reset_repository()
    get_secret_cipher.cache_clear()


@pytest.fixture
def collection():
    """Empty in-memory announcements collection."""
    client = mongomock.MongoClient()
    return client["jobboard"]["announcements"]


@pytest.fixture
def cache():
    """Memory-only cache (no Redis client)."""
    return RedisCache()


@pytest.fixture
def repo(collection, cache):
    """Repository bound to the in-memory collection."""
    return MongoAnnouncementRepository(mongo_collection=collection, cache=cache)


@pytest.fixture
def make_announcement():
    """Factory for valid create payloads (camelCase, as sent by clients)."""

    def _make(title="UP Police Constable Recruitment 2026", **overrides):
        payload = {
            "title": title,
            "type": "job",
            "category": "Police",
            "organization": "UP Police Recruitment Board",
            "content": "Applications invited for constable posts.",
            "location": "Uttar Pradesh",
            "minQualification": "12th Pass",
            "totalPosts": 1200,
            "tags": ["police", "up"],
        }
        payload.update(overrides)
        return payload

    return _make
