"""FastAPI dependencies shared by the route modules."""

import logging

from fastapi import HTTPException

from ..common.repositories import AnnouncementRepositoryInterface, get_announcement_repository

logger = logging.getLogger(__name__)


def get_repository() -> AnnouncementRepositoryInterface:
    """Get the announcement repository (overridden in tests)."""
    try:
        return get_announcement_repository()
    except ValueError as e:
        logger.error(f"Repository unavailable: {e}")
        raise HTTPException(status_code=500, detail="MONGODB_URI not configured")
