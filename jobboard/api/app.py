"""
FastAPI service for the job board announcements.

Thin HTTP adapter over the announcement repository: public listing/detail
routes and token-protected admin and bulk routes.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import DuplicateKeyError, PyMongoError

from .. import __version__
from ..common.config import Config
from ..common.database import DatabaseClient
from ..common.logger import get_logger, setup_logging
from .config import settings, validate_config_on_startup
from .routes import admin_router, announcements_router

# Configure logging
setup_logging(level=Config.LOG_LEVEL, format=Config.LOG_FORMAT)
logger = get_logger(__name__, component="api")

# Validate configuration at startup
validate_config_on_startup()

app = FastAPI(title="Job Board API", version=__version__)

# Configure CORS using validated settings
if settings.cors_origins_list:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(announcements_router)
app.include_router(admin_router)


@app.exception_handler(DuplicateKeyError)
async def duplicate_key_handler(request: Request, exc: DuplicateKeyError) -> JSONResponse:
    logger.warning(f"Duplicate key on {request.url.path}: {exc}")
    return JSONResponse(status_code=409, content={"detail": "Announcement already exists"})


@app.exception_handler(PyMongoError)
async def datastore_error_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    logger.error(f"Datastore error on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Datastore unavailable"})


@app.on_event("startup")
def ensure_database_indexes() -> None:
    """Create collection indexes; the API still starts if MongoDB is unreachable."""
    if not settings.ensure_indexes_on_startup:
        logger.info("Index creation on startup disabled")
        return

    try:
        client = DatabaseClient()
        client.ping()
        created = client.ensure_indexes()
    except (PyMongoError, ValueError) as e:
        logger.error(f"Index creation skipped: {e}")
        return

    logger.info(f"Indexes ensured: {created}")


@app.get("/health")
async def health() -> dict:
    """Liveness check (does not touch the datastore)."""
    return {"status": "ok", "version": __version__, "environment": settings.environment}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
