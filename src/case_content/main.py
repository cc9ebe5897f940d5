"""Main FastAPI application for case-content-service."""

import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from case_content.config import settings
from case_content.infrastructure.database import db_client
from case_content.infrastructure.persistence import LoadMode
from case_content.api.routes.cases import get_case_repository, router as cases_router
from case_content.models import HealthResponse

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Case Content Service",
    description="Content management for the detective case catalog",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(cases_router)


@app.on_event("startup")
async def startup():
    """Initialize storage and load the catalog on startup."""
    logger.info(f"Starting {settings.service_name} on port {settings.port}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Storage: {settings.storage_type}")

    if settings.uses_sql:
        try:
            # Alembic migrations are the primary path; create_tables covers
            # local runs without them
            await db_client.verify_connection()
            await db_client.create_tables()
            logger.info("Database initialized successfully")
        except Exception as e:
            # The catalog still loads from the bundled dataset
            logger.error(f"Failed to initialize database: {e}")

    repository = await get_case_repository()
    snapshot = await repository.load()
    if snapshot.notice:
        logger.warning(snapshot.notice)


@app.on_event("shutdown")
async def shutdown():
    """Clean up resources on shutdown."""
    logger.info("Shutting down service")
    await db_client.close()


@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="""
Returns the health status of the Case Content Service.

**Response Example**:
```json
{
  "status": "healthy",
  "service": "case-content-service",
  "version": "1.0.0",
  "database": "sqlite+aiosqlite",
  "catalog_mode": "remote"
}
```

`status` is `degraded` while the catalog is served from the bundled
dataset.

**Storage**: No database query (reports connection type and load mode only)
    """,
    responses={
        200: {"description": "Service is up"},
    }
)
async def health_check():
    """Health check endpoint."""
    repository = await get_case_repository()
    mode = repository.mode
    return HealthResponse(
        status="degraded" if mode == LoadMode.STATIC_FALLBACK else "healthy",
        service=settings.service_name,
        version="1.0.0",
        database=settings.database_url.split("://")[0] if settings.uses_sql else "inmemory",
        catalog_mode=mode.value,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "case_content.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.environment == "development",
    )
