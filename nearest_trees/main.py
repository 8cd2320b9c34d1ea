"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
import uvicorn
from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.concurrency import run_in_threadpool

from nearest_trees.api.dependencies import TreeRepositoryDep
from nearest_trees.api.limiter import limiter
from nearest_trees.api.routers import map_client, trees
from nearest_trees.api.routers.map_client import STATIC_DIR
from nearest_trees.config import settings
from nearest_trees.infrastructure.spatial_store import (
    SpatialStoreError,
    get_tree_repository,
)
from nearest_trees.middleware.error_handler import ErrorHandlerMiddleware

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Opens the connection pool at startup when the store is reachable and
    closes it at shutdown. An unreachable store does not stop the service;
    the pool is opened again on the first query.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Spatial store: {settings.database_target}, table={settings.tree_table}")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute "
                f"(enabled={settings.rate_limit_enabled})")

    repository = get_tree_repository()
    try:
        await run_in_threadpool(repository.open)
    except SpatialStoreError:
        logger.warning("Spatial store not reachable at startup; will retry on first query")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await run_in_threadpool(repository.close)
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Nearest tree lookup for a browser map.

    ## Features

    - **Nearest trees**: rank trees by geodesic distance from a point using
      PostGIS nearest-neighbour ordering
    - **Map client**: a Leaflet page at `/` that locates the user and shows
      the trees around them
    - **Rate Limiting**: Protects the API from abuse
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    debug=settings.debug,
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(trees.router, prefix="/api")
app.include_router(map_client.router)

# Map client assets
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health/db", tags=["health"])
async def database_health_check(repository: TreeRepositoryDep):
    """
    Spatial store health check.

    Returns:
        Health status, 503 when the store does not answer
    """
    reachable = await run_in_threadpool(repository.ping)
    if not reachable:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "database": False},
        )
    return {"status": "healthy", "database": True}


def run() -> None:
    """Serve the application with uvicorn."""
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
