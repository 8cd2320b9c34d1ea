"""
API router serving the browser map client.
"""
from pathlib import Path
from fastapi import APIRouter
from fastapi.responses import FileResponse

from nearest_trees.api.models.responses import MapClientConfig
from nearest_trees.config import settings


STATIC_DIR = Path(__file__).resolve().parents[2] / "static"

router = APIRouter(tags=["map"])


@router.get("/", include_in_schema=False)
async def map_page() -> FileResponse:
    """Serve the map page."""
    return FileResponse(STATIC_DIR / "index.html", media_type="text/html")


@router.get(
    "/api/map-config",
    response_model=MapClientConfig,
    summary="Map client settings",
)
async def map_config() -> MapClientConfig:
    """
    Settings the map page reads before requesting the user's location.

    Returns:
        Display limit, geolocation options and tile layer
    """
    return MapClientConfig(
        limit=settings.map_default_limit,
        geolocation_timeout_ms=settings.geolocation_timeout_ms,
        geolocation_max_age_ms=settings.geolocation_max_age_ms,
        tile_url=settings.map_tile_url,
        tile_attribution=settings.map_tile_attribution,
    )
