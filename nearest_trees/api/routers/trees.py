"""
API router for nearest-tree endpoints.
"""
from typing import Annotated, Optional, Union
from fastapi import APIRouter, Query, Request, status
from fastapi.responses import JSONResponse

from nearest_trees.api.dependencies import TreeServiceDep
from nearest_trees.api.limiter import QUERY_RATE_LIMIT, limiter
from nearest_trees.api.models.responses import (
    ErrorResponse,
    MessageResponse,
    NearestTreesResponse,
)
from nearest_trees.config import settings
from nearest_trees.utils.query_parsing import parse_tree_query


NO_TREES_MESSAGE = "No trees found"

router = APIRouter(
    prefix="/trees",
    tags=["trees"],
)


@router.get(
    "",
    response_model=Union[NearestTreesResponse, MessageResponse],
    summary="Find the trees nearest to a point",
    description="""
    Return up to `limit` trees ordered by ascending geodesic distance from
    (`lat`, `lng`), each annotated with its distance in metres.

    - `lat`, `lng`: query point in decimal degrees (required)
    - `limit`: maximum number of trees (default 1; unusable values fall back
      to the default)

    When nothing is found the response carries a `message` and no `trees`.
    """,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid coordinates"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)
@limiter.limit(QUERY_RATE_LIMIT)
async def get_nearest_trees(
    request: Request,
    tree_service: TreeServiceDep,
    lat: Annotated[Optional[str], Query(description="Latitude in decimal degrees")] = None,
    lng: Annotated[Optional[str], Query(description="Longitude in decimal degrees")] = None,
    limit: Annotated[Optional[str], Query(description="Maximum number of trees")] = None,
) -> Union[NearestTreesResponse, MessageResponse]:
    """
    Get the trees nearest to a point.

    Raises:
        InvalidQueryError: If a coordinate is missing or invalid (mapped to 400)
        SpatialStoreError: If the store query fails (mapped to 500)
    """
    query = parse_tree_query(lat, lng, limit, default_limit=settings.default_limit)

    result = await tree_service.find_nearest(query.point, query.limit)
    if result is None:
        return MessageResponse(message=NO_TREES_MESSAGE)

    return NearestTreesResponse.from_result(result)


@router.post(
    "",
    status_code=status.HTTP_501_NOT_IMPLEMENTED,
    response_model=ErrorResponse,
    summary="Not implemented",
)
async def post_trees() -> JSONResponse:
    """Placeholder; trees are read-only."""
    return JSONResponse(
        status_code=status.HTTP_501_NOT_IMPLEMENTED,
        content={"error": "Method not implemented"},
    )
