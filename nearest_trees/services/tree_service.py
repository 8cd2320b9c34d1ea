"""
Application service: Orchestration layer for nearest-tree lookups.
"""
import logging
from typing import Optional

from starlette.concurrency import run_in_threadpool

from nearest_trees.domain.models import NearestTrees, QueryPoint
from nearest_trees.infrastructure.spatial_store import TreeRepository


logger = logging.getLogger(__name__)


class TreeService:
    """
    Application service for nearest-tree queries.

    Coordinates the repository call and shapes the result set; the ranking
    itself is done by the spatial store.
    """

    def __init__(self, repository: TreeRepository):
        """
        Initialize the service with dependencies.

        Args:
            repository: Repository used to query the spatial store
        """
        self.repository = repository

    async def find_nearest(
        self,
        point: QueryPoint,
        limit: int,
    ) -> Optional[NearestTrees]:
        """
        Find the trees nearest to a point.

        The blocking database call runs in the threadpool so the event loop
        stays free.

        Args:
            point: Query point
            limit: Maximum number of trees to return

        Returns:
            NearestTrees ordered by distance, or None when no trees were found

        Raises:
            SpatialStoreError: If the spatial store query fails
        """
        trees = await run_in_threadpool(self.repository.fetch_nearest, point, limit)

        if not trees:
            logger.info(f"No trees found near ({point.lat}, {point.lng})")
            return None

        return NearestTrees(
            point=point,
            trees=sorted(trees, key=lambda tree: tree.distance),
        )
