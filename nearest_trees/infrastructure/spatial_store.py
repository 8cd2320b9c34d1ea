"""
Infrastructure layer: PostGIS tree repository backed by a connection pool.
"""
import logging
import math
import threading
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional

import psycopg2
from psycopg2.extras import RealDictCursor
from psycopg2.pool import ThreadedConnectionPool
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from nearest_trees.config import Settings, settings
from nearest_trees.domain.models import QueryPoint, Tree
from nearest_trees.infrastructure.queries import TreeQueries


logger = logging.getLogger(__name__)


class SpatialStoreError(Exception):
    """Raised when the spatial store cannot answer a query."""
    pass


def round_distance(meters: float) -> int:
    """Round a distance to the nearest whole metre, halves rounding up."""
    return int(math.floor(meters + 0.5))


class TreeRepository:
    """
    Read-only access to the tree table.

    Owns a process-wide psycopg2 connection pool. The pool is opened on first
    use; each query checks out one connection and hands it back afterwards.
    """

    def __init__(self, config: Optional[Settings] = None):
        """
        Initialize the repository.

        Args:
            config: Settings to use (defaults to the global settings)
        """
        self.settings = config or settings
        self._pool: Optional[ThreadedConnectionPool] = None
        self._lock = threading.Lock()
        self._slots = threading.BoundedSemaphore(self.settings.db_pool_max_size)
        self._nearest_statement = TreeQueries.nearest_trees(self.settings)

    def _connect_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "connect_timeout": self.settings.db_connect_timeout,
            "options": "-c default_transaction_read_only=on",
        }
        if self.settings.database_url:
            kwargs["dsn"] = self.settings.database_url
        else:
            kwargs.update(
                host=self.settings.db_host,
                port=self.settings.db_port,
                dbname=self.settings.db_name,
                user=self.settings.db_user,
                password=self.settings.db_password,
            )
        return kwargs

    @retry(
        stop=stop_after_attempt(settings.db_connect_attempts),
        wait=wait_exponential(
            min=settings.db_connect_min_wait,
            max=settings.db_connect_max_wait,
        ),
        retry=retry_if_exception_type(psycopg2.OperationalError),
        reraise=True,
    )
    def _open_pool(self) -> ThreadedConnectionPool:
        return ThreadedConnectionPool(
            self.settings.db_pool_min_size,
            self.settings.db_pool_max_size,
            **self._connect_kwargs(),
        )

    def _get_pool(self) -> ThreadedConnectionPool:
        with self._lock:
            if self._pool is None:
                try:
                    self._pool = self._open_pool()
                except psycopg2.Error as e:
                    logger.error(
                        f"Could not connect to spatial store at {self.settings.database_target}: {e}"
                    )
                    raise SpatialStoreError("Spatial store is unavailable") from e
                logger.info(f"Connected to spatial store at {self.settings.database_target}")
            return self._pool

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """
        Check out a pooled connection for the duration of the block.

        Callers wait for a free slot when every connection is checked out.
        Connections that fail at the transport level are discarded rather
        than returned to the pool.

        Raises:
            SpatialStoreError: If no connection frees up within the checkout timeout
        """
        pool = self._get_pool()
        if not self._slots.acquire(timeout=self.settings.db_pool_timeout):
            logger.error(
                f"No pooled connection became free within {self.settings.db_pool_timeout}s"
            )
            raise SpatialStoreError("Spatial store connection pool exhausted")
        try:
            conn = pool.getconn()
            broken = False
            try:
                conn.autocommit = True
                yield conn
            except psycopg2.OperationalError:
                broken = True
                raise
            finally:
                pool.putconn(conn, close=broken or bool(conn.closed))
        finally:
            self._slots.release()

    def open(self) -> None:
        """Open the pool eagerly."""
        self._get_pool()

    def close(self) -> None:
        """Close every pooled connection."""
        with self._lock:
            if self._pool is not None:
                self._pool.closeall()
                self._pool = None
                logger.info("Spatial store connection pool closed")

    def ping(self) -> bool:
        """
        Check that the store answers a trivial query.

        Returns:
            True if the store responded, False otherwise
        """
        try:
            with self.connection() as conn:
                with conn.cursor() as cursor:
                    cursor.execute(TreeQueries.PING)
                    cursor.fetchone()
        except (psycopg2.Error, SpatialStoreError) as e:
            logger.warning(f"Spatial store ping failed: {e}")
            return False
        return True

    def fetch_nearest(self, point: QueryPoint, limit: int) -> List[Tree]:
        """
        Fetch the trees nearest to a point.

        Args:
            point: Query point
            limit: Maximum number of trees to return

        Returns:
            Trees ordered by ascending distance (possibly empty)

        Raises:
            SpatialStoreError: If the store is unreachable or the query fails
        """
        params = {"lat": point.lat, "lng": point.lng, "limit": limit}
        try:
            with self.connection() as conn:
                with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                    cursor.execute(self._nearest_statement, params)
                    rows = cursor.fetchall()
        except psycopg2.Error as e:
            raise SpatialStoreError("Nearest tree query failed") from e

        logger.debug(f"Nearest tree query at ({point.lat}, {point.lng}) returned {len(rows)} rows")
        return [self._row_to_tree(row) for row in rows]

    @staticmethod
    def _row_to_tree(row: Dict[str, Any]) -> Tree:
        height = row["height"]
        if isinstance(height, Decimal):
            height = float(height)
        return Tree(
            id=str(row["id"]),
            boomsoort=row["species"],
            boomhoogte=height,
            coordinates=(float(row["longitude"]), float(row["latitude"])),
            distance=round_distance(float(row["distance_meters"])),
        )


# Singleton instance
_tree_repository: Optional[TreeRepository] = None


def get_tree_repository() -> TreeRepository:
    """
    Get or create the singleton tree repository.

    Returns:
        TreeRepository instance
    """
    global _tree_repository
    if _tree_repository is None:
        _tree_repository = TreeRepository()
    return _tree_repository
