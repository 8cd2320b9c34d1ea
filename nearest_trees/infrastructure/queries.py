"""
SQL statements for the spatial store.

Table and column names come from configuration, so statements are composed
with ``psycopg2.sql`` and every name is quoted as an identifier. Values are
always passed as query parameters.
"""
from psycopg2 import sql

from nearest_trees.config import Settings


class TreeQueries:
    """SQL statements against the tree table."""

    # KNN candidates come from the planar index ordering; the outer query
    # re-sorts them by geodesic distance.
    NEAREST_TEMPLATE = """
        SELECT id, species, height, longitude, latitude, distance_meters
        FROM (
            SELECT
                {id}::text AS id,
                {species} AS species,
                {height} AS height,
                ST_X({geom}) AS longitude,
                ST_Y({geom}) AS latitude,
                ST_Distance(
                    {geom}::geography,
                    ST_SetSRID(ST_Point(%(lng)s, %(lat)s), 4326)::geography
                ) AS distance_meters
            FROM {table}
            WHERE {geom} IS NOT NULL
            ORDER BY {geom} <-> ST_SetSRID(ST_Point(%(lng)s, %(lat)s), 4326)
            LIMIT %(limit)s
        ) AS nearest
        ORDER BY distance_meters, id
    """

    PING = "SELECT 1"

    @staticmethod
    def table_identifier(table: str) -> sql.Identifier:
        """
        Quote a table name, honouring an optional schema prefix.

        Args:
            table: ``table`` or ``schema.table``

        Returns:
            Identifier usable in a composed statement
        """
        return sql.Identifier(*table.split("."))

    @classmethod
    def nearest_trees(cls, settings: Settings) -> sql.Composed:
        """
        Build the nearest-trees statement for the configured table layout.

        The statement expects ``lat``, ``lng`` and ``limit`` parameters.
        """
        return sql.SQL(cls.NEAREST_TEMPLATE).format(
            id=sql.Identifier(settings.tree_id_column),
            species=sql.Identifier(settings.tree_species_column),
            height=sql.Identifier(settings.tree_height_column),
            geom=sql.Identifier(settings.tree_geometry_column),
            table=cls.table_identifier(settings.tree_table),
        )
