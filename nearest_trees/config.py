"""
Application configuration using Pydantic settings.
"""
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Spatial store connection
    database_url: Optional[str] = Field(
        default=None,
        description="PostgreSQL DSN; overrides the discrete db_* fields when set"
    )
    db_host: str = Field(default="localhost", description="Database host")
    db_port: int = Field(default=5432, description="Database port")
    db_name: str = Field(default="treesdb", description="Database name")
    db_user: str = Field(default="trees_user", description="Database user")
    db_password: str = Field(default="", description="Database password")
    db_connect_timeout: int = Field(
        default=5,
        description="Seconds to wait when opening a database connection"
    )

    # Connection pool
    db_pool_min_size: int = Field(
        default=1,
        description="Connections kept open by the pool"
    )
    db_pool_max_size: int = Field(
        default=10,
        description="Upper bound on concurrently checked-out connections"
    )
    db_pool_timeout: float = Field(
        default=30.0,
        description="Seconds a query waits for a free pooled connection"
    )

    # Pool creation retry
    db_connect_attempts: int = Field(
        default=3,
        description="Attempts made to open the connection pool"
    )
    db_connect_min_wait: int = Field(
        default=1,
        description="Minimum wait time in seconds between pool attempts"
    )
    db_connect_max_wait: int = Field(
        default=4,
        description="Maximum wait time in seconds between pool attempts"
    )

    # Tree table layout
    tree_table: str = Field(
        default="trees_centroids",
        description="Table holding one point per tree"
    )
    tree_id_column: str = Field(default="ID")
    tree_species_column: str = Field(default="Boomsoort")
    tree_height_column: str = Field(default="Boomhoogte")
    tree_geometry_column: str = Field(
        default="geometry",
        description="Point geometry column in EPSG:4326"
    )

    # Query defaults
    default_limit: int = Field(
        default=1,
        description="Trees returned when the request carries no usable limit"
    )

    # Map client
    map_default_limit: int = Field(
        default=50,
        description="Trees requested by the map page"
    )
    geolocation_timeout_ms: int = Field(
        default=10000,
        description="Browser geolocation timeout in milliseconds"
    )
    geolocation_max_age_ms: int = Field(
        default=60000,
        description="Maximum age of a cached browser position in milliseconds"
    )
    map_tile_url: str = Field(
        default="https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png",
        description="Leaflet tile layer URL template"
    )
    map_tile_attribution: str = Field(
        default="&copy; OpenStreetMap contributors",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Whether per-client rate limiting is applied"
    )
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Nearest Trees",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    # Server
    host: str = Field(
        default="127.0.0.1",
        description="Interface the uvicorn server binds to"
    )
    port: int = Field(
        default=8000,
        description="Port the uvicorn server listens on"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def database_target(self) -> str:
        """Host/port/database description that is safe to log."""
        if self.database_url:
            return self.database_url.rsplit("@", 1)[-1]
        return f"{self.db_host}:{self.db_port}/{self.db_name}"


# Global settings instance
settings = Settings()
