"""
Domain models for trees and nearest-tree queries.

These models represent the core domain entities and should be independent
of any infrastructure concerns (database drivers, HTTP, etc.).
"""
from typing import List, Optional, Tuple, Union
from pydantic import BaseModel, Field, model_validator


class QueryPoint(BaseModel):
    """A WGS84 coordinate that trees are ranked against."""
    lat: float = Field(description="Latitude in decimal degrees", allow_inf_nan=False)
    lng: float = Field(description="Longitude in decimal degrees", allow_inf_nan=False)


class Tree(BaseModel):
    """A single tree annotated with its distance from the query point."""
    id: str
    boomsoort: Optional[str] = Field(default=None, description="Species label")
    boomhoogte: Optional[Union[float, str]] = Field(
        default=None,
        description="Height in metres, or the store's height-class label"
    )
    coordinates: Tuple[float, float] = Field(
        description="Position as [longitude, latitude]"
    )
    distance: int = Field(ge=0, description="Distance from the query point in metres")


class NearestTrees(BaseModel):
    """Trees ordered by ascending distance from a query point."""
    point: QueryPoint
    trees: List[Tree] = Field(min_length=1)

    @model_validator(mode="after")
    def check_ordering(self) -> "NearestTrees":
        distances = [tree.distance for tree in self.trees]
        if distances != sorted(distances):
            raise ValueError("Trees must be ordered by non-decreasing distance")
        return self

    @property
    def closest(self) -> Tree:
        return self.trees[0]
