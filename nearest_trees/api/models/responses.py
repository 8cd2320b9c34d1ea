"""
API response models using Pydantic.
"""
from typing import List, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field

from nearest_trees.domain.models import NearestTrees, Tree


class UserLocation(BaseModel):
    """The query point echoed back to the client."""
    lat: float = Field(examples=[52.37])
    lng: float = Field(examples=[4.90])


class TreeItem(BaseModel):
    """A tree as returned to clients."""
    id: str
    boomsoort: Optional[str] = Field(default=None, description="Species label")
    boomhoogte: Optional[Union[float, str]] = Field(
        default=None,
        description="Tree height"
    )
    coordinates: Tuple[float, float] = Field(
        description="Position as [longitude, latitude]"
    )
    distance: int = Field(description="Distance from the query point in metres")

    @classmethod
    def from_domain(cls, tree: Tree) -> "TreeItem":
        return cls(**tree.model_dump())


class NearestTreesResponse(BaseModel):
    """Response model for a successful nearest-trees lookup."""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "success": True,
                "userLocation": {"lat": 52.37, "lng": 4.9},
                "trees": [
                    {
                        "id": "1042",
                        "boomsoort": "Tilia x europaea",
                        "boomhoogte": 12.5,
                        "coordinates": [4.90012, 52.37008],
                        "distance": 12,
                    }
                ],
                "closest": {
                    "id": "1042",
                    "boomsoort": "Tilia x europaea",
                    "boomhoogte": 12.5,
                    "coordinates": [4.90012, 52.37008],
                    "distance": 12,
                },
            }
        },
    )

    success: bool = True
    user_location: UserLocation = Field(alias="userLocation")
    trees: List[TreeItem]
    closest: TreeItem

    @classmethod
    def from_result(cls, result: NearestTrees) -> "NearestTreesResponse":
        trees = [TreeItem.from_domain(tree) for tree in result.trees]
        return cls(
            user_location=UserLocation(lat=result.point.lat, lng=result.point.lng),
            trees=trees,
            closest=trees[0],
        )


class MessageResponse(BaseModel):
    """Informational response used when nothing matched."""
    message: str = Field(examples=["No trees found"])


class ErrorResponse(BaseModel):
    """Error body shared by every failing response."""
    error: str


class MapClientConfig(BaseModel):
    """Settings the map page needs before it can query trees."""
    model_config = ConfigDict(populate_by_name=True)

    limit: int
    geolocation_timeout_ms: int = Field(alias="geolocationTimeoutMs")
    geolocation_max_age_ms: int = Field(alias="geolocationMaxAgeMs")
    tile_url: str = Field(alias="tileUrl")
    tile_attribution: str = Field(alias="tileAttribution")
