"""Pydantic models for GET /services/nearby."""
from pydantic import BaseModel

from src.nearby.service import NearbyItem, NearbySearchResult


class CentroidResponse(BaseModel):
    lat: float
    lng: float


class NearbyServiceItem(BaseModel):
    id: str
    title: str
    description: str
    category: str
    price: str
    location: str
    provider_name: str
    lat: float
    lng: float
    distance_km: float

    @classmethod
    def from_item(cls, item: NearbyItem) -> "NearbyServiceItem":
        s = item.listing
        return cls(
            id=s.listing_id,
            title=s.title,
            description=s.description,
            category=s.category,
            price=s.price,
            location=s.location,
            provider_name=s.provider_name,
            lat=s.lat,
            lng=s.lng,
            distance_km=round(item.distance_km, 3),
        )


class NearbyServicesResponse(BaseModel):
    success: bool = True
    total: int
    page: int
    limit: int
    k: int
    centroid: CentroidResponse | None  # null when there are no candidates
    items: list[NearbyServiceItem]

    @classmethod
    def from_result(cls, result: NearbySearchResult) -> "NearbyServicesResponse":
        centroid = None
        if result.centroid is not None:
            centroid = CentroidResponse(lat=result.centroid.lat, lng=result.centroid.lng)
        return cls(
            total=result.total,
            page=result.page,
            limit=result.limit,
            k=result.k,
            centroid=centroid,
            items=[NearbyServiceItem.from_item(i) for i in result.items],
        )
