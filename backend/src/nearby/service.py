"""
Nearby listing search: radius filter, k-means over projected coordinates,
then rank the cluster closest to the requester by true distance.
"""
import logging
import math
import random
from typing import Callable, NamedTuple, Sequence

from src.clustering.kmeans import DEFAULT_MAX_ITER, DEFAULT_TOL, LabeledPoint, kmeans, nearest_centroid
from src.data.geo import (
    BoundingBox,
    GeoPoint,
    PlanarPoint,
    bounding_box,
    haversine_distance_km,
    project_to_meters,
    unproject_from_meters,
)
from src.data.listings_repo import ListingRecord

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_KM = 15.0
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
AUTO_K_MIN = 2
AUTO_K_MAX = 10


class NearbyFilters(NamedTuple):
    category: str | None = None
    text_query: str | None = None
    radius_km: float | None = None
    k: int | None = None


class NearbyItem(NamedTuple):
    listing: ListingRecord
    distance_km: float


class NearbySearchResult(NamedTuple):
    total: int
    page: int
    limit: int
    k: int
    centroid: GeoPoint | None
    items: list[NearbyItem]


# (category, text_query, bbox) -> listings with coordinates
FindListings = Callable[[str | None, str | None, BoundingBox | None], Sequence[ListingRecord]]


def choose_cluster_count(n: int, k: int | None = None) -> int:
    """Explicit k clamped to n; otherwise round(sqrt(n / 2)) clamped to [2, 10], then to n."""
    if k is not None:
        return max(1, min(k, n))
    auto = min(max(AUTO_K_MIN, round(math.sqrt(n / 2))), AUTO_K_MAX)
    return min(auto, n)


def paginate(items: Sequence, page: int, limit: int) -> list:
    skip = (page - 1) * limit
    return list(items[skip: skip + limit])


def _listing_point(listing: ListingRecord) -> GeoPoint:
    return GeoPoint(lat=listing.lat, lng=listing.lng)


def _rank_by_distance(requester: GeoPoint, listings: Sequence[ListingRecord], radius_km: float) -> list[NearbyItem]:
    ranked = []
    for listing in listings:
        d = haversine_distance_km(requester, _listing_point(listing))
        if d <= radius_km:
            ranked.append(NearbyItem(listing=listing, distance_km=d))
    ranked.sort(key=lambda item: item.distance_km)
    return ranked


def find_nearby(
    requester: GeoPoint,
    filters: NearbyFilters,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
    *,
    find_listings: FindListings,
    rng: random.Random | None = None,
    max_iter: int = DEFAULT_MAX_ITER,
    tol: float = DEFAULT_TOL,
) -> NearbySearchResult:
    """
    Return the page of listings in the cluster nearest the requester, sorted by true distance.

    total counts the selected cluster's members within the radius, not every candidate.
    Raises ValueError when requester coordinates are not finite numbers.
    """
    if not (math.isfinite(requester.lat) and math.isfinite(requester.lng)):
        raise ValueError("lat and lng must be finite numbers")
    radius_km = filters.radius_km if filters.radius_km is not None else DEFAULT_RADIUS_KM

    candidates = find_listings(filters.category, filters.text_query, bounding_box(requester, radius_km))
    in_radius = [
        listing for listing in candidates
        if haversine_distance_km(requester, _listing_point(listing)) <= radius_km
    ]
    n = len(in_radius)

    if n == 0:
        logger.info("telemetry nearby_empty candidates=%s radius_km=%s", len(candidates), radius_km)
        return NearbySearchResult(total=0, page=page, limit=limit, k=0, centroid=None, items=[])

    if n < 2:
        ranked = _rank_by_distance(requester, in_radius, radius_km)
        return NearbySearchResult(
            total=len(ranked),
            page=page,
            limit=limit,
            k=1,
            centroid=_listing_point(in_radius[0]),
            items=paginate(ranked, page, limit),
        )

    k = choose_cluster_count(n, filters.k)
    points = [
        LabeledPoint(*project_to_meters(_listing_point(listing), requester.lat), ref_id=listing.listing_id)
        for listing in in_radius
    ]
    clusters = kmeans(points, k, max_iter=max_iter, tol=tol, rng=rng)

    requester_xy = project_to_meters(requester, requester.lat)
    selected = nearest_centroid(requester_xy, clusters.centroids)

    by_id = {listing.listing_id: listing for listing in in_radius}
    members = [by_id[p.ref_id] for p, j in zip(points, clusters.assignments) if j == selected]
    # Planar clustering is approximate; re-check the true radius.
    ranked = _rank_by_distance(requester, members, radius_km)

    centroid_xy = clusters.centroids[selected]
    offset = PlanarPoint(x=centroid_xy.x - requester_xy.x, y=centroid_xy.y - requester_xy.y)
    centroid = unproject_from_meters(offset, requester.lat, requester.lng)

    logger.info(
        "telemetry nearby_clustered candidates=%s k=%s cluster=%s cluster_size=%s limit=%s",
        n, k, selected, len(ranked), limit,
    )
    return NearbySearchResult(
        total=len(ranked),
        page=page,
        limit=limit,
        k=k,
        centroid=centroid,
        items=paginate(ranked, page, limit),
    )
