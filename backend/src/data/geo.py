"""
Geo helpers for nearby listing search: Haversine distance and a local planar
projection (degrees <-> meters) used by the clustering step.
"""
import math
from typing import NamedTuple

# Earth radius (WGS84 approximate)
EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_M = 6_371_000.0

# Slack so points exactly on the radius stay inside the box despite rounding
BBOX_PAD_DEG = 1e-6


class GeoPoint(NamedTuple):
    lat: float
    lng: float


class PlanarPoint(NamedTuple):
    """Meters in a local plane. Only comparable with points projected using the same ref_lat."""

    x: float
    y: float


def haversine_distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """
    Return great-circle distance between two points in kilometers.
    Arguments in degrees.
    """
    lat1_rad = math.radians(a.lat)
    lat2_rad = math.radians(b.lat)
    dlat = math.radians(b.lat - a.lat)
    dlng = math.radians(b.lng - a.lng)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def project_to_meters(point: GeoPoint, ref_lat: float) -> PlanarPoint:
    """
    Equirectangular-style projection scaled at ref_lat.
    Longitude is not offset by a reference longitude, so only differences
    between points projected with the same ref_lat are meaningful.
    """
    x = EARTH_RADIUS_M * math.radians(point.lng) * math.cos(math.radians(ref_lat))
    y = EARTH_RADIUS_M * math.radians(point.lat)
    return PlanarPoint(x=x, y=y)


def unproject_from_meters(point: PlanarPoint, ref_lat: float, ref_lng: float) -> GeoPoint:
    """Approximate inverse for display: treats point as an offset in meters from (ref_lat, ref_lng)."""
    lat = ref_lat + math.degrees(point.y / EARTH_RADIUS_M)
    lng = ref_lng + math.degrees(point.x / (EARTH_RADIUS_M * math.cos(math.radians(ref_lat))))
    return GeoPoint(lat=lat, lng=lng)


class BoundingBox(NamedTuple):
    """
    Lat/lng box containing a radius circle.
    lng_ranges holds one (min, max) pair, two when the circle crosses the antimeridian,
    or none when every longitude is in range (the circle reaches a pole).
    """

    min_lat: float
    max_lat: float
    lng_ranges: tuple[tuple[float, float], ...]


def bounding_box(center: GeoPoint, radius_km: float) -> BoundingBox:
    """Smallest lat/lng box around the spherical cap of radius_km at center."""
    r = radius_km / EARTH_RADIUS_KM
    dlat = math.degrees(r) + BBOX_PAD_DEG
    min_lat = max(-90.0, center.lat - dlat)
    max_lat = min(90.0, center.lat + dlat)
    if center.lat + dlat >= 90.0 or center.lat - dlat <= -90.0:
        return BoundingBox(min_lat, max_lat, ())

    # Exact longitude half-width of a spherical cap: asin(sin(r) / cos(lat)).
    ratio = math.sin(r) / math.cos(math.radians(center.lat))
    if ratio >= 1.0:
        return BoundingBox(min_lat, max_lat, ())
    dlng = math.degrees(math.asin(ratio)) + BBOX_PAD_DEG
    if dlng >= 180.0:
        return BoundingBox(min_lat, max_lat, ())

    lo, hi = center.lng - dlng, center.lng + dlng
    if lo < -180.0:
        ranges = ((lo + 360.0, 180.0), (-180.0, hi))
    elif hi > 180.0:
        ranges = ((lo, 180.0), (-180.0, hi - 360.0))
    else:
        ranges = ((lo, hi),)
    return BoundingBox(min_lat, max_lat, ranges)
