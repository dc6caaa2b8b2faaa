"""Pytest configuration and fixtures."""
import sys
from pathlib import Path

import pytest

# Ensure backend root is on path when running pytest from repo root or backend
backend = Path(__file__).resolve().parent.parent
if str(backend) not in sys.path:
    sys.path.insert(0, str(backend))

from src.data.listings_repo import ListingRecord, init_db, upsert_listings  # noqa: E402

# Guadalajara centro
USER_LAT, USER_LNG = 20.6597, -103.3496

# Group near the user (< 1 km) and a group ~10 km east; both inside the default 15 km radius.
NEAR_OFFSETS = [(0.001, 0.001), (-0.002, 0.0015), (0.003, -0.001), (-0.001, -0.003), (0.004, 0.002), (0.0005, 0.006)]
EAST_OFFSETS = [(0.001, 0.0), (-0.002, 0.002), (0.002, -0.002), (0.0, 0.003), (-0.003, -0.001), (0.001, 0.004)]
EAST_LNG = -103.25


def _listing(
    listing_id: str,
    lat: float | None,
    lng: float | None,
    *,
    category: str = "Plomería",
    title: str | None = None,
    description: str = "",
    status: str = "active",
) -> ListingRecord:
    return ListingRecord(
        listing_id=listing_id,
        title=title or f"Servicio {listing_id}",
        description=description,
        category=category,
        price="Desde $300 MXN",
        location="Guadalajara, Jalisco",
        provider_name="Proveedor",
        status=status,
        lat=lat,
        lng=lng,
    )


@pytest.fixture
def make_listing():
    return _listing


@pytest.fixture
def two_cluster_listings() -> list[ListingRecord]:
    """12 active listings: near-0..near-5 around the user, east-0..east-5 about 10 km east."""
    near = [_listing(f"near-{i}", USER_LAT + dlat, USER_LNG + dlng) for i, (dlat, dlng) in enumerate(NEAR_OFFSETS)]
    east = [_listing(f"east-{i}", USER_LAT + dlat, EAST_LNG + dlng) for i, (dlat, dlng) in enumerate(EAST_OFFSETS)]
    return near + east


@pytest.fixture
def listings_db(tmp_path, two_cluster_listings):
    """Temporary listings DB seeded with the two clusters plus rows nearby search must ignore."""
    db = tmp_path / "listings.db"
    init_db(db)
    upsert_listings(
        db,
        two_cluster_listings
        + [
            _listing("inactive", USER_LAT, USER_LNG + 0.0001, status="inactive"),
            _listing("no-coords", None, None),
            _listing("monterrey", 25.6866, -100.3161),
        ],
    )
    return db
