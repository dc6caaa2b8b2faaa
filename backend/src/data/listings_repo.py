"""
Listings repository: SQLite-backed lookup of active service listings with coordinates.
"""
import sqlite3
from pathlib import Path
from typing import Iterable, NamedTuple

from src.data.geo import BoundingBox

ACTIVE_STATUS = "active"


class ListingRecord(NamedTuple):
    listing_id: str
    title: str
    description: str
    category: str
    price: str
    location: str
    provider_name: str
    status: str
    lat: float | None
    lng: float | None


_COLUMNS = "listing_id, title, description, category, price, location, provider_name, status, lat, lng"


def _row_to_record(r: sqlite3.Row) -> ListingRecord:
    return ListingRecord(
        listing_id=r["listing_id"],
        title=r["title"],
        description=r["description"] or "",
        category=r["category"],
        price=r["price"] or "",
        location=r["location"] or "",
        provider_name=r["provider_name"] or "",
        status=r["status"],
        lat=float(r["lat"]) if r["lat"] is not None else None,
        lng=float(r["lng"]) if r["lng"] is not None else None,
    )


def init_db(db_path: str | Path) -> None:
    """Create listings table and index if they do not exist."""
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS listings (
                listing_id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                description TEXT,
                category TEXT NOT NULL,
                price TEXT,
                location TEXT,
                provider_name TEXT,
                status TEXT NOT NULL DEFAULT 'active',
                lat REAL,
                lng REAL
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_listings_lat_lng ON listings(lat, lng)")
        conn.execute("CREATE INDEX IF NOT EXISTS idx_listings_category ON listings(category)")
        conn.commit()


def upsert_listings(db_path: str | Path, listings: Iterable[ListingRecord]) -> int:
    """Insert or replace listings by listing_id. Returns number of rows written."""
    count = 0
    with sqlite3.connect(db_path) as conn:
        for rec in listings:
            conn.execute(
                f"INSERT OR REPLACE INTO listings ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                tuple(rec),
            )
            count += 1
        conn.commit()
    return count


def _like_escape(text: str) -> str:
    """Escape LIKE wildcards so user text matches literally (used with ESCAPE '\\')."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def find_listings(
    db_path: str | Path,
    *,
    category: str | None = None,
    text_query: str | None = None,
    bbox: BoundingBox | None = None,
) -> list[ListingRecord]:
    """
    Return active listings that have coordinates.
    category is an exact match; text_query is a case-insensitive literal substring of title or description;
    bbox narrows the scan on the indexed (lat, lng), with one clause per longitude range.
    """
    db_path = Path(db_path)
    if not db_path.exists():
        return []

    clauses = ["status = ?", "lat IS NOT NULL", "lng IS NOT NULL"]
    params: list = [ACTIVE_STATUS]
    if category:
        clauses.append("category = ?")
        params.append(category)
    q = _like_escape((text_query or "").strip().lower())
    if q:
        clauses.append(
            "(lower(title) LIKE '%' || ? || '%' ESCAPE '\\'"
            " OR lower(coalesce(description, '')) LIKE '%' || ? || '%' ESCAPE '\\')"
        )
        params.extend([q, q])
    if bbox is not None:
        clauses.append("lat BETWEEN ? AND ?")
        params.extend([bbox.min_lat, bbox.max_lat])
        # No ranges: the circle covers a pole, every longitude qualifies.
        if bbox.lng_ranges:
            clauses.append("(" + " OR ".join("lng BETWEEN ? AND ?" for _ in bbox.lng_ranges) + ")")
            for lo, hi in bbox.lng_ranges:
                params.extend([lo, hi])

    with sqlite3.connect(db_path) as conn:
        conn.row_factory = sqlite3.Row
        cur = conn.execute(
            f"SELECT {_COLUMNS} FROM listings WHERE {' AND '.join(clauses)} ORDER BY listing_id",
            params,
        )
        return [_row_to_record(r) for r in cur.fetchall()]
