#!/usr/bin/env python3
"""
Load service listings from a CSV file into the listings SQLite DB.

CSV columns: listing_id, title, description, category, price, location,
provider_name, status, lat, lng (header row expected).

Rows with empty lat/lng get approximate city coordinates from their location
text. Rows whose location is unknown are stored without coordinates, so they
never show up in nearby search.

Usage:
  python scripts/seed_listings.py
  python scripts/seed_listings.py --csv data/my_listings.csv --db data/listings.db
"""
import argparse
import csv
import sys
from pathlib import Path

backend = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend))

from src.data.geocoding import coordinates_for_location
from src.data.listings_repo import ACTIVE_STATUS, ListingRecord, init_db, upsert_listings

REQUIRED_COLUMNS = {"listing_id", "title", "category"}


def _parse_coord(value: str | None) -> float | None:
    value = (value or "").strip()
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def row_to_listing(row: dict[str, str]) -> ListingRecord | None:
    """Build a ListingRecord from a CSV row; None if the row has no id."""
    row = {k.strip().lower().lstrip("\ufeff"): (v or "").strip() for k, v in row.items() if k is not None}
    listing_id = row.get("listing_id", "")
    if not listing_id:
        return None
    lat = _parse_coord(row.get("lat"))
    lng = _parse_coord(row.get("lng"))
    if lat is None or lng is None:
        coords = coordinates_for_location(row.get("location"))
        lat, lng = (coords.lat, coords.lng) if coords else (None, None)
    return ListingRecord(
        listing_id=listing_id,
        title=row.get("title", ""),
        description=row.get("description", ""),
        category=row.get("category", ""),
        price=row.get("price", ""),
        location=row.get("location", ""),
        provider_name=row.get("provider_name", ""),
        status=row.get("status") or ACTIVE_STATUS,
        lat=lat,
        lng=lng,
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed service listings into SQLite")
    parser.add_argument(
        "--csv",
        default=backend / "data" / "listings_seed.csv",
        type=Path,
        help="CSV with columns: listing_id, title, description, category, price, location, provider_name, status, lat, lng",
    )
    parser.add_argument(
        "--db",
        default=backend / "data" / "listings.db",
        type=Path,
        help="Path to listings SQLite DB",
    )
    args = parser.parse_args()

    if not args.csv.exists():
        print(f"Error: CSV not found: {args.csv}", file=sys.stderr)
        return 1

    with open(args.csv, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        fieldnames = {h.strip().lower().lstrip("\ufeff") for h in (reader.fieldnames or [])}
        missing = REQUIRED_COLUMNS - fieldnames
        if missing:
            print(f"Error: CSV missing columns {sorted(missing)}. Got: {sorted(fieldnames)}", file=sys.stderr)
            return 1
        listings = [rec for rec in (row_to_listing(r) for r in reader) if rec is not None]

    init_db(args.db)
    count = upsert_listings(args.db, listings)
    without_coords = sum(1 for rec in listings if rec.lat is None)
    print(f"Seeded {count} listings into {args.db} ({without_coords} without coordinates)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
