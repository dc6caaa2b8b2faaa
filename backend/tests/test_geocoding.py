"""Tests for location text -> approximate coordinates, and the CSV seed script."""
import csv
import sys
from pathlib import Path

import pytest

from src.data.geo import GeoPoint
from src.data.geocoding import LOCATION_COORDINATES, coordinates_for_location
from src.data.listings_repo import find_listings

# scripts/ is not a package; put it on the path to import the seed script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "scripts"))
import seed_listings  # noqa: E402


def test_exact_match():
    assert coordinates_for_location("Monterrey, Nuevo León") == GeoPoint(25.6866, -100.3161)


def test_city_name_match():
    assert coordinates_for_location("Col. Americana, Guadalajara") == LOCATION_COORDINATES["Guadalajara, Jalisco"]


def test_keyword_match_is_case_insensitive():
    assert coordinates_for_location("CDMX, col. Roma") == LOCATION_COORDINATES["Ciudad de México"]
    assert coordinates_for_location("cerca de cancun") == LOCATION_COORDINATES["Cancún, Quintana Roo"]


@pytest.mark.parametrize("location", [None, "", "   ", "Remoto", "Buenos Aires, Argentina"])
def test_unknown_location_is_none(location):
    assert coordinates_for_location(location) is None


def test_row_to_listing_fills_missing_coordinates():
    rec = seed_listings.row_to_listing(
        {"listing_id": "p1", "title": "Pintura", "category": "Pintura", "location": "Zapopan, Jalisco", "lat": "", "lng": ""}
    )
    assert (rec.lat, rec.lng) == (20.7242, -103.3935)
    assert rec.status == "active"


def test_row_to_listing_keeps_unknown_location_without_coordinates():
    rec = seed_listings.row_to_listing({"listing_id": "r1", "title": "Clases", "category": "Clases", "location": "Remoto"})
    assert rec.lat is None and rec.lng is None


def test_row_to_listing_skips_rows_without_id():
    assert seed_listings.row_to_listing({"listing_id": " ", "title": "x", "category": "y"}) is None


def test_seed_script_loads_csv(tmp_path, monkeypatch):
    csv_path = tmp_path / "listings.csv"
    with open(csv_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["listing_id", "title", "description", "category", "price", "location", "provider_name", "status", "lat", "lng"])
        writer.writerow(["a", "Plomería", "", "Plomería", "$350", "Guadalajara, Jalisco", "Carlos", "active", "20.67", "-103.34"])
        writer.writerow(["b", "Pintura", "", "Pintura", "$90", "Guadalajara, Jalisco", "Ana", "active", "", ""])
        writer.writerow(["c", "Clases", "", "Clases", "$200", "Remoto", "Paola", "active", "", ""])
    db = tmp_path / "listings.db"
    monkeypatch.setattr(sys, "argv", ["seed_listings.py", "--csv", str(csv_path), "--db", str(db)])
    assert seed_listings.main() == 0
    ids = {s.listing_id for s in find_listings(db)}
    assert ids == {"a", "b"}
