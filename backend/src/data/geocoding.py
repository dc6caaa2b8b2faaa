"""
Approximate city coordinates for free-text listing locations (Mexico).
Used when loading listings that have a location string but no lat/lng.
"""
from src.data.geo import GeoPoint

LOCATION_COORDINATES: dict[str, GeoPoint] = {
    "Guadalajara, Jalisco": GeoPoint(20.6597, -103.3496),
    "Monterrey, Nuevo León": GeoPoint(25.6866, -100.3161),
    "Puebla, Puebla": GeoPoint(19.0414, -98.2063),
    "Ciudad de México": GeoPoint(19.4326, -99.1332),
    "Mérida, Yucatán": GeoPoint(20.9674, -89.5926),
    "San Luis Potosí, SLP": GeoPoint(22.1565, -100.9855),
    "Zapopan, Jalisco": GeoPoint(20.7242, -103.3935),
    "Tijuana, Baja California": GeoPoint(32.5149, -117.0382),
    "Cancún, Quintana Roo": GeoPoint(21.1619, -86.8515),
    "Querétaro, Querétaro": GeoPoint(20.5881, -100.3881),
    "León, Guanajuato": GeoPoint(21.1250, -101.6860),
    "Aguascalientes, Aguascalientes": GeoPoint(21.8853, -102.2916),
    "México, CDMX": GeoPoint(19.4326, -99.1332),
    "Puerto Vallarta, Jalisco": GeoPoint(20.6597, -105.2296),
}

# Lowercase keyword -> canonical LOCATION_COORDINATES key, checked in order
_KEYWORDS: list[tuple[str, str]] = [
    ("zapopan", "Zapopan, Jalisco"),
    ("puerto vallarta", "Puerto Vallarta, Jalisco"),
    ("guadalajara", "Guadalajara, Jalisco"),
    ("monterrey", "Monterrey, Nuevo León"),
    ("puebla", "Puebla, Puebla"),
    ("cdmx", "Ciudad de México"),
    ("ciudad de mexico", "Ciudad de México"),
    ("méxico", "Ciudad de México"),
    ("mérida", "Mérida, Yucatán"),
    ("merida", "Mérida, Yucatán"),
    ("san luis", "San Luis Potosí, SLP"),
    ("tijuana", "Tijuana, Baja California"),
    ("cancún", "Cancún, Quintana Roo"),
    ("cancun", "Cancún, Quintana Roo"),
    ("querétaro", "Querétaro, Querétaro"),
    ("queretaro", "Querétaro, Querétaro"),
    ("león", "León, Guanajuato"),
    ("aguascalientes", "Aguascalientes, Aguascalientes"),
]


def coordinates_for_location(location: str | None) -> GeoPoint | None:
    """
    Resolve a location string to approximate coordinates.
    Exact name first, then city name (part before the comma), then keywords.
    Returns None when nothing matches; callers must not substitute a default city.
    """
    location = (location or "").strip()
    if not location:
        return None

    if location in LOCATION_COORDINATES:
        return LOCATION_COORDINATES[location]

    for key, coords in LOCATION_COORDINATES.items():
        city = key.split(",")[0].strip()
        if city in location:
            return coords

    lowered = location.lower()
    for keyword, key in _KEYWORDS:
        if keyword in lowered:
            return LOCATION_COORDINATES[key]
    return None
