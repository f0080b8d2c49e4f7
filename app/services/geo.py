"""Address parsing and great-circle helpers for UK addresses."""
import math
import re
from typing import Optional

from app.core.geo_tables import (
    DEFAULT_TABLES,
    EARTH_RADIUS_MILES,
    LONDON_AREAS,
    REGION_MARKERS,
    SCOTLAND_AREAS,
    WALES_AREAS,
    GeoTables,
)

FULL_POSTCODE_RE = re.compile(r"\b([A-Z]{1,2}[0-9][A-Z0-9]?)\s*([0-9][A-Z]{2})\b", re.IGNORECASE)
# Bare outward codes are only trusted in upper case ("M1", "SW1A"), otherwise
# words like "a1" or "st2" in free text would be read as postcodes.
OUTWARD_CODE_RE = re.compile(r"\b([A-Z]{1,2}[0-9][A-Z0-9]?)\b")
DISTRICT_RE = re.compile(r"^[A-Z]{1,2}[0-9]{1,2}")
AREA_RE = re.compile(r"^[A-Z]{1,2}")

Point = tuple[float, float]


def normalize_address(address: Optional[str]) -> str:
    if not address:
        return ""
    return " ".join(address.split())


def extract_postcode(address: str) -> Optional[str]:
    """Full postcode in canonical form ("PE2 5ET"), if the address has one."""
    match = FULL_POSTCODE_RE.search(address or "")
    if not match:
        return None
    return f"{match.group(1).upper()} {match.group(2).upper()}"


def extract_outward_code(address: str) -> Optional[str]:
    postcode = extract_postcode(address)
    if postcode:
        return postcode.split(" ")[0]
    match = OUTWARD_CODE_RE.search(address or "")
    return match.group(1) if match else None


def postcode_district(outward_code: str) -> Optional[str]:
    match = DISTRICT_RE.match(outward_code)
    return match.group(0) if match else None


def postcode_area(outward_code: str) -> Optional[str]:
    match = AREA_RE.match(outward_code)
    return match.group(0) if match else None


def _contains_word(text: str, word: str) -> bool:
    return re.search(rf"\b{re.escape(word)}\b", text) is not None


def extract_cities(address: str, tables: GeoTables = DEFAULT_TABLES) -> list[str]:
    """Known cities named in the address, most specific first.

    UK addresses put the town after the street, so "London Road, Brighton"
    yields ``["brighton", "london"]``.
    """
    text = FULL_POSTCODE_RE.sub(" ", address or "")
    text = re.sub(r"[,.]", " ", text).lower()
    found = []
    for city in tables.cities:
        name = city.lower()
        positions = [m.start() for m in re.finditer(rf"\b{re.escape(name)}\b", text)]
        if positions:
            found.append((max(positions), name))
    return [name for _, name in sorted(found, reverse=True)]


def canonical_city(address: str, tables: GeoTables = DEFAULT_TABLES) -> Optional[str]:
    cities = extract_cities(address, tables)
    return cities[0] if cities else None


def resolve_coordinates(address: str, tables: GeoTables = DEFAULT_TABLES) -> Optional[Point]:
    """Best-effort centroid for an address.

    Tries the outward code, its numeric district, then its area letters;
    without a usable postcode, a known town or city named in the text.
    Returns None when nothing is recognised.
    """
    outward = extract_outward_code(address)
    if outward:
        for key in (outward, postcode_district(outward), postcode_area(outward)):
            if key and key in tables.postcode_centroids:
                return tables.postcode_centroids[key]

    text = (address or "").lower()
    for name in sorted(tables.city_centroids, key=len, reverse=True):
        if _contains_word(text, name):
            return tables.city_centroids[name]
    return None


def haversine_miles(origin: Point, destination: Point) -> float:
    """Great-circle distance in miles between two (lat, lng) points."""
    lat1, lng1 = origin
    lat2, lng2 = destination
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (math.sin(d_lat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(d_lng / 2) ** 2)
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def detect_region(address: str) -> Optional[str]:
    """"london", "scotland", "wales" or None, from text markers or postcode area."""
    text = (address or "").lower()
    for region, markers in REGION_MARKERS.items():
        if any(_contains_word(text, marker) for marker in markers):
            return region

    outward = extract_outward_code(address)
    area = postcode_area(outward) if outward else None
    if area in LONDON_AREAS:
        return "london"
    if area in SCOTLAND_AREAS:
        return "scotland"
    if area in WALES_AREAS:
        return "wales"
    return None


def winding_factor(
    from_address: str,
    to_address: str,
    straight_miles: float,
    tables: GeoTables = DEFAULT_TABLES,
) -> float:
    """Road-to-straight-line ratio for a route.

    Hilly or dense regions win over distance bands; otherwise short hops are
    treated as urban and long hauls as motorway-dominated.
    """
    factors = tables.winding_factors
    regions = {detect_region(from_address), detect_region(to_address)} - {None}
    for region in ("scotland", "wales", "london"):
        if region in regions:
            return factors[region]

    if straight_miles < tables.urban_straight_miles:
        return factors["urban"]
    if straight_miles > tables.long_haul_straight_miles:
        return factors["long_haul"]
    return factors["default"]


def in_surcharge_zone(address: str, tables: GeoTables = DEFAULT_TABLES) -> bool:
    """Whether an address falls inside the regional (congestion) surcharge zone."""
    text = (address or "").lower()
    if any(marker in text for marker in tables.surcharge_markers):
        return True

    outward = extract_outward_code(address)
    if not outward:
        return False
    return outward in tables.surcharge_districts or postcode_district(outward) in tables.surcharge_districts
