"""
Geometry helpers: great-circle distances, bounding-box parsing and
coordinate extraction from map links.
"""

import math
import re
from typing import Optional

import numpy as np

from ..models import BoundingBox, Coordinate

EARTH_RADIUS_KM = 6371.0

# Google Maps search links carry the point as query=<lat>,<lon>
_QUERY_PATTERN = re.compile(r'query=([-+\d.]+)(?:,|%2C)([-+\d.]+)', re.IGNORECASE)

# "lat1,lon1 – lat2,lon2"; the en dash is what the reference data uses
_BOUNDS_SEPARATOR = re.compile(r'\s*[–—]\s*|\s+-\s+')


def haversine_km_array(lat: float, lon: float, lats: np.ndarray, lons: np.ndarray) -> np.ndarray:
    """
    Vectorized haversine distance from one point to many.

    Args:
        lat: Latitude of the query point in degrees
        lon: Longitude of the query point in degrees
        lats: Array of target latitudes in degrees
        lons: Array of target longitudes in degrees

    Returns:
        Array of distances in km, aligned with ``lats``/``lons``
    """
    lat1 = np.radians(lat)
    lat2 = np.radians(lats)
    dlat = lat2 - lat1
    dlon = np.radians(lons) - np.radians(lon)
    a = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2) ** 2
    # Rounding can push a a hair above 1 for antipodal points
    a = np.clip(a, 0.0, 1.0)
    return EARTH_RADIUS_KM * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))


def _parse_lat_lon_pair(text: str) -> Optional[tuple]:
    parts = [p.strip() for p in text.split(',')]
    if len(parts) != 2:
        return None
    try:
        lat, lon = float(parts[0]), float(parts[1])
    except ValueError:
        return None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    return lat, lon


def parse_bounds(bounds_str: Optional[str]) -> Optional[BoundingBox]:
    """
    Parse a bounding box of the form ``"lat1,lon1 – lat2,lon2"``.

    The two corners may come in any order; the result is normalized so that
    min <= max on both axes. Anything malformed yields None.
    """
    if not bounds_str or not isinstance(bounds_str, str):
        return None

    corners = _BOUNDS_SEPARATOR.split(bounds_str.strip())
    if len(corners) != 2:
        return None

    first = _parse_lat_lon_pair(corners[0])
    second = _parse_lat_lon_pair(corners[1])
    if first is None or second is None:
        return None

    (lat1, lon1), (lat2, lon2) = first, second
    return BoundingBox(
        min_lat=min(lat1, lat2),
        max_lat=max(lat1, lat2),
        min_lon=min(lon1, lon2),
        max_lon=max(lon1, lon2),
    )


def extract_coordinate(maps_url: Optional[str]) -> Optional[Coordinate]:
    """
    Extract the coordinate embedded in a map link's ``query=<lat>,<lon>`` parameter.

    Returns None when the link is missing, carries no query point, or the
    point is not a valid latitude/longitude.
    """
    if not maps_url or not isinstance(maps_url, str):
        return None

    match = _QUERY_PATTERN.search(maps_url)
    if not match:
        return None

    try:
        return Coordinate(float(match.group(1)), float(match.group(2)))
    except ValueError:
        return None
