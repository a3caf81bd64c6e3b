"""
Legacy district locator.

Resolves a coordinate to a pre-reorganization district. Bounding boxes are
tried first; when no box contains the point, the nearest district centroid is
accepted if it lies within a fixed radius.
"""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from ..models import Coordinate, LegacyDistrictRecord
from ..utils.geo_utils import haversine_km_array

DEFAULT_MAX_DISTANCE_KM = 15.0

METHOD_BOUNDS = 'bounds'
METHOD_NEAREST = 'nearest'


class OldUnitLocator:
    """
    Classifies coordinates into legacy districts.

    Containment pass: among districts whose bounding box contains the point
    (edges inclusive), the one with the closest centroid wins. Fallback pass,
    only when no box contains the point: the closest centroid overall, if it
    is strictly nearer than ``max_distance_km``. Ties go to the district that
    comes first in the reference table.
    """

    def __init__(self, districts: Sequence[LegacyDistrictRecord],
                 max_distance_km: float = DEFAULT_MAX_DISTANCE_KM,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the locator.

        Args:
            districts: Legacy districts in reference-table order
            max_distance_km: Radius for the nearest-centroid fallback
            logger: Optional logger instance
        """
        self.districts: Tuple[LegacyDistrictRecord, ...] = tuple(districts)
        self.max_distance_km = max_distance_km
        self.logger = logger or logging.getLogger(__name__)

        self._lats = np.array([d.centroid.lat for d in self.districts], dtype=float)
        self._lons = np.array([d.centroid.lon for d in self.districts], dtype=float)

        # Districts without a box get an empty interval so they never contain a point
        self._min_lats = np.array([d.bounds.min_lat if d.bounds else np.inf for d in self.districts], dtype=float)
        self._max_lats = np.array([d.bounds.max_lat if d.bounds else -np.inf for d in self.districts], dtype=float)
        self._min_lons = np.array([d.bounds.min_lon if d.bounds else np.inf for d in self.districts], dtype=float)
        self._max_lons = np.array([d.bounds.max_lon if d.bounds else -np.inf for d in self.districts], dtype=float)

        boxed = sum(1 for d in self.districts if d.bounds is not None)
        self.logger.debug(f"OldUnitLocator ready: {len(self.districts)} districts, "
                          f"{boxed} with bounding boxes, fallback radius {max_distance_km} km")

    def locate(self, coordinate: Coordinate) -> Optional[LegacyDistrictRecord]:
        """Return the legacy district for a coordinate, or None."""
        match = self.locate_with_distance(coordinate)
        return match[0] if match else None

    def locate_with_distance(self, coordinate: Coordinate
                             ) -> Optional[Tuple[LegacyDistrictRecord, float, str]]:
        """
        Resolve a coordinate and report how it was resolved.

        Returns:
            Tuple of (district, distance to its centroid in km, method) where
            method is ``'bounds'`` or ``'nearest'``; None when nothing matches
        """
        if not self.districts:
            return None

        distances = haversine_km_array(coordinate.lat, coordinate.lon, self._lats, self._lons)

        inside = ((self._min_lats <= coordinate.lat) & (coordinate.lat <= self._max_lats)
                  & (self._min_lons <= coordinate.lon) & (coordinate.lon <= self._max_lons))
        if inside.any():
            candidates = np.flatnonzero(inside)
            best = int(candidates[np.argmin(distances[candidates])])
            return self.districts[best], float(distances[best]), METHOD_BOUNDS

        best = int(np.argmin(distances))
        if distances[best] < self.max_distance_km:
            return self.districts[best], float(distances[best]), METHOD_NEAREST

        return None
