"""
Reorganized ward locator.

Resolves a coordinate to the 2025 ward with the nearest centroid, searching
only the wards of the expected province when that province has any.
"""

import logging
from typing import Dict, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..models import Coordinate, NewWardRecord
from ..utils.geo_utils import haversine_km_array


class _WardIndex:
    """Centroid arrays for one group of wards."""

    def __init__(self, wards: Sequence[NewWardRecord]):
        self.wards: Tuple[NewWardRecord, ...] = tuple(wards)
        self.lats = np.array([w.centroid.lat for w in self.wards], dtype=float)
        self.lons = np.array([w.centroid.lon for w in self.wards], dtype=float)

    def nearest(self, coordinate: Coordinate) -> Optional[Tuple[NewWardRecord, float]]:
        if not self.wards:
            return None
        distances = haversine_km_array(coordinate.lat, coordinate.lon, self.lats, self.lons)
        best = int(np.argmin(distances))
        return self.wards[best], float(distances[best])


class NewUnitLocator:
    """
    Classifies coordinates into reorganized wards.

    There is no distance cutoff: as long as the ward table is non-empty every
    coordinate resolves to some ward, however far away it is.
    """

    def __init__(self, wards: Sequence[NewWardRecord],
                 wards_by_province: Mapping[str, Sequence[NewWardRecord]],
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the locator.

        Args:
            wards: All wards in reference-table order
            wards_by_province: Wards grouped by province short name
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self._all = _WardIndex(wards)
        self._by_province: Dict[str, _WardIndex] = {
            province: _WardIndex(items) for province, items in wards_by_province.items()
        }

    def locate(self, coordinate: Coordinate,
               candidate_province: Optional[str] = None) -> Optional[NewWardRecord]:
        """Return the nearest ward, or None when there are no wards at all."""
        match = self.locate_with_distance(coordinate, candidate_province)
        return match[0] if match else None

    def locate_with_distance(self, coordinate: Coordinate,
                             candidate_province: Optional[str] = None
                             ) -> Optional[Tuple[NewWardRecord, float]]:
        """
        Resolve a coordinate to ``(ward, distance_km)``.

        The search is limited to ``candidate_province`` when that province
        has wards; otherwise all wards are searched.
        """
        index = self._by_province.get(candidate_province) if candidate_province else None
        if index is None or not index.wards:
            if candidate_province:
                self.logger.debug(f"No wards for province '{candidate_province}', "
                                  f"searching all provinces")
            index = self._all

        return index.nearest(coordinate)
