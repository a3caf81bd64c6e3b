"""
Data models for the administrative-unit enrichment application.

This module defines the reference records loaded from the boundary tables,
the immutable bundle that carries them through the pipeline, and the
per-facility enrichment result.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional, List, Tuple, Dict, Any, Mapping, NamedTuple, FrozenSet, Iterable
from .utils.data_utils import safe_string_conversion


class UnitKey(NamedTuple):
    """Composite identity of an administrative unit within its province."""

    province_code: str
    unit_code: str

    def to_string(self) -> str:
        """Render as ``"province|unit"``, the form used in the lookup file."""
        return f"{self.province_code}|{self.unit_code}"

    @classmethod
    def from_string(cls, value: str) -> 'UnitKey':
        province_code, _, unit_code = value.partition('|')
        return cls(province_code, unit_code)


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 latitude/longitude pair."""

    lat: float
    lon: float

    def __post_init__(self):
        if not (math.isfinite(self.lat) and math.isfinite(self.lon)):
            raise ValueError(f"Coordinate must be finite: ({self.lat}, {self.lon})")
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude out of range [-90, 90]: {self.lat}")
        if not -180.0 <= self.lon <= 180.0:
            raise ValueError(f"Longitude out of range [-180, 180]: {self.lon}")


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned latitude/longitude rectangle approximating a unit's extent."""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def __post_init__(self):
        if self.min_lat > self.max_lat or self.min_lon > self.max_lon:
            raise ValueError(f"Bounding box minimum exceeds maximum: {self}")

    def contains(self, coordinate: Coordinate) -> bool:
        """Check containment, edges inclusive."""
        return (self.min_lat <= coordinate.lat <= self.max_lat
                and self.min_lon <= coordinate.lon <= self.max_lon)

    def to_dict(self) -> Dict[str, float]:
        return {
            'minLat': self.min_lat,
            'maxLat': self.max_lat,
            'minLon': self.min_lon,
            'maxLon': self.max_lon,
        }


@dataclass(frozen=True)
class LegacyDistrictRecord:
    """A district under the pre-reorganization (63-province) system."""

    province_code: str
    district_code: str
    province: str
    province_short: str
    district: str
    district_short: str
    district_type: str
    centroid: Coordinate
    bounds: Optional[BoundingBox] = None

    @property
    def key(self) -> UnitKey:
        return UnitKey(self.province_code, self.district_code)


@dataclass(frozen=True)
class ProvinceConversionRecord:
    """Successor province of a legacy district under the 2025 reorganization."""

    province_code: str
    district_code: str
    province_short: str
    new_province: str
    new_province_short: str
    province_changed: bool = False

    @property
    def key(self) -> UnitKey:
        return UnitKey(self.province_code, self.district_code)


@dataclass(frozen=True)
class NewWardRecord:
    """A ward (or commune) under the reorganized 2025 system."""

    province_code: str
    ward_code: str
    province: str
    province_short: str
    ward: str
    ward_short: str
    ward_type: str
    centroid: Coordinate
    area_km2: Optional[float] = None

    @property
    def key(self) -> UnitKey:
        return UnitKey(self.province_code, self.ward_code)


class ReferenceTables:
    """
    Immutable bundle of the three reference datasets.

    Built once by the loader and shared read-only by every locator. Districts
    and wards keep their file order, which decides ties between equally
    distant units.
    """

    def __init__(self, districts: Iterable[LegacyDistrictRecord],
                 conversions: Mapping[UnitKey, ProvinceConversionRecord],
                 wards: Iterable[NewWardRecord]):
        self._districts: Tuple[LegacyDistrictRecord, ...] = tuple(districts)
        self._conversions = MappingProxyType(dict(conversions))
        self._wards: Tuple[NewWardRecord, ...] = tuple(wards)

        buckets: Dict[str, List[NewWardRecord]] = {}
        for ward in self._wards:
            buckets.setdefault(ward.province_short, []).append(ward)
        self._wards_by_province = MappingProxyType(
            {province: tuple(items) for province, items in buckets.items()}
        )

    @property
    def districts(self) -> Tuple[LegacyDistrictRecord, ...]:
        return self._districts

    @property
    def conversions(self) -> Mapping[UnitKey, ProvinceConversionRecord]:
        return self._conversions

    @property
    def wards(self) -> Tuple[NewWardRecord, ...]:
        return self._wards

    @property
    def wards_by_province(self) -> Mapping[str, Tuple[NewWardRecord, ...]]:
        return self._wards_by_province

    def is_empty(self) -> bool:
        return not self._districts and not self._wards

    def summary(self) -> Dict[str, int]:
        return {
            'districts': len(self._districts),
            'conversions': len(self._conversions),
            'wards': len(self._wards),
            'ward_provinces': len(self._wards_by_province),
        }


@dataclass
class OldUnitMatch:
    """A resolved legacy district together with its reorganization data."""

    district: LegacyDistrictRecord
    distance_km: float
    method: str  # 'bounds' or 'nearest'
    successor_province: str
    conversion: Optional[ProvinceConversionRecord] = None

    @property
    def province_changed(self) -> bool:
        return self.conversion is not None and self.conversion.province_changed


@dataclass
class EnrichmentResult:
    """Outcome of resolving one facility."""

    coordinate: Optional[Coordinate] = None
    old_match: Optional[OldUnitMatch] = None
    new_ward: Optional[NewWardRecord] = None
    aliases: FrozenSet[str] = field(default_factory=frozenset)

    def has_coordinate(self) -> bool:
        return self.coordinate is not None

    def is_matched(self) -> bool:
        """True if the facility resolved to at least one administrative unit."""
        return self.old_match is not None or self.new_ward is not None

    def apply_to(self, facility: Dict[str, Any]) -> None:
        """
        Write the resolved administrative fields onto a facility record.

        Facilities without a coordinate are left untouched. Aliases are
        written as a sorted list so that output files are stable.
        """
        if self.coordinate is None:
            return

        if self.old_match is not None:
            facility['oldDistrict'] = self.old_match.district.district_short
            facility['oldProvince'] = self.old_match.district.province_short

        if self.new_ward is not None:
            facility['newWard'] = self.new_ward.ward_short
            facility['newProvince'] = self.new_ward.province_short

        facility['aliases'] = sorted(self.aliases)

    def describe(self, facility: Dict[str, Any]) -> str:
        """One-line human-readable summary used for sample logging."""
        name = safe_string_conversion(facility.get('name'))
        old = (f"{self.old_match.district.district_short}, {self.old_match.district.province_short}"
               if self.old_match else "-")
        new = (f"{self.new_ward.ward_short}, {self.new_ward.province_short}"
               if self.new_ward else "-")
        return f"{name} -> old: {old} | new: {new} | aliases: [{', '.join(sorted(self.aliases))}]"
