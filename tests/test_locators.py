import math

import pytest

from vn_admin_mapping.matching import NewUnitLocator, OldUnitLocator, ProvinceRemapper
from vn_admin_mapping.matching.district_locator import METHOD_BOUNDS, METHOD_NEAREST
from vn_admin_mapping.models import (
    BoundingBox, Coordinate, LegacyDistrictRecord, NewWardRecord, ProvinceConversionRecord,
    ReferenceTables, UnitKey
)
from vn_admin_mapping.utils.geo_utils import EARTH_RADIUS_KM


def district(code, lat, lon, bounds=None, province_short='Thử'):
    return LegacyDistrictRecord(
        province_code='P01',
        district_code=code,
        province='Tỉnh ' + province_short,
        province_short=province_short,
        district='Quận ' + code,
        district_short=code,
        district_type='Quận',
        centroid=Coordinate(lat, lon),
        bounds=bounds,
    )


def ward(code, lat, lon, province_short):
    return NewWardRecord(
        province_code='00',
        ward_code=code,
        province='Tỉnh ' + province_short,
        province_short=province_short,
        ward='Phường ' + code,
        ward_short=code,
        ward_type='Phường',
        centroid=Coordinate(lat, lon),
    )


def degrees_east_of_origin(km):
    """Longitude of the equator point ``km`` kilometres east of (0, 0)."""
    return math.degrees(km / EARTH_RADIUS_KM)


def new_ward_locator(wards):
    return NewUnitLocator(wards, ReferenceTables([], {}, wards).wards_by_province)


class TestOldUnitLocator:

    def test_containing_box_beats_closer_centroid(self):
        boxed = district('A', 10.0, 106.0, BoundingBox(9.9, 10.1, 105.9, 106.1))
        closer = district('B', 10.12, 106.0, BoundingBox(10.11, 10.2, 105.9, 106.1))
        locator = OldUnitLocator([boxed, closer])

        found, distance_km, method = locator.locate_with_distance(Coordinate(10.09, 106.0))

        assert found is boxed
        assert method == METHOD_BOUNDS
        assert distance_km == pytest.approx(10.0, abs=0.1)

    def test_overlapping_boxes_pick_closest_centroid(self):
        wide = district('A', 10.5, 106.5, BoundingBox(9.0, 11.0, 105.0, 107.0))
        narrow = district('B', 10.0, 106.0, BoundingBox(9.9, 10.1, 105.9, 106.1))
        locator = OldUnitLocator([wide, narrow])

        assert locator.locate(Coordinate(10.01, 106.01)) is narrow

    def test_box_match_ignores_distance_limit(self):
        huge = district('A', 0.0, 0.0, BoundingBox(-1.0, 1.0, -1.0, 1.0))
        locator = OldUnitLocator([huge], max_distance_km=15.0)

        found, distance_km, method = locator.locate_with_distance(Coordinate(0.9, 0.9))

        assert found is huge
        assert method == METHOD_BOUNDS
        assert distance_km > 15.0

    def test_nearest_centroid_within_radius(self):
        origin = district('A', 0.0, 0.0)
        locator = OldUnitLocator([origin])

        found, distance_km, method = locator.locate_with_distance(
            Coordinate(0.0, degrees_east_of_origin(14.9))
        )

        assert found is origin
        assert method == METHOD_NEAREST
        assert distance_km == pytest.approx(14.9)

    def test_nearest_centroid_beyond_radius_is_rejected(self):
        locator = OldUnitLocator([district('A', 0.0, 0.0)])

        assert locator.locate(Coordinate(0.0, degrees_east_of_origin(15.1))) is None

    def test_custom_radius(self):
        locator = OldUnitLocator([district('A', 0.0, 0.0)], max_distance_km=20.0)

        assert locator.locate(Coordinate(0.0, degrees_east_of_origin(15.1))) is not None

    def test_ties_go_to_first_record(self):
        first = district('A', 0.0, 0.1)
        second = district('B', 0.0, -0.1)
        locator = OldUnitLocator([first, second])

        assert locator.locate(Coordinate(0.0, 0.0)) is first
        assert OldUnitLocator([second, first]).locate(Coordinate(0.0, 0.0)) is second

    def test_empty_table_never_matches(self):
        assert OldUnitLocator([]).locate(Coordinate(10.0, 106.0)) is None


class TestProvinceRemapper:

    def test_uses_conversion_record(self, reference_tables):
        remapper = ProvinceRemapper(reference_tables.conversions)
        thu_dau_mot = reference_tables.districts[0]

        assert remapper.remap(thu_dau_mot) == 'Hồ Chí Minh'
        assert remapper.conversion_for(thu_dau_mot).province_changed is True

    def test_missing_conversion_keeps_own_province(self):
        remapper = ProvinceRemapper({})
        orphan = district('A', 10.0, 106.0, province_short='Lâm Đồng')

        assert remapper.conversion_for(orphan) is None
        assert remapper.remap(orphan) == 'Lâm Đồng'

    def test_lookup_is_by_composite_key(self):
        record = ProvinceConversionRecord('P01', 'A', 'Thử', 'Tỉnh Mới', 'Mới', True)
        remapper = ProvinceRemapper({UnitKey('P01', 'A'): record})

        assert remapper.remap(district('A', 10.0, 106.0)) == 'Mới'
        assert remapper.remap(district('B', 10.0, 106.0)) == 'Thử'


class TestNewUnitLocator:

    def test_closer_ward_in_other_province_is_never_chosen(self):
        home = ward('home', 10.3, 106.3, 'Hồ Chí Minh')
        planted = ward('planted', 10.0, 106.0, 'Đồng Nai')
        locator = new_ward_locator([planted, home])

        found, distance_km = locator.locate_with_distance(Coordinate(10.0, 106.0), 'Hồ Chí Minh')

        assert found is home
        assert distance_km > 40.0

    def test_unknown_province_searches_all_wards(self):
        near = ward('near', 10.0, 106.0, 'Đồng Nai')
        far = ward('far', 11.0, 107.0, 'Hồ Chí Minh')
        locator = new_ward_locator([far, near])

        assert locator.locate(Coordinate(10.01, 106.01), 'Bình Dương') is near
        assert locator.locate(Coordinate(10.01, 106.01)) is near

    def test_no_distance_cutoff(self):
        only = ward('only', 21.0, 105.8, 'Hà Nội')
        locator = new_ward_locator([only])

        assert locator.locate(Coordinate(-33.86, 151.2), 'Hà Nội') is only

    def test_no_wards_gives_none(self):
        assert new_ward_locator([]).locate(Coordinate(10.0, 106.0), 'Hà Nội') is None

    def test_ties_go_to_first_ward(self):
        first = ward('first', 0.0, 0.1, 'Thử')
        second = ward('second', 0.0, -0.1, 'Thử')

        assert new_ward_locator([first, second]).locate(Coordinate(0.0, 0.0), 'Thử') is first
