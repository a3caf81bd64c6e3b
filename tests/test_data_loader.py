import pytest

from vn_admin_mapping.data_loader import (
    ReferenceLoader, LEGACY_DISTRICT_COLUMNS, CONVERSION_COLUMNS, WARD_COLUMNS
)
from vn_admin_mapping.exceptions import DataLoadError, FileAccessError, ValidationError
from vn_admin_mapping.models import BoundingBox, UnitKey
from vn_admin_mapping.utils.error_handler import RetryConfig

from .conftest import LEGACY_ROWS, write_csv, write_json


@pytest.fixture
def loader():
    return ReferenceLoader(retry_config=RetryConfig(max_attempts=1, base_delay=0.0))


def legacy_row(province_code, district_code, district_short, lat='10.0', lon='106.0', bounds=''):
    return [province_code, 'Tỉnh Thử', 'Thử', district_code, 'Quận ' + district_short,
            district_short, 'Quận', lat, lon, bounds]


class TestLegacyDistricts:

    def test_loads_records_in_file_order(self, loader, tmp_path):
        path = write_csv(tmp_path / 'legacy.csv', LEGACY_DISTRICT_COLUMNS, LEGACY_ROWS)

        districts = loader.load_legacy_districts(path)

        assert [d.key for d in districts] == [UnitKey('P01', 'D05'), UnitKey('P02', 'D01')]
        first = districts[0]
        assert first.district_short == 'Thủ Dầu Một'
        assert first.province_short == 'Bình Dương'
        assert first.bounds == BoundingBox(9.9, 10.1, 105.9, 106.1)
        assert districts[1].bounds is None

    def test_duplicate_key_keeps_first_occurrence(self, loader, tmp_path):
        path = write_csv(tmp_path / 'legacy.csv', LEGACY_DISTRICT_COLUMNS, [
            legacy_row('P01', 'D01', 'Một'),
            legacy_row('P01', 'D01', 'Hai', lat='11.0'),
        ])

        districts = loader.load_legacy_districts(path)

        assert len(districts) == 1
        assert districts[0].district_short == 'Một'
        assert loader.load_reports['legacy_districts'].duplicates == 1

    def test_duplicate_of_dropped_row_stays_dropped(self, loader, tmp_path):
        path = write_csv(tmp_path / 'legacy.csv', LEGACY_DISTRICT_COLUMNS, [
            legacy_row('P01', 'D01', 'Một', lat='n/a'),
            legacy_row('P01', 'D01', 'Hai'),
        ])

        assert loader.load_legacy_districts(path) == []
        report = loader.load_reports['legacy_districts']
        assert report.invalid_centroids == 1
        assert report.duplicates == 1
        assert report.dropped() == 2

    def test_malformed_bounds_keep_the_district(self, loader, tmp_path):
        path = write_csv(tmp_path / 'legacy.csv', LEGACY_DISTRICT_COLUMNS, [
            legacy_row('P01', 'D01', 'Một', bounds='9.9,105.9 / 10.1,106.1'),
        ])

        districts = loader.load_legacy_districts(path)

        assert len(districts) == 1
        assert districts[0].bounds is None
        assert loader.load_reports['legacy_districts'].malformed_bounds == 1

    def test_unparseable_lines_are_skipped_and_counted(self, loader, tmp_path):
        path = tmp_path / 'legacy.csv'
        write_csv(path, LEGACY_DISTRICT_COLUMNS, [legacy_row('P01', 'D01', 'Một')])
        with open(path, 'a', encoding='utf-8') as f:
            f.write('P01,Tỉnh Thử,Thử,D02,Quận Hai,Hai,Quận,10.0,106.0,,extra,fields\n')
            f.write('P01,Tỉnh Thử,Thử,D03,Quận Ba,Ba,Quận,10.2,106.2,\n')

        districts = loader.load_legacy_districts(str(path))

        assert [d.district_code for d in districts] == ['D01', 'D03']
        assert loader.load_reports['legacy_districts'].bad_lines == 1

    def test_missing_bounds_column_reads_as_no_boxes(self, loader, tmp_path):
        columns = [col for col in LEGACY_DISTRICT_COLUMNS if col != 'districtBounds']
        path = write_csv(tmp_path / 'legacy.csv', columns, [row[:-1] for row in LEGACY_ROWS])

        districts = loader.load_legacy_districts(path)

        assert [d.key for d in districts] == [UnitKey('P01', 'D05'), UnitKey('P02', 'D01')]
        assert all(d.bounds is None for d in districts)
        report = loader.load_reports['legacy_districts']
        assert report.missing_columns == ['districtBounds']
        assert report.malformed_bounds == 0

    def test_missing_name_columns_read_as_empty(self, loader, tmp_path):
        path = write_csv(tmp_path / 'legacy.csv',
                         ['provinceCode', 'districtCode', 'districtLat', 'districtLon'],
                         [['P01', 'D01', '10.0', '106.0']])

        districts = loader.load_legacy_districts(path)

        assert len(districts) == 1
        assert districts[0].district == ''
        assert districts[0].province_short == ''

    def test_missing_key_columns_give_empty_table(self, loader, tmp_path):
        path = write_csv(tmp_path / 'legacy.csv', ['provinceCode', 'districtCode'], [['P01', 'D01']])

        assert loader.load_legacy_districts(path) == []
        report = loader.load_reports['legacy_districts']
        assert report.missing_columns == ['districtLat', 'districtLon']
        assert report.loaded == 0
        assert any('missing key columns' in issue for issue in report.issues)

    def test_missing_file_raises_file_access_error(self, loader, tmp_path):
        with pytest.raises(FileAccessError):
            loader.load_legacy_districts(str(tmp_path / 'missing.csv'))

    def test_empty_file_gives_empty_table(self, loader, tmp_path):
        path = tmp_path / 'legacy.csv'
        path.write_text('', encoding='utf-8')

        assert loader.load_legacy_districts(str(path)) == []

    def test_header_only_file_gives_empty_table(self, loader, tmp_path):
        path = write_csv(tmp_path / 'legacy.csv', LEGACY_DISTRICT_COLUMNS, [])

        assert loader.load_legacy_districts(path) == []
        assert loader.load_reports['legacy_districts'].rows_read == 0


class TestProvinceConversions:

    def test_flag_is_true_only_for_exact_value(self, loader, tmp_path):
        path = write_csv(tmp_path / 'convert.csv', CONVERSION_COLUMNS, [
            ['P01', 'D01', 'Bình Dương', 'Thành phố Hồ Chí Minh', 'Hồ Chí Minh', 'True'],
            ['P01', 'D02', 'Bình Dương', 'Thành phố Hồ Chí Minh', 'Hồ Chí Minh', 'true'],
            ['P01', 'D03', 'Bình Dương', 'Thành phố Hồ Chí Minh', 'Hồ Chí Minh', ''],
        ])

        conversions = loader.load_province_conversions(path)

        assert conversions[UnitKey('P01', 'D01')].province_changed is True
        assert conversions[UnitKey('P01', 'D02')].province_changed is False
        assert conversions[UnitKey('P01', 'D03')].province_changed is False

    def test_duplicate_key_keeps_first_occurrence(self, loader, tmp_path):
        path = write_csv(tmp_path / 'convert.csv', CONVERSION_COLUMNS, [
            ['P01', 'D01', 'Bình Dương', 'Thành phố Hồ Chí Minh', 'Hồ Chí Minh', 'True'],
            ['P01', 'D01', 'Bình Dương', 'Tỉnh Bình Dương', 'Bình Dương', 'False'],
        ])

        conversions = loader.load_province_conversions(path)

        assert len(conversions) == 1
        assert conversions[UnitKey('P01', 'D01')].new_province_short == 'Hồ Chí Minh'
        assert loader.load_reports['province_conversions'].duplicates == 1


class TestNewWards:

    def test_rows_without_numeric_centroid_are_dropped(self, loader, tmp_path):
        path = write_csv(tmp_path / 'wards.csv', WARD_COLUMNS, [
            ['79', 'Thành phố Hồ Chí Minh', 'Hồ Chí Minh', '1', 'Phường Một', 'Một',
             'Phường', '10.1', '106.1', 'abc'],
            ['79', 'Thành phố Hồ Chí Minh', 'Hồ Chí Minh', '2', 'Phường Hai', 'Hai',
             'Phường', '', '106.2', '3.0'],
        ])

        wards = loader.load_new_wards(path)

        assert [w.ward_code for w in wards] == ['1']
        assert wards[0].area_km2 is None
        assert loader.load_reports['new_wards'].invalid_centroids == 1

    def test_missing_area_column_reads_as_unknown_area(self, loader, tmp_path):
        columns = [col for col in WARD_COLUMNS if col != 'wardAreaKm2']
        path = write_csv(tmp_path / 'wards.csv', columns, [
            ['79', 'Thành phố Hồ Chí Minh', 'Hồ Chí Minh', '1', 'Phường Một', 'Một',
             'Phường', '10.1', '106.1'],
        ])

        wards = loader.load_new_wards(path)

        assert len(wards) == 1
        assert wards[0].area_km2 is None
        assert loader.load_reports['new_wards'].missing_columns == ['wardAreaKm2']

    def test_reference_tables_bucket_wards_by_province(self, reference_tables):
        buckets = reference_tables.wards_by_province
        assert [w.ward_short for w in buckets['Hồ Chí Minh']] == ['Thủ Dầu Một', 'Bến Nghé']
        assert [w.ward_short for w in buckets['Đồng Nai']] == ['Trấn Biên']
        assert reference_tables.summary() == {
            'districts': 2, 'conversions': 2, 'wards': 3, 'ward_provinces': 2
        }
        assert not reference_tables.is_empty()


class TestFacilities:

    def test_loads_json_array(self, loader, facilities_file):
        facilities = loader.load_facilities(facilities_file)
        assert len(facilities) == 3
        assert facilities[0]['name'] == 'Bệnh viện Đa khoa Thủ Dầu Một'

    def test_non_array_is_rejected(self, loader, tmp_path):
        path = write_json(tmp_path / 'facilities.json', {'name': 'x'})
        with pytest.raises(DataLoadError):
            loader.load_facilities(path)

    def test_non_object_items_are_rejected(self, loader, tmp_path):
        path = write_json(tmp_path / 'facilities.json', [{'name': 'x'}, 'y'])
        with pytest.raises(ValidationError):
            loader.load_facilities(path)

    def test_invalid_json_is_rejected(self, loader, tmp_path):
        path = tmp_path / 'facilities.json'
        path.write_text('[{"name": ', encoding='utf-8')
        with pytest.raises(DataLoadError):
            loader.load_facilities(str(path))
