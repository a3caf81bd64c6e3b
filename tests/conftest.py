"""
Shared fixtures: small reference tables and facilities written to tmp_path.

Layout of the planted data:

* P01|D05 "Thủ Dầu Một" (Bình Dương) has centroid 10.0,106.0 and box
  9.9,105.9 – 10.1,106.1; its province became Hồ Chí Minh in 2025.
* P02|D01 "Biên Hòa" (Đồng Nai) has centroid 10.3,106.3 and no box.
* Hồ Chí Minh has two wards; Đồng Nai has one ward planted right on top of
  the point 10.05,106.05 that lies inside the P01|D05 box.
"""

import csv
import json

import pytest

from vn_admin_mapping.data_loader import (
    ReferenceLoader, LEGACY_DISTRICT_COLUMNS, CONVERSION_COLUMNS, WARD_COLUMNS
)
from vn_admin_mapping.config import EnrichmentConfig

LEGACY_ROWS = [
    ['P01', 'Tỉnh Bình Dương', 'Bình Dương', 'D05', 'Thành phố Thủ Dầu Một', 'Thủ Dầu Một',
     'Thành phố', '10.0', '106.0', '9.9,105.9 – 10.1,106.1'],
    ['P02', 'Tỉnh Đồng Nai', 'Đồng Nai', 'D01', 'Thành phố Biên Hòa', 'Biên Hòa',
     'Thành phố', '10.3', '106.3', ''],
]

CONVERSION_ROWS = [
    ['P01', 'D05', 'Bình Dương', 'Thành phố Hồ Chí Minh', 'Hồ Chí Minh', 'True'],
    ['P02', 'D01', 'Đồng Nai', 'Tỉnh Đồng Nai', 'Đồng Nai', 'False'],
]

WARD_ROWS = [
    ['79', 'Thành phố Hồ Chí Minh', 'Hồ Chí Minh', '25747', 'Phường Thủ Dầu Một', 'Thủ Dầu Một',
     'Phường', '10.01', '106.01', '30.5'],
    ['79', 'Thành phố Hồ Chí Minh', 'Hồ Chí Minh', '26734', 'Phường Bến Nghé', 'Bến Nghé',
     'Phường', '10.2', '106.2', '2.5'],
    ['75', 'Tỉnh Đồng Nai', 'Đồng Nai', '26041', 'Phường Trấn Biên', 'Trấn Biên',
     'Phường', '10.05', '106.05', '12.0'],
]

FACILITIES = [
    {
        'name': 'Bệnh viện Đa khoa Thủ Dầu Một',
        'mapsUrl': 'https://www.google.com/maps/search/?api=1&query=10.05,106.05',
        'city': 'TP. Hồ Chí Minh',
        'district': '5',
        'type': 'public',
    },
    {
        'name': 'Phòng khám Không Tọa Độ',
        'mapsUrl': '',
        'city': 'Hà Nội',
        'district': 'Ba Đình',
    },
    {
        'name': 'Trạm Y tế Xa',
        'mapsUrl': 'https://www.google.com/maps/search/?api=1&query=10.5,106.5',
        'city': 'Đồng Nai',
        'district': '',
    },
]


def write_csv(path, header, rows):
    with open(path, 'w', encoding='utf-8', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)
    return str(path)


def write_json(path, data):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False)
    return str(path)


@pytest.fixture
def reference_files(tmp_path):
    return {
        'legacy_districts_file': write_csv(tmp_path / 'legacy_63province.csv',
                                           LEGACY_DISTRICT_COLUMNS, LEGACY_ROWS),
        'conversions_file': write_csv(tmp_path / 'convert_legacy_2025.csv',
                                      CONVERSION_COLUMNS, CONVERSION_ROWS),
        'wards_file': write_csv(tmp_path / 'wards_2025.csv', WARD_COLUMNS, WARD_ROWS),
    }


@pytest.fixture
def reference_tables(reference_files):
    loader = ReferenceLoader()
    return loader.load_reference_tables(
        reference_files['legacy_districts_file'],
        reference_files['conversions_file'],
        reference_files['wards_file'],
    )


@pytest.fixture
def facilities_file(tmp_path):
    return write_json(tmp_path / 'hospitals.json', FACILITIES)


@pytest.fixture
def enrichment_config(tmp_path, reference_files, facilities_file):
    return EnrichmentConfig(
        facilities_file=facilities_file,
        output_directory=str(tmp_path / 'output'),
        output_file=str(tmp_path / 'output' / 'hospitals_enriched.json'),
        aliases_file=str(tmp_path / 'output' / 'district_aliases.json'),
        log_level='WARNING',
        log_file=str(tmp_path / 'output' / 'run.log'),
        **reference_files,
    )
