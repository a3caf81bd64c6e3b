"""
Data loading module.

This module provides the ReferenceLoader class, which parses the three
boundary reference tables (legacy districts, province conversion, new wards)
into typed records and reads the facility collection.

Reference tables are read in file order and duplicate keys keep their first
occurrence, so the row order of the input files is part of the contract:
reordering a table can change which unit an ambiguous facility resolves to.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Optional, Any

import pandas as pd

from .models import (
    Coordinate, LegacyDistrictRecord, ProvinceConversionRecord, NewWardRecord,
    ReferenceTables, UnitKey
)
from .exceptions import DataLoadError, ValidationError, FileAccessError
from .utils.data_utils import clean_dataframe_strings, is_null_or_empty, safe_float_conversion
from .utils.error_handler import (
    RetryConfig, safe_file_operation, create_error_context, log_error_details
)
from .utils.geo_utils import parse_bounds

LEGACY_DISTRICT_COLUMNS = [
    'provinceCode', 'province', 'provinceShort', 'districtCode', 'district',
    'districtShort', 'districtType', 'districtLat', 'districtLon', 'districtBounds'
]

CONVERSION_COLUMNS = [
    'provinceCode', 'districtCode', 'provinceShort', 'newProvince',
    'newProvinceShort', 'isMergedProvince'
]

WARD_COLUMNS = [
    'provinceCode', 'province', 'provinceShort', 'wardCode', 'ward',
    'wardShort', 'wardType', 'wardLat', 'wardLon', 'wardAreaKm2'
]

# Without these a table cannot take part in any lookup; every other column
# may be absent and reads as empty
LEGACY_DISTRICT_KEY_COLUMNS = ['provinceCode', 'districtCode', 'districtLat', 'districtLon']
CONVERSION_KEY_COLUMNS = ['provinceCode', 'districtCode', 'newProvinceShort']
WARD_KEY_COLUMNS = ['provinceShort', 'wardLat', 'wardLon']


@dataclass
class LoadReport:
    """Row accounting for one reference table."""

    table: str
    file_path: str
    rows_read: int = 0
    loaded: int = 0
    bad_lines: int = 0
    invalid_centroids: int = 0
    duplicates: int = 0
    malformed_bounds: int = 0
    missing_columns: List[str] = field(default_factory=list)
    issues: List[str] = field(default_factory=list)

    def dropped(self) -> int:
        return self.invalid_centroids + self.duplicates


class ReferenceLoader:
    """
    Loads the boundary reference tables and the facility collection.

    Malformed rows and absent columns are counted and reported rather than
    failing the load; only unreadable files and a malformed facility
    collection raise.
    """

    def __init__(self, logger: Optional[logging.Logger] = None,
                 retry_config: Optional[RetryConfig] = None):
        """
        Initialize the ReferenceLoader.

        Args:
            logger: Optional logger instance for logging operations
            retry_config: Optional retry configuration for file operations
        """
        self.logger = logger or logging.getLogger(__name__)
        self.retry_config = retry_config or RetryConfig(max_attempts=3, base_delay=1.0)
        self.load_reports: Dict[str, LoadReport] = {}

    def load_reference_tables(self, legacy_districts_file: str, conversions_file: str,
                              wards_file: str) -> ReferenceTables:
        """
        Load all three reference tables into an immutable bundle.

        Args:
            legacy_districts_file: Path to the legacy (63-province) district CSV
            conversions_file: Path to the legacy-to-2025 province conversion CSV
            wards_file: Path to the 2025 ward CSV

        Returns:
            ReferenceTables shared by the locators
        """
        districts = self.load_legacy_districts(legacy_districts_file)
        conversions = self.load_province_conversions(conversions_file)
        wards = self.load_new_wards(wards_file)

        tables = ReferenceTables(districts, conversions, wards)
        self.logger.info(f"Reference tables loaded: {tables.summary()}")
        return tables

    def load_legacy_districts(self, file_path: str) -> List[LegacyDistrictRecord]:
        """
        Load unique legacy districts in file order.

        Duplicate (provinceCode, districtCode) rows keep the first occurrence.
        Rows whose centroid is not numeric are dropped; a malformed bounding
        box only drops the box.
        """
        report = LoadReport(table='legacy_districts', file_path=str(file_path))
        df = self._read_table(file_path, LEGACY_DISTRICT_COLUMNS, LEGACY_DISTRICT_KEY_COLUMNS, report)

        seen = set()
        districts = []
        for row in df.to_dict('records'):
            key = UnitKey(row['provinceCode'], row['districtCode'])
            if key in seen:
                report.duplicates += 1
                continue
            seen.add(key)

            centroid = self._parse_centroid(row['districtLat'], row['districtLon'])
            if centroid is None:
                report.invalid_centroids += 1
                continue

            bounds = parse_bounds(row['districtBounds'])
            if bounds is None and not is_null_or_empty(row['districtBounds']):
                report.malformed_bounds += 1

            districts.append(LegacyDistrictRecord(
                province_code=key.province_code,
                district_code=key.unit_code,
                province=row['province'],
                province_short=row['provinceShort'],
                district=row['district'],
                district_short=row['districtShort'],
                district_type=row['districtType'],
                centroid=centroid,
                bounds=bounds,
            ))

        report.loaded = len(districts)
        self._finish_report(report)
        return districts

    def load_province_conversions(self, file_path: str) -> Dict[UnitKey, ProvinceConversionRecord]:
        """
        Load the legacy-district to successor-province table.

        Duplicate (provinceCode, districtCode) rows keep the first occurrence.
        ``isMergedProvince`` is true only for the exact value "True".
        """
        report = LoadReport(table='province_conversions', file_path=str(file_path))
        df = self._read_table(file_path, CONVERSION_COLUMNS, CONVERSION_KEY_COLUMNS, report)

        conversions: Dict[UnitKey, ProvinceConversionRecord] = {}
        for row in df.to_dict('records'):
            key = UnitKey(row['provinceCode'], row['districtCode'])
            if key in conversions:
                report.duplicates += 1
                continue

            conversions[key] = ProvinceConversionRecord(
                province_code=key.province_code,
                district_code=key.unit_code,
                province_short=row['provinceShort'],
                new_province=row['newProvince'],
                new_province_short=row['newProvinceShort'],
                province_changed=row['isMergedProvince'] == 'True',
            )

        report.loaded = len(conversions)
        self._finish_report(report)
        return conversions

    def load_new_wards(self, file_path: str) -> List[NewWardRecord]:
        """Load 2025 wards in file order, dropping rows without a numeric centroid."""
        report = LoadReport(table='new_wards', file_path=str(file_path))
        df = self._read_table(file_path, WARD_COLUMNS, WARD_KEY_COLUMNS, report)

        wards = []
        for row in df.to_dict('records'):
            centroid = self._parse_centroid(row['wardLat'], row['wardLon'])
            if centroid is None:
                report.invalid_centroids += 1
                continue

            wards.append(NewWardRecord(
                province_code=row['provinceCode'],
                ward_code=row['wardCode'],
                province=row['province'],
                province_short=row['provinceShort'],
                ward=row['ward'],
                ward_short=row['wardShort'],
                ward_type=row['wardType'],
                centroid=centroid,
                area_km2=safe_float_conversion(row['wardAreaKm2']),
            ))

        report.loaded = len(wards)
        self._finish_report(report)
        return wards

    def load_facilities(self, file_path: str) -> List[Dict[str, Any]]:
        """
        Load the facility collection from a JSON array of objects.

        Raises:
            FileAccessError: If the file cannot be read
            DataLoadError: If the content is not a JSON array
            ValidationError: If an array element is not an object
        """
        self.logger.info(f"Loading facilities from: {file_path}")
        self._check_file(file_path)

        def load_json():
            with open(file_path, 'r', encoding='utf-8') as f:
                return json.load(f)

        try:
            data = safe_file_operation(
                operation=load_json,
                file_path=file_path,
                operation_name="read JSON",
                retry_config=self.retry_config,
                logger=self.logger
            )
        except json.JSONDecodeError as e:
            raise DataLoadError(
                f"Error parsing facilities JSON file: {e.msg}",
                file_path=str(file_path),
                line_number=e.lineno,
                original_error=e
            )

        if not isinstance(data, list):
            raise DataLoadError(
                f"Facilities file must contain a JSON array, got {type(data).__name__}",
                file_path=str(file_path)
            )

        for index, item in enumerate(data):
            if not isinstance(item, dict):
                raise ValidationError(
                    f"Facility at index {index} is not a JSON object",
                    field_name=f"facilities[{index}]",
                    invalid_value=item,
                    validation_rules=["Each facility must be a JSON object"]
                )

        self.logger.info(f"Loaded {len(data)} facility records")
        return data

    def _check_file(self, file_path: str) -> None:
        file_path_obj = Path(file_path)
        if not file_path_obj.exists():
            raise FileAccessError(
                f"File not found: {file_path}",
                file_path=str(file_path),
                operation="read"
            )

        if not file_path_obj.is_file():
            raise FileAccessError(
                f"Path is not a file: {file_path}",
                file_path=str(file_path),
                operation="read"
            )

    def _read_table(self, file_path: str, columns: List[str], key_columns: List[str],
                    report: LoadReport) -> pd.DataFrame:
        """
        Read a reference CSV as strings, skipping lines that cannot be tokenized.

        Absent non-key columns are added as empty strings. A table missing any
        of its key columns is reported and read as empty.

        Returns:
            DataFrame with stripped string values for ``columns``

        Raises:
            FileAccessError: If the file is missing or unreadable
            DataLoadError: If the file cannot be parsed at all
        """
        self.logger.info(f"Loading {report.table} from: {file_path}")
        self._check_file(file_path)

        if Path(file_path).stat().st_size == 0:
            self.logger.warning(f"DATA QUALITY: {report.table} file is empty: {file_path}")
            return pd.DataFrame(columns=columns)

        bad_lines: List[List[str]] = []

        def on_bad_line(fields: List[str]) -> None:
            bad_lines.append(fields)
            return None

        def load_csv():
            bad_lines.clear()
            return pd.read_csv(
                file_path,
                dtype=str,
                keep_default_na=False,
                encoding='utf-8-sig',
                engine='python',
                on_bad_lines=on_bad_line,
            )

        try:
            df = safe_file_operation(
                operation=load_csv,
                file_path=file_path,
                operation_name="read CSV",
                retry_config=self.retry_config,
                logger=self.logger
            )
        except pd.errors.EmptyDataError:
            self.logger.warning(f"DATA QUALITY: {report.table} file has no header: {file_path}")
            return pd.DataFrame(columns=columns)
        except pd.errors.ParserError as e:
            raise DataLoadError(
                f"Error parsing {report.table} CSV file: {str(e)}",
                file_path=str(file_path),
                original_error=e
            )
        except UnicodeDecodeError as e:
            context = create_error_context(
                operation="read_table",
                file_path=str(file_path),
                table=report.table
            )
            log_error_details(self.logger, e, context)
            raise DataLoadError(
                f"{report.table} file is not valid UTF-8: {file_path}",
                file_path=str(file_path),
                original_error=e
            )

        df.columns = [str(col).strip() for col in df.columns]
        report.bad_lines = len(bad_lines)

        missing_keys = [col for col in key_columns if col not in df.columns]
        if missing_keys:
            report.missing_columns.extend(missing_keys)
            report.issues.append(f"missing key columns {missing_keys}; "
                                 f"{len(df):,} rows ignored")
            return pd.DataFrame(columns=columns)

        for col in columns:
            if col not in df.columns:
                report.missing_columns.append(col)
                report.issues.append(f"column '{col}' absent, read as empty")
                df[col] = ""

        report.rows_read = len(df)
        return clean_dataframe_strings(df, columns)

    @staticmethod
    def _parse_centroid(lat_value: Any, lon_value: Any) -> Optional[Coordinate]:
        lat = safe_float_conversion(lat_value)
        lon = safe_float_conversion(lon_value)
        if lat is None or lon is None:
            return None
        try:
            return Coordinate(lat, lon)
        except ValueError:
            return None

    def _finish_report(self, report: LoadReport) -> None:
        """Log the row accounting for a table and keep the report."""
        self.load_reports[report.table] = report

        if report.rows_read == 0:
            self.logger.warning(f"DATA QUALITY: {report.table} contains no rows; "
                                f"every lookup against it will fail")
        if report.bad_lines:
            report.issues.append(f"{report.bad_lines} unparseable lines skipped")
        if report.invalid_centroids:
            report.issues.append(f"{report.invalid_centroids} rows with non-numeric centroid dropped")
        if report.duplicates:
            report.issues.append(f"{report.duplicates} duplicate keys ignored (first occurrence kept)")
        if report.malformed_bounds:
            report.issues.append(f"{report.malformed_bounds} malformed bounding boxes treated as absent")

        for issue in report.issues:
            self.logger.warning(f"DATA QUALITY: {report.table}: {issue}")

        self.logger.info(f"Loaded {report.loaded:,} {report.table} records "
                         f"from {report.rows_read:,} rows")
