"""
Output generation for the enrichment application.

This module provides the OutputGenerator class, which writes the enriched
facility collection, the optional district alias lookup and a text summary
report of the run.
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import EnrichmentConfig, ProcessingStats
from ..data_loader import LoadReport
from ..exceptions import OutputGenerationError, FileAccessError
from ..logging_config import EnrichmentLogger
from ..matching.province_remapper import ProvinceRemapper
from ..models import ReferenceTables
from ..utils.error_handler import safe_file_operation


def build_alias_lookup(tables: ReferenceTables) -> Dict[str, Dict[str, Any]]:
    """
    Summarize the old-to-new province linkage of every legacy district.

    Keys are ``"provinceCode|districtCode"``; entries follow the district
    table order.
    """
    remapper = ProvinceRemapper(tables.conversions)
    lookup = {}

    for district in tables.districts:
        conversion = remapper.conversion_for(district)
        lookup[district.key.to_string()] = {
            'oldProvince': district.province_short,
            'oldDistrict': district.district,
            'oldDistrictShort': district.district_short,
            'oldDistrictType': district.district_type,
            'newProvince': remapper.remap(district),
            'provinceChanged': conversion.province_changed if conversion else False,
            'lat': district.centroid.lat,
            'lon': district.centroid.lon,
            'bounds': district.bounds.to_dict() if district.bounds else None,
        }

    return lookup


class OutputGenerator:
    """Writes enrichment results to disk."""

    def __init__(self, config: EnrichmentConfig, logger: Optional[EnrichmentLogger] = None):
        """
        Initialize the OutputGenerator.

        Args:
            config: Configuration object with output paths
            logger: Optional logger instance for logging operations
        """
        self.config = config
        self.logger = logger or EnrichmentLogger()
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        Path(self.config.output_directory).mkdir(parents=True, exist_ok=True)

    def generate_all_outputs(self, facilities: List[Dict[str, Any]], tables: ReferenceTables,
                             processing_stats: ProcessingStats,
                             load_reports: Optional[Dict[str, LoadReport]] = None) -> Dict[str, str]:
        """
        Generate every configured output file.

        Returns:
            Dictionary mapping output type to generated file path
        """
        self.logger.info("Starting output file generation")
        generated_files = {}

        generated_files['facilities'] = self.write_facilities(facilities)

        if self.config.aliases_file:
            generated_files['district_aliases'] = self.write_alias_lookup(tables)

        generated_files['summary_report'] = self.write_summary_report(processing_stats, load_reports)

        self.logger.info(f"Generated {len(generated_files)} output files")
        return generated_files

    def write_facilities(self, facilities: List[Dict[str, Any]]) -> str:
        """Write the enriched facility collection as pretty-printed UTF-8 JSON."""
        file_path = self.config.get_output_file()
        self._write_json(file_path, facilities, output_type='facilities')
        self.logger.log_output_written("Wrote enriched facilities", file_path, len(facilities))
        return file_path

    def write_alias_lookup(self, tables: ReferenceTables) -> str:
        """Write the district alias lookup to the configured aliases file."""
        if not self.config.aliases_file:
            raise OutputGenerationError(
                "No aliases file configured",
                output_type='district_aliases'
            )

        lookup = build_alias_lookup(tables)
        self._write_json(self.config.aliases_file, lookup, output_type='district_aliases')
        self.logger.log_output_written("Saved district aliases", self.config.aliases_file, len(lookup))
        return self.config.aliases_file

    def write_summary_report(self, processing_stats: ProcessingStats,
                             load_reports: Optional[Dict[str, LoadReport]] = None) -> str:
        """
        Write a text summary of the run to the output directory.

        Returns:
            Path to the generated report
        """
        filename = f"enrichment_summary_report_{self.timestamp}.txt"
        file_path = os.path.join(self.config.output_directory, filename)
        stats = processing_stats

        lines = [
            "ADMINISTRATIVE UNIT ENRICHMENT SUMMARY REPORT",
            "=" * 50,
            "",
            f"Report Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            f"Processing Time: {stats.processing_time:.2f} seconds",
            "Configuration:",
            f"  Facilities: {self.config.facilities_file}",
            f"  Legacy Districts: {self.config.legacy_districts_file}",
            f"  Province Conversion: {self.config.conversions_file}",
            f"  Wards: {self.config.wards_file}",
            f"  Old District Fallback Radius: {self.config.max_old_unit_distance_km} km",
            "",
            "MATCHING RESULTS",
            "-" * 16,
            f"Total Facilities: {stats.total_facilities:,}",
            f"Matched to Old District: {stats.matched_old:,} ({stats.get_old_match_rate():.2f}%)",
            f"  By Bounding Box: {stats.matched_old_by_bounds:,}",
            f"  By Nearest Centroid: {stats.matched_old_by_distance:,}",
            f"Matched to New Ward: {stats.matched_new:,} ({stats.get_new_match_rate():.2f}%)",
            f"Without Coordinates: {stats.no_coordinate:,}",
            f"Unmatched: {stats.unmatched:,} ({stats.get_unmatched_rate():.2f}%)",
            "",
        ]

        if load_reports:
            lines.extend(["REFERENCE DATA QUALITY", "-" * 22])
            for report in load_reports.values():
                lines.append(f"{report.table}: {report.loaded:,} loaded from {report.rows_read:,} rows "
                             f"({report.dropped():,} dropped)")
                for issue in report.issues:
                    lines.append(f"  - {issue}")
            lines.append("")

        if stats.samples:
            lines.extend(["SAMPLE MATCHES", "-" * 14])
            lines.extend(f"  {sample}" for sample in stats.samples)
            lines.append("")

        def write_report():
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write("\n".join(lines))

        try:
            safe_file_operation(write_report, file_path, "write report", logger=self.logger.logger)
        except FileAccessError as e:
            raise OutputGenerationError(
                f"Could not write summary report: {e.message}",
                output_type='summary_report',
                output_path=file_path,
                original_error=e
            )

        self.logger.info(f"Generated summary report: {file_path}")
        return file_path

    def validate_output_directory(self) -> bool:
        """Check that the output directory exists and is writable."""
        output_dir = Path(self.config.output_directory)
        return output_dir.is_dir() and os.access(output_dir, os.W_OK)

    def _write_json(self, file_path: str, payload: Any, output_type: str) -> None:
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)

        def write_json():
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)

        try:
            safe_file_operation(write_json, file_path, f"write {output_type}", logger=self.logger.logger)
        except FileAccessError as e:
            raise OutputGenerationError(
                f"Could not write {output_type}: {e.message}",
                output_type=output_type,
                output_path=file_path,
                record_count=len(payload),
                original_error=e
            )
