"""
Enrichment orchestration engine.

This module provides the FacilityResolver, which runs the old-district,
province-remap, new-ward and alias steps for a single facility, and the
EnrichmentEngine, which loads the inputs and drives the resolver over the
whole facility collection while collecting match statistics.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Tuple

from tqdm import tqdm

from .config import EnrichmentConfig, ProcessingStats
from .data_loader import ReferenceLoader
from .exceptions import EnrichmentProcessError, EnrichmentError
from .logging_config import EnrichmentLogger
from .matching.alias_builder import AliasBuilder
from .matching.district_locator import OldUnitLocator, METHOD_BOUNDS, DEFAULT_MAX_DISTANCE_KM
from .matching.province_remapper import ProvinceRemapper
from .matching.ward_locator import NewUnitLocator
from .models import Coordinate, EnrichmentResult, OldUnitMatch, ReferenceTables
from .utils.error_handler import create_error_context, log_error_details
from .utils.geo_utils import extract_coordinate
from .utils.text_utils import normalize_place_names, normalize_search_fields

SAMPLE_SIZE = 5


class FacilityResolver:
    """
    Resolves facilities against a fixed set of reference tables.

    The tables are only read, so one resolver can serve any number of
    facilities, in any order.
    """

    def __init__(self, tables: ReferenceTables,
                 max_old_unit_distance_km: float = DEFAULT_MAX_DISTANCE_KM,
                 logger: Optional[logging.Logger] = None):
        self.tables = tables
        self.logger = logger or logging.getLogger(__name__)
        self.old_locator = OldUnitLocator(tables.districts, max_old_unit_distance_km, self.logger)
        self.remapper = ProvinceRemapper(tables.conversions)
        self.new_locator = NewUnitLocator(tables.wards, tables.wards_by_province, self.logger)
        self.alias_builder = AliasBuilder()

    def resolve(self, facility: Dict[str, Any]) -> EnrichmentResult:
        """Resolve a facility from the coordinate in its ``mapsUrl``."""
        coordinate = extract_coordinate(facility.get('mapsUrl'))
        if coordinate is None:
            return EnrichmentResult()
        return self.resolve_coordinate(coordinate)

    def resolve_coordinate(self, coordinate: Coordinate) -> EnrichmentResult:
        """
        Run the full resolution chain for one coordinate.

        The legacy district's successor province narrows the ward search.
        Without a legacy district the ward search covers every province.
        """
        old_match = None
        candidate_province = None

        located = self.old_locator.locate_with_distance(coordinate)
        if located is not None:
            district, distance_km, method = located
            candidate_province = self.remapper.remap(district)
            old_match = OldUnitMatch(
                district=district,
                distance_km=distance_km,
                method=method,
                successor_province=candidate_province,
                conversion=self.remapper.conversion_for(district),
            )

        new_ward = self.new_locator.locate(coordinate, candidate_province)
        aliases = self.alias_builder.build(old_match, new_ward)

        return EnrichmentResult(
            coordinate=coordinate,
            old_match=old_match,
            new_ward=new_ward,
            aliases=aliases,
        )


class EnrichmentEngine:
    """
    Orchestrates the complete enrichment run.

    Loads the reference tables and facilities named by the configuration,
    resolves every facility in a single pass and derives the search keys.
    """

    def __init__(self, config: EnrichmentConfig, logger: Optional[EnrichmentLogger] = None,
                 reference_tables: Optional[ReferenceTables] = None):
        """
        Initialize the EnrichmentEngine.

        Args:
            config: Configuration object with paths and matching parameters
            logger: Optional logger instance for logging operations
            reference_tables: Pre-loaded tables; loaded from the config paths when omitted
        """
        self.config = config
        self.logger = logger or EnrichmentLogger()
        self.data_loader = ReferenceLoader(logger=self.logger.logger)

        self.reference_tables: Optional[ReferenceTables] = reference_tables
        self.facilities: List[Dict[str, Any]] = []
        self.processing_stats = ProcessingStats()
        self.place_name_fixes = 0

    def run_complete_enrichment(self) -> Tuple[List[Dict[str, Any]], ProcessingStats]:
        """
        Run the complete pipeline from data loading to enriched facilities.

        Returns:
            Tuple of (enriched facilities, processing statistics)
        """
        start_time = time.time()

        try:
            self.logger.log_phase_start("Data Loading")
            load_start = time.time()
            self._load_data()
            self.logger.log_phase_complete(
                "Data Loading",
                len(self.facilities),
                time.time() - load_start
            )

            self.logger.log_processing_start(len(self.facilities), self.reference_tables.summary())

            self.enrich(self.facilities)

            self.processing_stats.processing_time = time.time() - start_time
            self.logger.log_processing_complete(self.processing_stats)
            self.logger.log_samples(self.processing_stats.samples)

            return self.facilities, self.processing_stats

        except Exception as e:
            self.logger.error(f"Error in complete enrichment process: {e}")
            raise

    def _load_data(self):
        """Load reference tables (unless injected) and facilities."""
        try:
            if self.reference_tables is None:
                self.reference_tables = self.data_loader.load_reference_tables(
                    self.config.legacy_districts_file,
                    self.config.conversions_file,
                    self.config.wards_file
                )
            if self.reference_tables.is_empty():
                self.logger.log_data_quality_warning(
                    "No districts or wards loaded; every facility will be unmatched"
                )
            self.facilities = self.data_loader.load_facilities(self.config.facilities_file)

        except EnrichmentError:
            raise
        except Exception as e:
            context = create_error_context(
                operation="load_data",
                facilities_file=self.config.facilities_file,
                legacy_districts_file=self.config.legacy_districts_file
            )
            log_error_details(self.logger.logger, e, context)

            raise EnrichmentProcessError(
                f"Failed to load input data: {str(e)}",
                phase="data_loading",
                original_error=e
            )

    def enrich(self, facilities: List[Dict[str, Any]]) -> ProcessingStats:
        """
        Enrich facilities in place.

        Facilities without a coordinate keep their administrative fields
        unset and count as unmatched. Search keys are derived for every
        facility.

        Args:
            facilities: Facility records, mutated in place

        Returns:
            Processing statistics for this pass
        """
        if self.reference_tables is None:
            raise EnrichmentProcessError(
                "Reference tables must be loaded before enrichment",
                phase="enrichment"
            )

        resolver = FacilityResolver(
            self.reference_tables,
            max_old_unit_distance_km=self.config.max_old_unit_distance_km,
            logger=self.logger.logger
        )
        self.processing_stats = ProcessingStats(total_facilities=len(facilities))
        self.place_name_fixes = 0
        stats = self.processing_stats

        self.logger.log_phase_start("Facility Resolution")
        phase_start = time.time()
        processed = 0

        try:
            for facility in tqdm(facilities, desc="Enriching facilities", unit="facilities"):
                if self.config.normalize_place_names and normalize_place_names(facility):
                    self.place_name_fixes += 1

                result = resolver.resolve(facility)
                result.apply_to(facility)
                self._record_result(facility, result)

                normalize_search_fields(facility)
                processed += 1

        except Exception as e:
            context = create_error_context(
                operation="enrich",
                processed=processed,
                total=len(facilities)
            )
            log_error_details(self.logger.logger, e, context)
            raise EnrichmentProcessError(
                f"Enrichment failed after {processed} facilities: {str(e)}",
                phase="enrichment",
                facility_count=len(facilities),
                processed_count=processed,
                original_error=e
            )

        self.logger.log_resolution_rates(stats, time.time() - phase_start)
        if self.config.normalize_place_names:
            self.logger.info(f"Place names normalized: {self.place_name_fixes:,} facilities")
        if stats.no_coordinate:
            self.logger.log_data_quality_warning(
                f"{stats.no_coordinate:,} facilities have no usable map coordinate"
            )

        return stats

    def _record_result(self, facility: Dict[str, Any], result: EnrichmentResult) -> None:
        stats = self.processing_stats

        if not result.has_coordinate():
            stats.no_coordinate += 1

        if result.old_match is not None:
            stats.matched_old += 1
            if result.old_match.method == METHOD_BOUNDS:
                stats.matched_old_by_bounds += 1
            else:
                stats.matched_old_by_distance += 1

        if result.new_ward is not None:
            stats.matched_new += 1

        if not result.is_matched():
            stats.unmatched += 1
        elif len(stats.samples) < SAMPLE_SIZE:
            stats.samples.append(result.describe(facility))
