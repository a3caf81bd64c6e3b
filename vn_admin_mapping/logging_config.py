"""
Logging configuration for the enrichment application.

Console and optional file output share one format. The helpers on
EnrichmentLogger report the enrichment run: the reference data it started
from, per-level resolution rates, sample matches and the files it wrote.
"""

import logging
import sys
from pathlib import Path
from typing import Iterable, Optional
from datetime import datetime

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
RULE_WIDTH = 60


class EnrichmentLogger:
    """Logger for an enrichment run."""

    def __init__(self, name: str = "vn_admin_mapping", level: str = "INFO",
                 log_file: Optional[str] = None):
        """
        Args:
            name: Logger name
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: Optional file path; the log is appended to it
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

        # Repeated runs in one process must not stack handlers
        self.logger.handlers.clear()

        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, mode='a', encoding='utf-8')
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def info(self, message: str):
        self.logger.info(message)

    def warning(self, message: str):
        self.logger.warning(message)

    def error(self, message: str):
        self.logger.error(message)

    def _banner(self, title: str):
        self.info("=" * RULE_WIDTH)
        self.info(title)
        self.info("=" * RULE_WIDTH)

    def log_processing_start(self, facilities_count: int, reference_summary: dict):
        """Log the facility count and the size of each reference table."""
        self._banner("ADMINISTRATIVE UNIT ENRICHMENT STARTED")
        self.info(f"Processing {facilities_count:,} facility records")
        self.info(f"Using {reference_summary.get('districts', 0):,} legacy districts, "
                  f"{reference_summary.get('conversions', 0):,} conversions, "
                  f"{reference_summary.get('wards', 0):,} wards in "
                  f"{reference_summary.get('ward_provinces', 0):,} provinces")
        self.info(f"Started at: {datetime.now().strftime(LOG_DATE_FORMAT)}")

    def log_processing_complete(self, stats):
        """Log the final counts of a run from its ProcessingStats."""
        self._banner("ADMINISTRATIVE UNIT ENRICHMENT COMPLETED")
        self.info(f"Total facilities processed: {stats.total_facilities:,}")
        self.info(f"Matched to old district: {stats.matched_old:,} "
                  f"({stats.get_old_match_rate():.2f}%)")
        self.info(f"  by bounding box: {stats.matched_old_by_bounds:,}")
        self.info(f"  by nearest centroid: {stats.matched_old_by_distance:,}")
        self.info(f"Matched to new ward: {stats.matched_new:,} "
                  f"({stats.get_new_match_rate():.2f}%)")
        self.info(f"Without coordinates: {stats.no_coordinate:,}")
        self.info(f"Unmatched: {stats.unmatched:,}")
        self.info(f"Processing time: {stats.processing_time:.2f} seconds")
        self.info(f"Completed at: {datetime.now().strftime(LOG_DATE_FORMAT)}")

    def log_phase_start(self, phase_name: str):
        self.info("-" * 40)
        self.info(f"Starting {phase_name}")

    def log_phase_complete(self, phase_name: str, count: int, duration: float):
        self.info(f"Completed {phase_name}: {count:,} records in {duration:.2f}s")

    def log_resolution_rates(self, stats, duration: float):
        """Log how many facilities each lookup level resolved during one pass."""
        total = stats.total_facilities
        for level, matched, rate in (
            ("Old district", stats.matched_old, stats.get_old_match_rate()),
            ("New ward", stats.matched_new, stats.get_new_match_rate()),
        ):
            self.info(f"{level} - Matched: {matched:,}/{total:,} ({rate:.2f}%) "
                      f"in {duration:.2f}s")

    def log_samples(self, samples: Iterable[str]):
        """Log one line per sample match, under a heading; nothing when empty."""
        samples = list(samples)
        if not samples:
            return
        self.info("Sample matches:")
        for sample in samples:
            self.info(f"  {sample}")

    def log_data_quality_warning(self, message: str):
        self.warning(f"DATA QUALITY: {message}")

    def log_output_written(self, description: str, file_path: str, entry_count: int):
        """Log an output file together with how many entries it holds."""
        self.info(f"{description}: {file_path} ({entry_count:,} entries)")


def setup_logging(config) -> EnrichmentLogger:
    """
    Set up logging based on configuration.

    An explicit log file wins; otherwise a timestamped log is written next to
    the outputs.

    Args:
        config: EnrichmentConfig instance

    Returns:
        Configured EnrichmentLogger instance
    """
    log_file = None
    if config.log_file:
        log_file = config.log_file
    elif config.output_directory:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = Path(config.output_directory) / f"enrichment_log_{timestamp}.txt"

    return EnrichmentLogger(
        name="vn_admin_mapping",
        level=config.log_level,
        log_file=str(log_file) if log_file else None
    )
