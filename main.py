"""
Main entry point for the administrative-unit enrichment application.

This script provides the command-line interface for enriching a facility
collection with legacy district and 2025 ward information.
"""

import argparse
import sys
import time
import psutil
from pathlib import Path

# Add the current directory to Python path for imports
sys.path.insert(0, str(Path(__file__).parent))

from vn_admin_mapping.config import EnrichmentConfig
from vn_admin_mapping.logging_config import setup_logging
from vn_admin_mapping.enrichment_engine import EnrichmentEngine
from vn_admin_mapping.output.output_generator import OutputGenerator
from vn_admin_mapping.exceptions import (
    ConfigurationError, EnrichmentProcessError, OutputGenerationError, EnrichmentError
)


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Enrich facilities with legacy district and 2025 ward information"
    )

    parser.add_argument(
        "--facilities",
        required=True,
        help="Path to facilities JSON file (array of objects with a mapsUrl field)"
    )

    parser.add_argument(
        "--legacy-districts",
        required=True,
        help="Path to legacy 63-province district CSV"
    )

    parser.add_argument(
        "--conversions",
        required=True,
        help="Path to legacy-to-2025 province conversion CSV"
    )

    parser.add_argument(
        "--wards",
        required=True,
        help="Path to 2025 ward CSV"
    )

    parser.add_argument(
        "--output-dir",
        required=True,
        help="Output directory for the log and summary report"
    )

    parser.add_argument(
        "--output-file",
        help="Where to write enriched facilities (default: overwrite --facilities)"
    )

    parser.add_argument(
        "--aliases-file",
        help="Optional path for the district alias lookup JSON"
    )

    parser.add_argument(
        "--max-distance-km",
        type=float,
        default=15.0,
        help="Nearest-centroid fallback radius for legacy districts (default: 15)"
    )

    parser.add_argument(
        "--normalize-places",
        action="store_true",
        help="Canonicalize city and district spellings before building search keys"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-file",
        help="Log file path (default: timestamped file in the output directory)"
    )

    return parser.parse_args(argv)


class PerformanceMonitor:
    """Monitor and log performance metrics during application execution."""

    def __init__(self, logger=None):
        """Initialize performance monitor."""
        self.logger = logger
        self.process = psutil.Process()
        self.start_time = time.time()
        self.checkpoints = {}
        self.memory_snapshots = []

    def log_memory_usage(self, checkpoint_name: str):
        """Log current memory usage."""
        memory_mb = self.process.memory_info().rss / 1024 / 1024
        self.memory_snapshots.append({
            'checkpoint': checkpoint_name,
            'timestamp': time.time(),
            'memory_mb': memory_mb,
        })

        if self.logger:
            self.logger.debug(f"Memory usage at {checkpoint_name}: {memory_mb:.1f} MB")

    def start_checkpoint(self, name: str):
        """Start timing a checkpoint."""
        self.checkpoints[name] = {'start': time.time()}
        self.log_memory_usage(f"{name}_start")

    def end_checkpoint(self, name: str):
        """End timing a checkpoint."""
        if name in self.checkpoints:
            duration = time.time() - self.checkpoints[name]['start']
            self.checkpoints[name]['duration'] = duration
            self.log_memory_usage(f"{name}_end")

            if self.logger:
                self.logger.info(f"Checkpoint {name} completed in {duration:.2f} seconds")

    def get_performance_summary(self) -> dict:
        """Get performance summary."""
        peak = max((s['memory_mb'] for s in self.memory_snapshots), default=0.0)
        return {
            'total_execution_time': time.time() - self.start_time,
            'peak_memory_mb': peak,
            'checkpoints': self.checkpoints.copy(),
        }


def print_processing_summary(stats, generated_files):
    """Print a summary of processing results to console."""
    total = stats.total_facilities
    print("\n" + "=" * 60)
    print("ADMINISTRATIVE UNIT ENRICHMENT COMPLETED")
    print("=" * 60)
    print(f"\nProcessing Summary:")
    print(f"  Total facilities: {total:,}")
    print(f"  Processing time: {stats.processing_time:.2f} seconds")
    print(f"\nMatching Results:")
    print(f"  Matched to old district: {stats.matched_old:,} ({stats.get_old_match_rate():.2f}%)")
    print(f"  Matched to new ward: {stats.matched_new:,} ({stats.get_new_match_rate():.2f}%)")
    print(f"  Unmatched: {stats.unmatched:,} ({stats.get_unmatched_rate():.2f}%)")

    print(f"\nGenerated Output Files:")
    for file_type, file_path in generated_files.items():
        print(f"  {file_type}: {file_path}")


def main(argv=None):
    """Main application entry point."""
    args = parse_arguments(argv)

    try:
        config = EnrichmentConfig(
            facilities_file=args.facilities,
            legacy_districts_file=args.legacy_districts,
            conversions_file=args.conversions,
            wards_file=args.wards,
            output_directory=args.output_dir,
            output_file=args.output_file,
            aliases_file=args.aliases_file,
            max_old_unit_distance_km=args.max_distance_km,
            normalize_place_names=args.normalize_places,
            log_level=args.log_level,
            log_file=args.log_file
        )

        logger = setup_logging(config)
        perf_monitor = PerformanceMonitor(logger.logger)

        logger.info("Enrichment application initialized")
        logger.info(f"Configuration: {config.to_dict()}")

        engine = EnrichmentEngine(config, logger)
        output_generator = OutputGenerator(config, logger)

        if not output_generator.validate_output_directory():
            raise EnrichmentProcessError("Output directory is not writable", phase="initialization")

        perf_monitor.start_checkpoint("enrichment")
        facilities, stats = engine.run_complete_enrichment()
        perf_monitor.end_checkpoint("enrichment")

        perf_monitor.start_checkpoint("output_generation")
        generated_files = output_generator.generate_all_outputs(
            facilities,
            engine.reference_tables,
            stats,
            engine.data_loader.load_reports
        )
        perf_monitor.end_checkpoint("output_generation")

        print_processing_summary(stats, generated_files)

        perf_summary = perf_monitor.get_performance_summary()
        logger.info(f"Total execution time: {perf_summary['total_execution_time']:.2f} seconds, "
                    f"peak memory: {perf_summary['peak_memory_mb']:.1f} MB")
        logger.info("Application completed successfully")
        return 0

    except ConfigurationError as e:
        print(f"\nConfiguration Error: {e}", file=sys.stderr)
        return 2

    except (EnrichmentProcessError, OutputGenerationError) as e:
        print(f"\nEnrichment Process Error: {e}", file=sys.stderr)
        if getattr(e, 'phase', None):
            print(f"Failed during: {e.phase}", file=sys.stderr)
        return 3

    except FileNotFoundError as e:
        print(f"\nFile Error: {e}", file=sys.stderr)
        print("Please check that all input files exist and are accessible.", file=sys.stderr)
        return 4

    except EnrichmentError as e:
        print(f"\nError: {e}", file=sys.stderr)
        print("Please check the log files for more details.", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nProcess interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
