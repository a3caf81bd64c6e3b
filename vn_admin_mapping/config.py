"""
Configuration management for the enrichment application.

This module provides dataclasses for the run configuration (file paths,
matching parameters, logging) and for the statistics reported at the end of
a run.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional
import os
from pathlib import Path

from .exceptions import ConfigurationError

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class EnrichmentConfig:
    """Configuration class for an enrichment run."""

    # Input file paths
    facilities_file: str
    legacy_districts_file: str
    conversions_file: str
    wards_file: str

    # Output configuration
    output_directory: str
    # Enriched facilities; defaults to rewriting facilities_file in place
    output_file: Optional[str] = None
    # District alias lookup (one entry per legacy district)
    aliases_file: Optional[str] = None

    # Nearest-centroid fallback radius for legacy districts
    max_old_unit_distance_km: float = 15.0

    # Canonicalize city/district spellings before building search keys
    normalize_place_names: bool = False

    # Logging configuration
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_paths()
        self._validate_parameters()
        self._ensure_output_directory()

    def _validate_paths(self):
        """Validate that input files exist."""
        inputs = [
            ('Facilities', self.facilities_file),
            ('Legacy districts', self.legacy_districts_file),
            ('Province conversion', self.conversions_file),
            ('Wards', self.wards_file),
        ]
        for label, path in inputs:
            if not os.path.exists(path):
                raise FileNotFoundError(f"{label} file not found: {path}")

    def _validate_parameters(self):
        """Validate matching and logging parameters."""
        if self.max_old_unit_distance_km <= 0:
            raise ConfigurationError(
                f"Maximum old-unit distance must be positive: {self.max_old_unit_distance_km}",
                config_key='max_old_unit_distance_km',
                config_value=self.max_old_unit_distance_km
            )

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Unknown log level: {self.log_level}",
                config_key='log_level',
                config_value=self.log_level,
                valid_values=VALID_LOG_LEVELS
            )

    def _ensure_output_directory(self):
        """Create output directory if it doesn't exist."""
        Path(self.output_directory).mkdir(parents=True, exist_ok=True)

    def get_output_file(self) -> str:
        """Path the enriched facilities are written to."""
        return self.output_file or self.facilities_file

    @classmethod
    def from_dict(cls, config_dict: Dict) -> 'EnrichmentConfig':
        """Create configuration from dictionary."""
        return cls(**config_dict)

    def to_dict(self) -> Dict:
        """Convert configuration to dictionary."""
        return asdict(self)


@dataclass
class ProcessingStats:
    """Statistics tracking for an enrichment run."""

    total_facilities: int = 0
    matched_old: int = 0
    matched_old_by_bounds: int = 0
    matched_old_by_distance: int = 0
    matched_new: int = 0
    no_coordinate: int = 0
    unmatched: int = 0
    processing_time: float = 0.0
    samples: List[str] = field(default_factory=list)

    def _rate(self, count: int) -> float:
        if self.total_facilities == 0:
            return 0.0
        return (count / self.total_facilities) * 100

    def get_old_match_rate(self) -> float:
        """Percentage of facilities resolved to a legacy district."""
        return self._rate(self.matched_old)

    def get_new_match_rate(self) -> float:
        """Percentage of facilities resolved to a reorganized ward."""
        return self._rate(self.matched_new)

    def get_unmatched_rate(self) -> float:
        return self._rate(self.unmatched)

    def to_dict(self) -> Dict:
        data = asdict(self)
        data.pop('samples')
        return data
