"""
Custom exception classes for the administrative-unit enrichment application.

This module defines the exception hierarchy used by the loaders, the
enrichment engine and the output generator. Data-quality problems found in
the reference tables are not raised; they are counted and logged by the
component that detects them.
"""

from typing import Optional, List, Dict, Any


class EnrichmentError(Exception):
    """Base exception class for all enrichment errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        """
        Initialize the base enrichment error.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            context: Optional context information about the error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'error_code': self.error_code,
            'context': self.context
        }


class ValidationError(EnrichmentError):
    """Exception raised when the facility input does not have the expected shape."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 invalid_value: Any = None, validation_rules: Optional[List[str]] = None):
        """
        Initialize validation error.

        Args:
            message: Human-readable error message
            field_name: Name of the field that failed validation
            invalid_value: The invalid value that caused the error
            validation_rules: List of validation rules that were violated
        """
        context = {
            'field_name': field_name,
            'invalid_value': str(invalid_value) if invalid_value is not None else None,
            'validation_rules': validation_rules or []
        }
        super().__init__(message, error_code='VALIDATION_ERROR', context=context)
        self.field_name = field_name
        self.invalid_value = invalid_value
        self.validation_rules = validation_rules or []


class DataLoadError(EnrichmentError):
    """Exception raised for data loading errors."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 line_number: Optional[int] = None, original_error: Optional[Exception] = None):
        """
        Initialize data load error.

        Args:
            message: Human-readable error message
            file_path: Path to the file that caused the error
            line_number: Line number where the error occurred
            original_error: Original exception that caused this error
        """
        context = {
            'file_path': file_path,
            'line_number': line_number,
            'original_error': str(original_error) if original_error else None,
            'original_error_type': type(original_error).__name__ if original_error else None
        }
        super().__init__(message, error_code='DATA_LOAD_ERROR', context=context)
        self.file_path = file_path
        self.line_number = line_number
        self.original_error = original_error


class FileAccessError(EnrichmentError):
    """Exception raised for file access and I/O errors."""

    def __init__(self, message: str, file_path: str, operation: str,
                 original_error: Optional[Exception] = None):
        """
        Initialize file access error.

        Args:
            message: Human-readable error message
            file_path: Path to the file that caused the error
            operation: Type of operation that failed (read, write, create, etc.)
            original_error: Original exception that caused this error
        """
        context = {
            'file_path': file_path,
            'operation': operation,
            'original_error': str(original_error) if original_error else None,
            'original_error_type': type(original_error).__name__ if original_error else None
        }
        super().__init__(message, error_code='FILE_ACCESS_ERROR', context=context)
        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ConfigurationError(EnrichmentError):
    """Exception raised for configuration errors."""

    def __init__(self, message: str, config_key: Optional[str] = None,
                 config_value: Any = None, valid_values: Optional[List[Any]] = None):
        """
        Initialize configuration error.

        Args:
            message: Human-readable error message
            config_key: Configuration key that has invalid value
            config_value: Invalid configuration value
            valid_values: List of valid values for the configuration key
        """
        context = {
            'config_key': config_key,
            'config_value': str(config_value) if config_value is not None else None,
            'valid_values': [str(v) for v in valid_values] if valid_values else None
        }
        super().__init__(message, error_code='CONFIGURATION_ERROR', context=context)
        self.config_key = config_key
        self.config_value = config_value
        self.valid_values = valid_values or []


class EnrichmentProcessError(EnrichmentError):
    """Exception raised when the enrichment run itself cannot proceed."""

    def __init__(self, message: str, phase: Optional[str] = None,
                 facility_count: Optional[int] = None, processed_count: Optional[int] = None,
                 original_error: Optional[Exception] = None):
        """
        Initialize enrichment process error.

        Args:
            message: Human-readable error message
            phase: Name of the pipeline phase that failed
            facility_count: Total number of facilities being processed
            processed_count: Number of facilities processed before failure
            original_error: Original exception that caused this error
        """
        context = {
            'phase': phase,
            'facility_count': facility_count,
            'processed_count': processed_count,
            'original_error': str(original_error) if original_error else None,
            'original_error_type': type(original_error).__name__ if original_error else None
        }
        super().__init__(message, error_code='ENRICHMENT_PROCESS_ERROR', context=context)
        self.phase = phase
        self.facility_count = facility_count
        self.processed_count = processed_count
        self.original_error = original_error


class OutputGenerationError(EnrichmentError):
    """Exception raised for errors during output generation."""

    def __init__(self, message: str, output_type: Optional[str] = None,
                 output_path: Optional[str] = None, record_count: Optional[int] = None,
                 original_error: Optional[Exception] = None):
        """
        Initialize output generation error.

        Args:
            message: Human-readable error message
            output_type: Type of output being generated (JSON, report, etc.)
            output_path: Path where output was being written
            record_count: Number of records being written
            original_error: Original exception that caused this error
        """
        context = {
            'output_type': output_type,
            'output_path': output_path,
            'record_count': record_count,
            'original_error': str(original_error) if original_error else None,
            'original_error_type': type(original_error).__name__ if original_error else None
        }
        super().__init__(message, error_code='OUTPUT_GENERATION_ERROR', context=context)
        self.output_type = output_type
        self.output_path = output_path
        self.record_count = record_count
        self.original_error = original_error


def get_error_severity(error: Exception) -> str:
    """
    Get the severity level of an error.

    Args:
        error: Exception to evaluate

    Returns:
        Severity level string (low, medium, high, critical)
    """
    if isinstance(error, ConfigurationError):
        return 'critical'
    elif isinstance(error, (DataLoadError, FileAccessError, ValidationError)):
        return 'high'
    elif isinstance(error, (EnrichmentProcessError, OutputGenerationError)):
        return 'medium'
    else:
        return 'medium'
