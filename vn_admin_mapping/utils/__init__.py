"""
Utility functions and helpers.
"""

from .data_utils import (
    safe_float_conversion,
    safe_string_conversion,
    is_null_or_empty,
    clean_dataframe_strings
)
from .text_utils import (
    remove_diacritics,
    to_search_key,
    normalize_search_fields,
    normalize_place_names
)

__all__ = [
    'safe_float_conversion',
    'safe_string_conversion',
    'is_null_or_empty',
    'clean_dataframe_strings',
    'remove_diacritics',
    'to_search_key',
    'normalize_search_fields',
    'normalize_place_names'
]
