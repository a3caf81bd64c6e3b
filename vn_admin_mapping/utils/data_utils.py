"""
Data utility functions for type conversions and null handling.

This module provides utility functions for cleaning and converting the raw
string values read from the reference tables.
"""

import math
import pandas as pd
from typing import Any, Optional


def safe_float_conversion(value: Any) -> Optional[float]:
    """
    Safely convert a value to a finite float, handling nulls and invalid values.

    Args:
        value: Value to convert to float

    Returns:
        Float value or None if conversion fails or the value is not finite
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None

    try:
        result = float(value)
    except (ValueError, TypeError):
        return None

    if not math.isfinite(result):
        return None
    return result


def safe_string_conversion(value: Any) -> str:
    """
    Safely convert a value to string, handling nulls and cleaning whitespace.

    Args:
        value: Value to convert to string

    Returns:
        Cleaned string value or empty string if null
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""

    return str(value).strip()


def is_null_or_empty(value: Any) -> bool:
    """
    Check if a value is null, empty, or contains only whitespace.

    Args:
        value: Value to check

    Returns:
        True if value is null/empty, False otherwise
    """
    if value is None:
        return True

    if isinstance(value, str):
        return not value.strip()

    return bool(pd.isna(value))


def clean_dataframe_strings(df: pd.DataFrame, string_columns: list) -> pd.DataFrame:
    """
    Clean string columns in a DataFrame by removing extra whitespace.

    Args:
        df: DataFrame to clean
        string_columns: List of column names to clean

    Returns:
        DataFrame with cleaned string columns
    """
    df_cleaned = df.copy()

    for col in string_columns:
        if col in df_cleaned.columns:
            df_cleaned[col] = df_cleaned[col].apply(safe_string_conversion)

    return df_cleaned
