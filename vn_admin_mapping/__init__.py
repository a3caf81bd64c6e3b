"""
VN Admin Mapping - administrative-unit enrichment for point-located facilities.

This package resolves facility coordinates against the legacy (pre-2025)
district system and the reorganized 2025 ward system, and derives the alias
sets and diacritic-free search keys used by accent-insensitive search.
"""

__version__ = "1.0.0"
__author__ = "Data Analytics Team"
