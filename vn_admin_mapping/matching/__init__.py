"""
Administrative unit resolution components.
"""

from .district_locator import OldUnitLocator
from .province_remapper import ProvinceRemapper
from .ward_locator import NewUnitLocator
from .alias_builder import AliasBuilder

__all__ = ['OldUnitLocator', 'ProvinceRemapper', 'NewUnitLocator', 'AliasBuilder']
