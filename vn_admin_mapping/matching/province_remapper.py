"""
Province remapping across the 2025 reorganization.
"""

from typing import Mapping, Optional

from ..models import LegacyDistrictRecord, ProvinceConversionRecord, UnitKey


class ProvinceRemapper:
    """Looks up the successor province of a legacy district."""

    def __init__(self, conversions: Mapping[UnitKey, ProvinceConversionRecord]):
        self.conversions = conversions

    def conversion_for(self, district: LegacyDistrictRecord) -> Optional[ProvinceConversionRecord]:
        return self.conversions.get(district.key)

    def remap(self, district: LegacyDistrictRecord) -> str:
        """
        Successor province short name for a legacy district.

        Districts missing from the conversion table keep their own province
        short name, i.e. no reorganization applies to them.
        """
        conversion = self.conversion_for(district)
        if conversion is None:
            return district.province_short
        return conversion.new_province_short
