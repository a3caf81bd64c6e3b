"""
Alias set construction.

A facility can be searched under every name its location has carried: the
legacy district (long and short form), the legacy province, the successor
province and the new ward.
"""

from typing import FrozenSet, Optional

from ..models import NewWardRecord, OldUnitMatch


class AliasBuilder:
    """Builds the set of searchable place names for a resolved facility."""

    def build(self, old_match: Optional[OldUnitMatch],
              new_ward: Optional[NewWardRecord]) -> FrozenSet[str]:
        """
        Collect the alias set.

        Args:
            old_match: Resolved legacy district, if any
            new_ward: Resolved 2025 ward, if any

        Returns:
            Frozen set of non-empty names
        """
        aliases = set()

        if old_match is not None:
            district = old_match.district
            aliases.add(district.district)
            aliases.add(district.district_short)
            # Legacy province, which stays searchable after a merge
            aliases.add(district.province_short)
            aliases.add(old_match.successor_province)

        if new_ward is not None:
            aliases.add(new_ward.ward)
            aliases.add(new_ward.ward_short)

        return frozenset(alias for alias in aliases if alias)
