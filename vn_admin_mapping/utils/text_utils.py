"""
Text normalization for accent-insensitive search.

Vietnamese names are folded to their unmarked base letters so that a search
for "da nang" finds "Đà Nẵng". The place-name cleanup helpers fix the common
spelling variants found in scraped facility data before the keys are built.
"""

import re
import unicodedata
from typing import Any, Dict, Optional

_COMBINING_MARKS = re.compile('[\u0300-\u036f]')

# Lower-cased variant -> canonical province/city name
CITY_NAME_VARIANTS = {
    "ho chi minh city": "Hồ Chí Minh",
    "thành phố hồ chí minh": "Hồ Chí Minh",
    "hồ chí minh": "Hồ Chí Minh",
    "tp. hồ chí minh": "Hồ Chí Minh",
    "tp.hồ chí minh": "Hồ Chí Minh",
    "tp hồ chí minh": "Hồ Chí Minh",
    "thành phố hà nội": "Hà Nội",
    "hà nội": "Hà Nội",
    "tp. hà nội": "Hà Nội",
    "thành phố đà nẵng": "Đà Nẵng",
    "đà nẵng": "Đà Nẵng",
    "thành phố cần thơ": "Cần Thơ",
    "cần thơ": "Cần Thơ",
    "thành phố hải phòng": "Hải Phòng",
    "hải phòng": "Hải Phòng",
    "thành phố biên hòa": "Đồng Nai",
    "biên hòa": "Đồng Nai",
}

_NUMBERED_DISTRICT = re.compile(r'^\d+$')
_DOUBLED_QUAN_PREFIX = re.compile(r'^[Qq]uận\s+[Qq]uận')


def remove_diacritics(text: str) -> str:
    """
    Strip Vietnamese diacritics, keeping case.

    The text is decomposed (NFD), every mark in the combining diacritical
    marks block is removed, and đ/Đ are mapped to d/D since they have no
    decomposition.

    >>> remove_diacritics("Đà Nẵng")
    'Da Nang'
    """
    decomposed = unicodedata.normalize('NFD', text)
    stripped = _COMBINING_MARKS.sub('', decomposed)
    return stripped.replace('đ', 'd').replace('Đ', 'D')


def to_search_key(value: Any) -> str:
    """Lower-cased, diacritic-free search key; None becomes an empty string."""
    if value is None:
        return ""
    return remove_diacritics(str(value).lower())


def normalize_city(city: Optional[str]) -> Optional[str]:
    """Map a known city spelling variant to its canonical name."""
    if not city:
        return city
    return CITY_NAME_VARIANTS.get(city.lower().strip(), city)


def normalize_district(district: Optional[str]) -> Optional[str]:
    """
    Clean up district labels.

    Bare numbers become "Quận N" and a doubled "Quận Quận" prefix is
    collapsed.
    """
    if not district:
        return district
    if _NUMBERED_DISTRICT.match(district.strip()):
        return "Quận " + district.strip()
    return _DOUBLED_QUAN_PREFIX.sub("Quận", district)


def normalize_place_names(facility: Dict[str, Any]) -> bool:
    """
    Canonicalize the city and district of a facility in place.

    Returns:
        True if either field was changed
    """
    changed = False

    city = facility.get('city')
    if isinstance(city, str):
        canonical = normalize_city(city)
        if canonical != city:
            facility['city'] = canonical
            changed = True

    district = facility.get('district')
    if isinstance(district, str):
        cleaned = normalize_district(district)
        if cleaned != district:
            facility['district'] = cleaned
            changed = True

    return changed


def normalize_search_fields(facility: Dict[str, Any]) -> None:
    """Write the ``*Ascii`` search keys for name, city, district and aliases."""
    facility['nameAscii'] = to_search_key(facility.get('name'))
    facility['cityAscii'] = to_search_key(facility.get('city'))
    facility['districtAscii'] = to_search_key(facility.get('district'))

    aliases = facility.get('aliases')
    if aliases is not None:
        facility['aliasesAscii'] = [to_search_key(alias) for alias in aliases]
