"""Country name variants used to scope registry queries and post-filter candidates."""
from __future__ import annotations

import re
from typing import Dict, List, Optional

from .models import UNKNOWN_COUNTRY

# Country names, demonyms and ISO codes matched against a researcher's country.
COUNTRY_NAMES: Dict[str, List[str]] = {
    "BR": ["Brazil", "Brasil", "BR", "Brazilian"],
    "US": ["United States", "USA", "US", "United States of America", "American"],
    "GB": ["United Kingdom", "UK", "GB", "Great Britain", "England", "Scotland", "Wales", "British"],
    "DE": ["Germany", "Deutschland", "DE", "German"],
    "FR": ["France", "FR", "French"],
    "CA": ["Canada", "CA", "Canadian"],
    "AU": ["Australia", "AU", "Australian"],
    "JP": ["Japan", "JP", "Japanese"],
    "CN": ["China", "CN", "Chinese"],
    "IN": ["India", "IN", "Indian"],
    "ES": ["Spain", "España", "ES", "Spanish"],
    "IT": ["Italy", "Italia", "IT", "Italian"],
    "NL": ["Netherlands", "Nederland", "NL", "Holland", "Dutch"],
    "SE": ["Sweden", "Sverige", "SE", "Swedish"],
    "NO": ["Norway", "Norge", "NO", "Norwegian"],
    "CH": ["Switzerland", "Schweiz", "CH", "Swiss"],
    "AT": ["Austria", "Österreich", "AT", "Austrian"],
    "BE": ["Belgium", "België", "BE", "Belgian"],
    "DK": ["Denmark", "Danmark", "DK", "Danish"],
    "PT": ["Portugal", "PT", "Portuguese"],
    "MX": ["Mexico", "México", "MX", "Mexican"],
    "AR": ["Argentina", "AR", "Argentinian"],
    "CL": ["Chile", "CL", "Chilean"],
    "CO": ["Colombia", "CO", "Colombian"],
    "PE": ["Peru", "Perú", "PE", "Peruvian"],
    "UY": ["Uruguay", "UY", "Uruguayan"],
    "VE": ["Venezuela", "VE", "Venezuelan"],
}

# Institution names that only help the registry query, never the post-filter.
AFFILIATION_HINTS: Dict[str, List[str]] = {
    "BR": ["Universidade", "Instituto", "UFRJ", "USP", "UFMG", "UNICAMP"],
    "DE": ["Universität"],
    "FR": ["Université"],
    "ES": ["Universidad"],
    "IT": ["Università"],
    "NL": ["Universiteit"],
    "AT": ["Universität"],
    "PT": ["Universidade"],
    "MX": ["Universidad"],
    "AR": ["Universidad"],
    "CL": ["Universidad"],
    "CO": ["Universidad"],
    "PE": ["Universidad"],
    "UY": ["Universidad"],
    "VE": ["Universidad"],
}

# Variants this short are codes and must match a whole word.
_CODE_MAX_LENGTH = 3


def normalize_country_filter(country: Optional[str]) -> Optional[str]:
    """Return the filter key, or None when no filter is active."""
    if not country:
        return None
    key = country.strip()
    if not key or key.lower() == "all":
        return None
    return key.upper() if key.upper() in COUNTRY_NAMES else key


def country_names(country: str) -> List[str]:
    return COUNTRY_NAMES.get(country.upper(), [country])


def query_variants(country: str) -> List[str]:
    """Names and institution hints used to scope a registry query."""
    variants = list(country_names(country))
    for hint in AFFILIATION_HINTS.get(country.upper(), []):
        if hint not in variants:
            variants.append(hint)
    return variants


def is_country_match(researcher_country: Optional[str], filter_country: str) -> bool:
    """Case-insensitive match of a researcher's country against a filter.

    Unknown countries never match an active filter.
    """
    if not researcher_country or researcher_country == UNKNOWN_COUNTRY:
        return False

    text = researcher_country.strip().lower()
    words = set(re.split(r"[^\w]+", text))
    for variant in country_names(filter_country):
        variant_lower = variant.lower()
        if len(variant_lower) <= _CODE_MAX_LENGTH:
            if variant_lower in words:
                return True
        elif variant_lower in text:
            return True
    return False
