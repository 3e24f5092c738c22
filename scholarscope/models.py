"""scholarscope.models
~~~~~~~~~~~~~~~~~~~~~
This module defines the canonical data structures shared by the registry client,
the bibliometric sources and the aggregation layer. Every source adapter must
return data that conforms to these schemas so records from different sources
can be matched and merged.

The core components are:

▸ Publication (dataclass)
    A single work with its citation count. ``citations`` is ``None`` when no
    source has measured it; a confirmed zero stays ``0``.

▸ ResearcherCandidate (frozen dataclass)
    One ranked search hit.

▸ ResearcherProfile (frozen dataclass)
    The aggregated profile returned for a single registry identifier.

Unknown counts are represented by ``None`` and rendered as ``"-"`` by the
``to_dict`` helpers, which keeps "not measured" distinct from a real zero.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

UNKNOWN_COUNTRY = "unknown"
UNKNOWN_DISPLAY = "-"


def display_count(value: Optional[int]) -> Any:
    """Render an optional count for API output."""
    return UNKNOWN_DISPLAY if value is None else value


def current_year() -> int:
    return date.today().year


@dataclass
class Publication:
    """
    Canonical schema for a single publication.

    Attributes
    ----------
    title : str
        The publication title (original casing preserved).
    year : int
        Publication year; extractors default it to the current year.
    venue : Optional[str]
        Journal, conference or other venue name.
    citations : Optional[int]
        Citation count, ``None`` if unknown.
    doi : Optional[str]
        Digital Object Identifier (automatically normalized).
    source : str
        Name of the source the record came from (e.g. "ORCID", "CrossRef").
    """
    title: str
    year: int = field(default_factory=current_year)
    venue: Optional[str] = None
    citations: Optional[int] = None
    doi: Optional[str] = None
    source: str = ""

    def __post_init__(self) -> None:
        """Normalize DOI and title after initialization."""
        if self.doi:
            self.doi = self.doi.lower().strip()
            if self.doi.startswith("http"):
                self.doi = self.doi.split("doi.org/")[-1]
        else:
            self.doi = None

        if self.title:
            self.title = self.title.strip()

        # Negative counts from a misbehaving source are treated as unmeasured
        if self.citations is not None and self.citations < 0:
            self.citations = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "year": self.year,
            "venue": self.venue,
            "citations": display_count(self.citations),
            "doi": self.doi,
        }


@dataclass(frozen=True)
class ResearcherCandidate:
    """
    A search hit. ``rank`` is 0 until the result set has been ranked.

    Attributes
    ----------
    registry_id : str
        ORCID iD of the researcher.
    display_name : str
        Name shown to the user.
    country : str
        Free-text country from the registry, ``"unknown"`` if absent.
    keywords : Tuple[str, ...]
        Registry keywords, truncated to the configured maximum.
    citation_count : Optional[int]
        Total citations, ``None`` if unknown.
    publication_count : Optional[int]
        Number of publications, ``None`` if unknown.
    rank : int
        Dense 1-based rank within the containing result set.
    """
    registry_id: str
    display_name: str
    country: str = UNKNOWN_COUNTRY
    keywords: Tuple[str, ...] = ()
    citation_count: Optional[int] = None
    publication_count: Optional[int] = None
    rank: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orcidId": self.registry_id,
            "name": self.display_name,
            "country": self.country,
            "keywords": list(self.keywords),
            "citationCount": display_count(self.citation_count),
            "publicationCount": display_count(self.publication_count),
            "rank": self.rank,
        }


@dataclass(frozen=True)
class Employment:
    organization: str
    role: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "organization": self.organization,
            "role": self.role,
            "startDate": self.start_date,
            "endDate": self.end_date,
        }


@dataclass(frozen=True)
class Education:
    organization: str
    degree: Optional[str] = None
    year: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"organization": self.organization, "degree": self.degree, "year": self.year}


@dataclass(frozen=True)
class ResearcherProfile:
    """
    Aggregated researcher profile.

    Built once per request and cached; never mutated afterwards, so the
    collections are tuples.
    """
    registry_id: str
    display_name: str
    country: str = UNKNOWN_COUNTRY
    email: Optional[str] = None
    website: Optional[str] = None
    keywords: Tuple[str, ...] = ()
    publications: Tuple[Publication, ...] = ()
    total_citations: Optional[int] = None
    h_index: Optional[int] = None
    biography: Optional[str] = None
    employments: Tuple[Employment, ...] = ()
    educations: Tuple[Education, ...] = ()
    enhanced_with: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orcidId": self.registry_id,
            "name": self.display_name,
            "country": self.country,
            "email": self.email,
            "website": self.website,
            "keywords": list(self.keywords),
            "publications": [p.to_dict() for p in self.publications],
            "totalCitations": display_count(self.total_citations),
            "hIndex": display_count(self.h_index),
            "biography": self.biography,
            "employments": [e.to_dict() for e in self.employments],
            "educations": [e.to_dict() for e in self.educations],
            "enhancedWith": list(self.enhanced_with),
        }


@dataclass(frozen=True)
class AuthorMetrics:
    """Author-level totals reported by a bibliometric source."""
    name: str
    citation_count: Optional[int] = None
    h_index: Optional[int] = None
    paper_count: Optional[int] = None


@dataclass
class EnrichmentResult:
    publications: List[Publication]
    total_citations: Optional[int]
    h_index: Optional[int]
    sources_used: List[str] = field(default_factory=list)
