"""scholarscope.sources.semantic_scholar
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Semantic Scholar Graph API author search.

The search returns up to three author records with their papers. The record
whose name is most similar to the query (rapidfuzz) supplies the papers and
the author-level totals, and only when that similarity is high.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from rapidfuzz import fuzz

from ..matching import HIGH_CONFIDENCE_THRESHOLD
from ..models import AuthorMetrics, Publication, current_year
from .base import BibliometricClient

logger = logging.getLogger(__name__)

MIN_NAME_SIMILARITY = 0.85
AUTHOR_FIELDS = (
    "authorId,name,paperCount,citationCount,hIndex,"
    "papers.title,papers.year,papers.citationCount,papers.venue"
)


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class SemanticScholarClient(BibliometricClient):
    name = "Semantic Scholar"
    match_threshold = HIGH_CONFIDENCE_THRESHOLD
    seed_limit = 20
    url = "https://api.semanticscholar.org/graph/v1/author/search"
    reports_author_metrics = True

    def __init__(self, cache, *, api_key: Optional[str] = None, **kwargs):
        super().__init__(cache, **kwargs)
        self.api_key = api_key

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers

    def _request_params(self, author_name: str) -> Dict[str, Any]:
        return {"query": author_name, "limit": 3, "fields": AUTHOR_FIELDS}

    def _best_author(self, payload: Dict[str, Any], author_name: str) -> Optional[Dict[str, Any]]:
        """The closest-named author record, or None when no name is similar enough."""
        authors = [a for a in (payload.get("data") or []) if isinstance(a, dict)]
        if not authors:
            return None
        query = author_name.lower()
        scored = [
            (fuzz.token_sort_ratio(query, (a.get("name") or "").lower()) / 100.0, index, a)
            for index, a in enumerate(authors)
        ]
        # Highest similarity wins; registry order breaks ties
        similarity, _, author = max(scored, key=lambda s: (s[0], -s[1]))
        if similarity < MIN_NAME_SIMILARITY:
            logger.debug(f"Semantic Scholar best author {author.get('name')!r} too dissimilar to {author_name!r}")
            return None
        return author

    def _parse_publications(self, payload: Dict[str, Any], author_name: str) -> List[Publication]:
        author = self._best_author(payload, author_name)
        if author is None:
            return []
        publications = []
        for paper in author.get("papers") or []:
            title = (paper.get("title") or "").strip()
            if not title:
                continue
            publications.append(Publication(
                title=title,
                year=_as_int(paper.get("year")) or current_year(),
                venue=paper.get("venue") or None,
                citations=_as_int(paper.get("citationCount")),
                source=self.name,
            ))
        return publications

    def _parse_author_metrics(self, payload: Dict[str, Any], author_name: str) -> Optional[AuthorMetrics]:
        author = self._best_author(payload, author_name)
        if author is None:
            return None
        logger.info(
            f"Semantic Scholar match: {author.get('name')} "
            f"({author.get('paperCount')} papers, {author.get('citationCount')} citations)"
        )
        return AuthorMetrics(
            name=author.get("name") or author_name,
            citation_count=_as_int(author.get("citationCount")),
            h_index=_as_int(author.get("hIndex")),
            paper_count=_as_int(author.get("paperCount")),
        )
