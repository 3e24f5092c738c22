"""scholarscope.enrichment
~~~~~~~~~~~~~~~~~~~~~~~~~
Enrichment Orchestrator.

Given an author name and the publications known from the registry, query
every bibliometric source in parallel and merge what comes back:

1. Each source is called concurrently inside a shared time box; a slow or
   failing source settles as a failure without blocking the others.
2. Every base publication is matched against each source's records
   (see matching.match) and missing citation counts and DOIs are filled in.
   A known positive count is never replaced.
3. With no base publications, the first source that returned records seeds
   the list.
4. Totals still unknown afterwards are derived from the merged list
   (see metrics).

A source is listed in ``sources_used`` only if it changed something.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from functools import partial
from typing import List, Optional, Sequence, Tuple

from .concurrency import settle_all
from .matching import dedupe_by_title, match
from .metrics import h_index, total_citations
from .models import AuthorMetrics, EnrichmentResult, Publication
from .sources.base import BibliometricClient

logger = logging.getLogger(__name__)

DEFAULT_MAX_PUBLICATIONS = 50


def _known(value: Optional[int]) -> Optional[int]:
    # Registry baselines carry no citation data, so 0 there means "not measured"
    return value if value is not None and value > 0 else None


def _merge_into(pub: Publication, found: Publication) -> bool:
    """Copy missing fields from ``found`` onto ``pub``; return True if anything changed."""
    changed = False
    if found.citations is not None:
        if pub.citations is None or (pub.citations == 0 and found.citations > 0):
            pub.citations = found.citations
            changed = True
    if not pub.doi and found.doi:
        pub.doi = found.doi
        changed = True
    return changed


class EnrichmentOrchestrator:
    """Merge bibliometric data onto a baseline publication list."""

    def __init__(
        self,
        sources: Sequence[BibliometricClient],
        *,
        timeout: float = 15.0,
        max_publications: int = DEFAULT_MAX_PUBLICATIONS,
    ):
        self.sources = list(sources)
        self.timeout = timeout
        self.max_publications = max_publications

    @staticmethod
    def _query_source(
        source: BibliometricClient, author_name: str
    ) -> Tuple[List[Publication], Optional[AuthorMetrics]]:
        return source.lookup(author_name)

    def enrich(
        self,
        author_name: str,
        base_publications: Sequence[Publication],
        base_total_citations: Optional[int] = None,
        base_h_index: Optional[int] = None,
    ) -> EnrichmentResult:
        """
        Enrich ``base_publications`` for ``author_name``.

        Never raises because of a source: if every source fails the base data
        comes back unchanged with an empty ``sources_used``. The caller's
        publication objects are not modified.
        """
        publications = [replace(p) for p in base_publications]
        total = _known(base_total_citations)
        h = _known(base_h_index)
        sources_used: List[str] = []

        name = (author_name or "").strip()
        if name and self.sources:
            logger.info(f"Enriching data for {name} from {len(self.sources)} source(s)...")
            outcomes = settle_all(
                [partial(self._query_source, source, name) for source in self.sources],
                timeout=self.timeout,
            )

            for source, outcome in zip(self.sources, outcomes):
                if not outcome.ok:
                    logger.warning(f"{source.name} unavailable for {name}: {outcome.error}")
                    continue
                found, author_metrics = outcome.value
                changed = False

                if author_metrics is not None:
                    if total is None and _known(author_metrics.citation_count) is not None:
                        total = author_metrics.citation_count
                        changed = True
                    if h is None and _known(author_metrics.h_index) is not None:
                        h = author_metrics.h_index
                        changed = True

                if found:
                    if not publications:
                        publications = [replace(p) for p in dedupe_by_title(found)[: source.seed_limit]]
                        changed = bool(publications)
                        logger.info(f"Seeded {len(publications)} publications from {source.name}")
                    else:
                        enriched = 0
                        for pub in publications:
                            candidate = match(pub, found, source.match_threshold)
                            if candidate is not None and _merge_into(pub, candidate):
                                enriched += 1
                        if enriched:
                            changed = True
                            logger.info(f"{source.name} enriched {enriched} publications")

                if changed and source.name not in sources_used:
                    sources_used.append(source.name)

        counts = [p.citations for p in publications]
        if total is None:
            total = total_citations(counts)
        if h is None and total_citations(counts) is not None:
            h = h_index(c for c in counts if c is not None)

        logger.info(f"Enrichment complete for {name}. Enhanced with: {', '.join(sources_used) or 'none'}")
        return EnrichmentResult(
            publications=publications[: self.max_publications],
            total_citations=total,
            h_index=h,
            sources_used=sources_used,
        )
