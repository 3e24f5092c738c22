"""scholarscope.search
~~~~~~~~~~~~~~~~~~~~~
Search Aggregator: free-text researcher search over the registry, ranked by
citation impact.

Per request:

▸ Cache check on (query, type, country); a fresh snapshot is returned as is.
▸ Strategy 1 (country given): a country-scoped registry query.
▸ Strategy 2: a general query when strategy 1 produced too few candidates;
  only unseen registry ids are processed.
▸ Fallback: one plain query when every strategy raised. If that fails too
  the search raises :class:`SearchFailed` so callers can tell "no matches"
  from "search failed".
▸ Candidates are processed in small concurrent batches: minimal profile
  (cached), country post-filter, then enrichment for citation and
  publication counts.
▸ Ranking by (citations desc, publications desc, discovery order), dense
  1-based ranks, truncated to the result cap, cached.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from functools import partial
from typing import Callable, List, Optional, Sequence, Set, Tuple

from .cache import TTLCache
from .concurrency import settle_all
from .config import ScholarScopeConfig
from .countries import is_country_match, normalize_country_filter
from .enrichment import EnrichmentOrchestrator
from .errors import SearchFailed, UpstreamError
from .matching import dedupe_by_title
from .models import ResearcherCandidate
from .query import (
    SEARCH_TYPES,
    Clause,
    country_scoped_query,
    general_query,
    plain_query,
    render,
)
from .sources.orcid import (
    RegistryClient,
    extract_country,
    extract_display_name,
    extract_keywords,
    publication_from_work,
    work_count,
    work_summaries,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PersonSummary:
    display_name: str
    country: str
    keywords: Tuple[str, ...]


def rank_candidates(candidates: Sequence[ResearcherCandidate], limit: int) -> List[ResearcherCandidate]:
    """Sort by (citations desc, publications desc, discovery order) and assign dense ranks.

    Unknown counts sort as 0.
    """
    ordered = sorted(
        enumerate(candidates),
        key=lambda item: (
            -(item[1].citation_count or 0),
            -(item[1].publication_count or 0),
            item[0],
        ),
    )
    return [replace(candidate, rank=rank) for rank, (_, candidate) in enumerate(ordered[:limit], start=1)]


def search_cache_key(query: str, search_type: str, country: Optional[str]) -> Tuple[str, str, str, str]:
    return ("search", " ".join(query.lower().split()), search_type, country or "all")


class SearchAggregator:
    """Researcher search combining registry queries with bibliometric enrichment."""

    def __init__(
        self,
        registry: RegistryClient,
        enricher: EnrichmentOrchestrator,
        *,
        person_cache: TTLCache,
        search_cache: TTLCache,
        config: Optional[ScholarScopeConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.registry = registry
        self.enricher = enricher
        self.person_cache = person_cache
        self.search_cache = search_cache
        self.config = config or ScholarScopeConfig()
        self._sleep = sleep

    def search(self, query: str, search_type: str = "name", country: Optional[str] = None) -> List[ResearcherCandidate]:
        """
        Search researchers by name or keywords, optionally filtered by country.

        Raises
        ------
        ValueError
            Empty query or unsupported search type.
        AuthError
            Registry credentials missing or rejected.
        SearchFailed
            No registry query succeeded.
        """
        if not query or not query.strip():
            raise ValueError("Query is required")
        if search_type not in SEARCH_TYPES:
            raise ValueError(f"Unsupported search type: {search_type!r}")

        query = query.strip()
        country_key = normalize_country_filter(country)
        cache_key = search_cache_key(query, search_type, country_key)

        cached = self.search_cache.get(cache_key)
        if cached is not None:
            logger.info(f"Cache hit for: {cache_key}")
            return list(cached)

        logger.info(f"Search: {query!r} ({search_type}) - Country: {country_key or 'all'}")
        candidates = self._run_strategies(query, search_type, country_key)
        ranked = rank_candidates(candidates, self.config.max_results)
        logger.info(f"Found {len(ranked)} researchers")

        self.search_cache.set(cache_key, tuple(ranked))
        return ranked

    # -- strategies -----------------------------------------------------------

    def _run_strategies(self, query: str, search_type: str, country: Optional[str]) -> List[ResearcherCandidate]:
        collected: List[ResearcherCandidate] = []
        seen: Set[str] = set()
        succeeded = False

        if country:
            try:
                collected.extend(self._execute(country_scoped_query(query, search_type, country), country, seen))
                succeeded = True
            except UpstreamError as e:
                logger.warning(f"Country-specific search failed, trying general search: {e}")

        if len(collected) < self.config.general_search_threshold:
            try:
                collected.extend(self._execute(general_query(query, search_type), country, seen))
                succeeded = True
            except UpstreamError as e:
                logger.warning(f"General search failed: {e}")

        if not succeeded:
            try:
                collected.extend(self._execute(plain_query(query, search_type), country, seen))
                succeeded = True
            except UpstreamError as e:
                logger.error(f"Fallback search failed: {e}")
                raise SearchFailed(f"Search failed: {e}", status=e.status) from e

        return collected

    def _execute(self, clause: Clause, country: Optional[str], seen: Set[str]) -> List[ResearcherCandidate]:
        """Run one registry query and process the hits not seen by an earlier strategy."""
        hits = self.registry.search(
            render(clause), rows=self.config.search_rows, timeout=self.config.search_timeout
        )
        # Most relevant first when the registry scores hits; stable otherwise
        hits = sorted(hits, key=lambda hit: -hit.get("score", 0.0))

        fresh: List[str] = []
        for hit in hits:
            orcid_id = hit["orcid_id"]
            if orcid_id in seen:
                continue
            seen.add(orcid_id)
            fresh.append(orcid_id)
            if len(fresh) >= self.config.max_hits_per_query:
                break

        return self._process_hits(fresh, country)

    # -- per-candidate processing ---------------------------------------------

    def _process_hits(self, orcid_ids: Sequence[str], country: Optional[str]) -> List[ResearcherCandidate]:
        batch_size = max(1, self.config.candidate_batch_size)
        candidates: List[ResearcherCandidate] = []

        for start in range(0, len(orcid_ids), batch_size):
            batch = orcid_ids[start:start + batch_size]
            outcomes = settle_all([partial(self._process_candidate, oid, country) for oid in batch])
            for orcid_id, outcome in zip(batch, outcomes):
                if not outcome.ok:
                    logger.warning(f"Error processing researcher {orcid_id}: {outcome.error}")
                elif outcome.value is not None:
                    candidates.append(outcome.value)

            if start + batch_size < len(orcid_ids):
                self._sleep(self.config.candidate_batch_delay)

        return candidates

    def _person_summary(self, orcid_id: str) -> PersonSummary:
        def fetch() -> PersonSummary:
            person = self.registry.get_person(orcid_id, timeout=self.config.person_timeout)
            return PersonSummary(
                display_name=extract_display_name(person, fallback=orcid_id),
                country=extract_country(person),
                keywords=tuple(extract_keywords(person, self.config.max_keywords)),
            )

        return self.person_cache.get_or_compute(("person", orcid_id), fetch)

    def _process_candidate(self, orcid_id: str, country: Optional[str]) -> Optional[ResearcherCandidate]:
        summary = self._person_summary(orcid_id)
        if country and not is_country_match(summary.country, country):
            return None

        citation_count, publication_count = self._publication_counts(orcid_id, summary.display_name)
        return ResearcherCandidate(
            registry_id=orcid_id,
            display_name=summary.display_name,
            country=summary.country,
            keywords=summary.keywords,
            citation_count=citation_count,
            publication_count=publication_count,
        )

    def _publication_counts(self, orcid_id: str, name: str) -> Tuple[Optional[int], Optional[int]]:
        registry_count: Optional[int] = None
        publications = []
        try:
            works = self.registry.get_works(orcid_id, timeout=self.config.works_count_timeout)
            registry_count = work_count(works)
            sample = work_summaries(works)[: self.config.search_works_sample]
            publications = dedupe_by_title([publication_from_work(None, s) for s in sample])
        except UpstreamError as e:
            logger.debug(f"ORCID works unavailable for {orcid_id}: {e}")

        # A display name that fell back to the id is useless to name-based sources
        if name == orcid_id:
            return None, registry_count or None

        result = self.enricher.enrich(name, publications)
        publication_count = registry_count or len(result.publications) or None
        return result.total_citations, publication_count
