"""scholarscope.profile
~~~~~~~~~~~~~~~~~~~~~~
Profile Builder: the full aggregated profile for one ORCID iD.

Person, employments, educations and works are fetched concurrently, each
with its own time box. Only the person record is required; the other
sections degrade to empty. Every work is detailed individually with a short
timeout and falls back to its summary fields rather than being dropped. The
publication list is enriched once and the assembled profile is cached.
"""
from __future__ import annotations

import logging
import time
from functools import partial
from typing import Any, Callable, Dict, List, Optional

from .cache import TTLCache
from .concurrency import Outcome, settle_all
from .config import ScholarScopeConfig
from .enrichment import EnrichmentOrchestrator
from .errors import NotFound, UpstreamError
from .matching import dedupe_by_title
from .models import Publication, ResearcherProfile
from .sources.orcid import (
    RegistryClient,
    extract_biography,
    extract_country,
    extract_display_name,
    extract_email,
    extract_keywords,
    extract_website,
    normalize_orcid_id,
    parse_educations,
    parse_employments,
    publication_from_work,
    work_summaries,
)

logger = logging.getLogger(__name__)


class ProfileBuilder:
    """Build and cache :class:`ResearcherProfile` snapshots."""

    def __init__(
        self,
        registry: RegistryClient,
        enricher: EnrichmentOrchestrator,
        *,
        profile_cache: TTLCache,
        config: Optional[ScholarScopeConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.registry = registry
        self.enricher = enricher
        self.profile_cache = profile_cache
        self.config = config or ScholarScopeConfig()
        self._sleep = sleep

    def get_profile(self, registry_id: str) -> ResearcherProfile:
        """
        Return the aggregated profile for ``registry_id``.

        Raises
        ------
        ValueError
            Malformed ORCID iD.
        NotFound
            The registry has no such record.
        AuthError, UpstreamError
            The person record could not be fetched.
        """
        orcid_id = normalize_orcid_id(registry_id)

        cached = self.profile_cache.get(orcid_id)
        if cached is not None:
            logger.info(f"Using cached detailed profile for {orcid_id}")
            return cached

        logger.info(f"Fetching detailed profile for ORCID ID: {orcid_id}")
        profile = self._build(orcid_id)
        self.profile_cache.set(orcid_id, profile)
        return profile

    def _build(self, orcid_id: str) -> ResearcherProfile:
        timeout = self.config.profile_timeout
        person_out, employments_out, educations_out, works_out = settle_all(
            [
                partial(self.registry.get_person, orcid_id, timeout=timeout),
                partial(self.registry.get_employments, orcid_id, timeout=timeout),
                partial(self.registry.get_educations, orcid_id, timeout=timeout),
                partial(self.registry.get_works, orcid_id, timeout=timeout),
            ],
            timeout=timeout,
        )

        if not person_out.ok:
            error = person_out.error
            logger.error(f"Profile request failed for {orcid_id}: {error}")
            if isinstance(error, NotFound):
                raise NotFound(f"Researcher not found: {orcid_id}") from error
            raise error

        person = person_out.value
        name = extract_display_name(person, fallback=orcid_id)
        limit = self.config.max_affiliations

        employments = parse_employments(self._section(employments_out, "employments", orcid_id), limit)
        educations = parse_educations(self._section(educations_out, "educations", orcid_id), limit)
        publications = self._publications(orcid_id, self._section(works_out, "works", orcid_id))
        logger.info(f"Extracted {len(publications)} publications from ORCID for {orcid_id}")

        enriched = self.enricher.enrich(name, publications)
        logger.info(f"Profile enriched with data from: {', '.join(enriched.sources_used) or 'ORCID only'}")

        return ResearcherProfile(
            registry_id=orcid_id,
            display_name=name,
            country=extract_country(person),
            email=extract_email(person),
            website=extract_website(person),
            keywords=tuple(extract_keywords(person, self.config.max_keywords)),
            publications=tuple(enriched.publications),
            total_citations=enriched.total_citations,
            h_index=enriched.h_index,
            biography=extract_biography(person),
            employments=tuple(employments),
            educations=tuple(educations),
            enhanced_with=tuple(enriched.sources_used),
        )

    @staticmethod
    def _section(outcome: Outcome, label: str, orcid_id: str) -> Dict[str, Any]:
        if outcome.ok and isinstance(outcome.value, dict):
            return outcome.value
        if not outcome.ok:
            logger.warning(f"ORCID {label} unavailable for {orcid_id}: {outcome.error}")
        return {}

    def _work_publication(self, orcid_id: str, summary: Dict[str, Any]) -> Publication:
        put_code = summary.get("put-code")
        detail = None
        if put_code is not None:
            try:
                detail = self.registry.get_work_detail(
                    orcid_id, put_code, timeout=self.config.work_detail_timeout
                )
            except UpstreamError as e:
                logger.debug(f"Failed to get detail for work {put_code}, using summary: {e}")
        return publication_from_work(detail, summary)

    def _publications(self, orcid_id: str, works: Dict[str, Any]) -> List[Publication]:
        summaries = work_summaries(works)[: self.config.max_works_detailed]
        batch_size = max(1, self.config.work_batch_size)
        publications: List[Publication] = []

        for start in range(0, len(summaries), batch_size):
            batch = summaries[start:start + batch_size]
            outcomes = settle_all([partial(self._work_publication, orcid_id, s) for s in batch])
            for summary, outcome in zip(batch, outcomes):
                # Unexpected failures still keep the summary-level record
                publications.append(outcome.value if outcome.ok else publication_from_work(None, summary))

            if start + batch_size < len(summaries):
                self._sleep(self.config.work_batch_delay)

        return dedupe_by_title(publications)
