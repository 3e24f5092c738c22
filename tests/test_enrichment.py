"""Tests for the enrichment orchestrator."""

from __future__ import annotations

import time

from scholarscope.enrichment import EnrichmentOrchestrator
from scholarscope.errors import UpstreamError
from scholarscope.models import AuthorMetrics, Publication

from tests.conftest import FakeSource

AUTHOR = "Maria Silva"


def _base():
    return [
        Publication(title="Soil carbon dynamics in tropical forests", year=2019, source="ORCID"),
        Publication(title="Coral reef resilience under warming", year=2021, source="ORCID"),
    ]


def test_all_sources_failing_returns_base_unchanged() -> None:
    sources = [
        FakeSource("Semantic Scholar", error=UpstreamError("down")),
        FakeSource("CrossRef", error=RuntimeError("parse")),
    ]
    base = _base()
    result = EnrichmentOrchestrator(sources).enrich(AUTHOR, base, 0, 0)

    assert result.publications == base
    assert result.sources_used == []
    assert result.total_citations is None
    assert result.h_index is None


def test_matches_fill_missing_citations_and_record_source() -> None:
    source = FakeSource("CrossRef", {AUTHOR: [
        Publication(title="Soil Carbon Dynamics in Tropical Forests.", citations=12, doi="10.1/abc"),
        Publication(title="Unrelated quantum paper", citations=99),
    ]})
    result = EnrichmentOrchestrator([source]).enrich(AUTHOR, _base())

    soil, coral = result.publications
    assert soil.citations == 12
    assert soil.doi == "10.1/abc"
    assert coral.citations is None
    assert result.sources_used == ["CrossRef"]
    assert result.total_citations == 12
    assert result.h_index == 1


def test_known_positive_count_is_never_overwritten() -> None:
    base = [Publication(title="Soil carbon dynamics in tropical forests", citations=30)]
    source = FakeSource("Semantic Scholar", {AUTHOR: [
        Publication(title="Soil carbon dynamics in tropical forests", citations=5),
    ]})
    result = EnrichmentOrchestrator([source]).enrich(AUTHOR, base)

    assert result.publications[0].citations == 30
    assert result.sources_used == []


def test_first_source_keeps_its_value_when_both_match() -> None:
    first = FakeSource("Semantic Scholar", {AUTHOR: [
        Publication(title="Coral reef resilience under warming", citations=8),
    ]})
    second = FakeSource("CrossRef", {AUTHOR: [
        Publication(title="Coral reef resilience under warming", citations=11),
    ]})
    result = EnrichmentOrchestrator([first, second]).enrich(AUTHOR, _base())

    assert result.publications[1].citations == 8
    assert result.sources_used == ["Semantic Scholar"]


def test_empty_base_is_seeded_from_first_non_empty_source() -> None:
    empty = FakeSource("Semantic Scholar")
    seeding = FakeSource("CrossRef", {AUTHOR: [
        Publication(title=f"Paper number {i}", citations=i) for i in range(20)
    ]}, seed_limit=15)
    result = EnrichmentOrchestrator([empty, seeding]).enrich(AUTHOR, [])

    assert len(result.publications) == 15
    assert result.sources_used == ["CrossRef"]
    assert result.total_citations == sum(range(15))


def test_author_metrics_fill_unknown_totals() -> None:
    source = FakeSource(
        "Semantic Scholar",
        metrics={AUTHOR: AuthorMetrics(name=AUTHOR, citation_count=420, h_index=9)},
    )
    result = EnrichmentOrchestrator([source]).enrich(AUTHOR, _base())

    assert result.total_citations == 420
    assert result.h_index == 9
    assert result.sources_used == ["Semantic Scholar"]


def test_known_base_totals_are_kept() -> None:
    source = FakeSource(
        "Semantic Scholar",
        metrics={AUTHOR: AuthorMetrics(name=AUTHOR, citation_count=420, h_index=9)},
    )
    result = EnrichmentOrchestrator([source]).enrich(AUTHOR, _base(), 100, 4)

    assert (result.total_citations, result.h_index) == (100, 4)


def test_caller_publications_are_not_mutated() -> None:
    base = _base()
    source = FakeSource("CrossRef", {AUTHOR: [
        Publication(title="Soil carbon dynamics in tropical forests", citations=12),
    ]})
    EnrichmentOrchestrator([source]).enrich(AUTHOR, base)
    assert base[0].citations is None


def test_publication_list_is_capped() -> None:
    base = [Publication(title=f"Distinct title number {i}") for i in range(60)]
    result = EnrichmentOrchestrator([], max_publications=50).enrich(AUTHOR, base)
    assert len(result.publications) == 50


def test_slow_source_is_time_boxed() -> None:
    class SlowSource(FakeSource):
        def search_by_author(self, author_name):
            time.sleep(0.5)
            return super().search_by_author(author_name)

    slow = SlowSource("Semantic Scholar", {AUTHOR: [
        Publication(title="Soil carbon dynamics in tropical forests", citations=50),
    ]})
    fast = FakeSource("CrossRef", {AUTHOR: [
        Publication(title="Coral reef resilience under warming", citations=7),
    ]})
    result = EnrichmentOrchestrator([slow, fast], timeout=0.1).enrich(AUTHOR, _base())

    assert result.sources_used == ["CrossRef"]
    assert result.publications[0].citations is None


def test_enrich_is_deterministic() -> None:
    def make():
        return EnrichmentOrchestrator([
            FakeSource("Semantic Scholar", {AUTHOR: [
                Publication(title="Soil carbon dynamics in tropical forests", citations=12),
            ]}),
            FakeSource("CrossRef", {AUTHOR: [
                Publication(title="Coral reef resilience under warming", citations=3),
            ]}),
        ])

    first = make().enrich(AUTHOR, _base(), 0, 0)
    second = make().enrich(AUTHOR, _base(), 0, 0)
    assert (first.total_citations, first.h_index) == (second.total_citations, second.h_index) == (15, 2)
