"""Tests for the profile builder."""

from __future__ import annotations

import pytest

from scholarscope.cache import TTLCache
from scholarscope.enrichment import EnrichmentOrchestrator
from scholarscope.errors import NotFound, UpstreamError, UpstreamTimeout
from scholarscope.models import AuthorMetrics, Publication
from scholarscope.profile import ProfileBuilder

from tests.conftest import FakeSource, person_payload, work_summary, works_payload

ORCID = "0000-0002-1825-0097"


def _builder(registry, config, sources=()):
    return ProfileBuilder(
        registry,
        EnrichmentOrchestrator(list(sources)),
        profile_cache=TTLCache("profile", 1800),
        config=config,
        sleep=lambda _: None,
    )


@pytest.fixture
def populated(registry):
    registry.persons[ORCID] = person_payload(
        "Josiah", "Carberry", "US", ["psychoceramics"], email="josiah@example.edu"
    )
    registry.persons[ORCID]["biography"] = {"content": "Studies cracked pots."}
    registry.employments[ORCID] = {"affiliation-group": [
        {"summaries": [{"employment-summary": {
            "organization": {"name": "Brown University"},
            "role-title": "Professor",
            "start-date": {"year": {"value": "2001"}, "month": {"value": "9"}},
        }}]},
        {"summaries": [{"employment-summary": {
            "organization": {"name": "Wesleyan University"},
            "start-date": {"year": {"value": "2010"}},
        }}]},
    ]}
    registry.educations[ORCID] = {"affiliation-group": [
        {"summaries": [{"education-summary": {
            "organization": {"name": "MIT"},
            "role-title": "PhD",
            "end-date": {"year": {"value": "1999"}},
        }}]},
    ]}
    registry.works[ORCID] = works_payload(
        work_summary("The Fractal Nature of Cracks", 11, 2005),
        work_summary("Psychoceramics Revisited", 12, 2012, doi="10.5555/12345678"),
    )
    registry.details[(ORCID, 11)] = {
        "title": {"title": {"value": "The Fractal Nature of Cracks"}},
        "journal-title": {"value": "Journal of Pottery"},
        "publication-date": {"year": {"value": "2005"}},
    }
    # put-code 12 has no detail record: the summary must be used instead
    return registry


def test_unknown_id_raises_not_found(registry, config) -> None:
    builder = _builder(registry, config)
    with pytest.raises(NotFound):
        builder.get_profile("0000-0000-0000-0000")
    assert len(builder.profile_cache) == 0
    assert registry.calls["work_detail"] == 0


def test_malformed_id_is_rejected(registry, config) -> None:
    with pytest.raises(ValueError):
        _builder(registry, config).get_profile("not-an-orcid")
    assert registry.calls["person"] == 0


def test_person_failure_other_than_404_propagates(registry, config) -> None:
    registry.persons[ORCID] = UpstreamTimeout("slow")
    with pytest.raises(UpstreamError):
        _builder(registry, config).get_profile(ORCID)


def test_profile_assembly(populated, config) -> None:
    profile = _builder(populated, config).get_profile(f"https://orcid.org/{ORCID}")

    assert profile.registry_id == ORCID
    assert profile.display_name == "Josiah Carberry"
    assert profile.country == "US"
    assert profile.email == "josiah@example.edu"
    assert profile.biography == "Studies cracked pots."
    assert profile.keywords == ("psychoceramics",)
    assert [e.organization for e in profile.employments] == ["Wesleyan University", "Brown University"]
    assert profile.employments[1].start_date == "2001/09"
    assert profile.educations[0].degree == "PhD"
    assert profile.educations[0].year == "1999"

    fractal, revisited = profile.publications
    assert fractal.venue == "Journal of Pottery"
    assert revisited.title == "Psychoceramics Revisited"
    assert revisited.doi == "10.5555/12345678"
    assert revisited.year == 2012
    assert profile.total_citations is None
    assert profile.enhanced_with == ()


def test_optional_sections_degrade_to_empty(populated, config) -> None:
    populated.employments[ORCID] = UpstreamError("boom", status=500)
    populated.works[ORCID] = UpstreamTimeout("slow")

    profile = _builder(populated, config).get_profile(ORCID)

    assert profile.employments == ()
    assert profile.publications == ()
    assert profile.educations[0].organization == "MIT"


def test_profile_is_enriched_once(populated, config) -> None:
    source = FakeSource(
        "Semantic Scholar",
        {"Josiah Carberry": [Publication(title="The fractal nature of cracks", citations=21)]},
        {"Josiah Carberry": AuthorMetrics(name="Josiah Carberry", citation_count=100, h_index=3)},
    )
    profile = _builder(populated, config, [source]).get_profile(ORCID)

    assert source.calls["Josiah Carberry"] == 1
    assert profile.publications[0].citations == 21
    assert profile.total_citations == 100
    assert profile.h_index == 3
    assert profile.enhanced_with == ("Semantic Scholar",)


def test_second_call_within_ttl_hits_cache(populated, config) -> None:
    builder = _builder(populated, config)

    first = builder.get_profile(ORCID)
    second = builder.get_profile(ORCID)

    assert second is first
    assert second.to_dict() == first.to_dict()
    assert populated.calls["person"] == 1
    assert populated.calls["works"] == 1
