"""Shared fakes for the registry and the bibliometric sources."""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from scholarscope.config import ScholarScopeConfig
from scholarscope.errors import NotFound
from scholarscope.models import AuthorMetrics, Publication


def person_payload(
    given: str = "",
    family: str = "",
    country: Optional[str] = None,
    keywords: Sequence[str] = (),
    email: Optional[str] = None,
) -> Dict[str, Any]:
    person: Dict[str, Any] = {
        "name": {
            "given-names": {"value": given} if given else None,
            "family-name": {"value": family} if family else None,
        },
        "addresses": {"address": [{"country": {"value": country}}] if country else []},
        "keywords": {"keyword": [{"content": k} for k in keywords]},
    }
    if email:
        person["emails"] = {"email": [{"email": email}]}
    return person


def work_summary(title: str, put_code: int, year: int = 2020, doi: Optional[str] = None) -> Dict[str, Any]:
    summary: Dict[str, Any] = {
        "put-code": put_code,
        "title": {"title": {"value": title}},
        "publication-date": {"year": {"value": str(year)}},
    }
    if doi:
        summary["external-ids"] = {
            "external-id": [{"external-id-type": "doi", "external-id-value": doi}]
        }
    return summary


def works_payload(*summaries: Dict[str, Any]) -> Dict[str, Any]:
    return {"group": [{"work-summary": [s]} for s in summaries]}


class FakeRegistry:
    """In-memory stand-in for :class:`RegistryClient` with call counters.

    ``search_results`` is consumed one entry per ``search`` call (the last
    entry repeats); an entry that is an exception instance is raised.
    """

    def __init__(self):
        self.persons: Dict[str, Any] = {}
        self.works: Dict[str, Any] = {}
        self.employments: Dict[str, Any] = {}
        self.educations: Dict[str, Any] = {}
        self.details: Dict[Any, Any] = {}
        self.search_results: List[Any] = [[]]
        self.calls: Counter = Counter()
        self.queries: List[str] = []

    @staticmethod
    def _answer(value: Any, orcid_id: str) -> Any:
        if isinstance(value, Exception):
            raise value
        if value is None:
            raise NotFound(f"ORCID record not found: {orcid_id}")
        return value

    def search(self, query, *, rows=100, start=0, timeout=None):
        self.calls["search"] += 1
        self.queries.append(query)
        index = min(self.calls["search"], len(self.search_results)) - 1
        result = self.search_results[index]
        if isinstance(result, Exception):
            raise result
        return [{"orcid_id": oid, "score": score, "raw": {}} for oid, score in result]

    def get_person(self, orcid_id, *, timeout=None):
        self.calls["person"] += 1
        return self._answer(self.persons.get(orcid_id), orcid_id)

    def get_works(self, orcid_id, *, timeout=None):
        self.calls["works"] += 1
        return self._answer(self.works.get(orcid_id, {"group": []}), orcid_id)

    def get_employments(self, orcid_id, *, timeout=None):
        self.calls["employments"] += 1
        return self._answer(self.employments.get(orcid_id, {}), orcid_id)

    def get_educations(self, orcid_id, *, timeout=None):
        self.calls["educations"] += 1
        return self._answer(self.educations.get(orcid_id, {}), orcid_id)

    def get_work_detail(self, orcid_id, put_code, *, timeout=None):
        self.calls["work_detail"] += 1
        return self._answer(self.details.get((orcid_id, put_code)), orcid_id)


class FakeSource:
    """Duck-typed bibliometric source returning canned data per author name."""

    def __init__(
        self,
        name: str,
        publications: Optional[Dict[str, List[Publication]]] = None,
        metrics: Optional[Dict[str, AuthorMetrics]] = None,
        *,
        error: Optional[Exception] = None,
        match_threshold: float = 0.8,
        seed_limit: int = 20,
    ):
        self.name = name
        self.publications = publications or {}
        self.metrics = metrics or {}
        self.error = error
        self.match_threshold = match_threshold
        self.seed_limit = seed_limit
        self.calls: Counter = Counter()

    def search_by_author(self, author_name: str) -> List[Publication]:
        self.calls[author_name] += 1
        if self.error is not None:
            raise self.error
        return list(self.publications.get(author_name, []))

    def author_metrics(self, author_name: str) -> Optional[AuthorMetrics]:
        if self.error is not None:
            raise self.error
        return self.metrics.get(author_name)

    def lookup(self, author_name: str) -> Tuple[List[Publication], Optional[AuthorMetrics]]:
        return self.search_by_author(author_name), self.author_metrics(author_name)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def config() -> ScholarScopeConfig:
    return ScholarScopeConfig(candidate_batch_delay=0.0, work_batch_delay=0.0)
