"""Tests for the Flask JSON API."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from scholarscope.app import create_app
from scholarscope.errors import AuthError, NotFound, SearchFailed, UpstreamTimeout
from scholarscope.models import Publication, ResearcherCandidate, ResearcherProfile

ORCID = "0000-0002-1825-0097"


@pytest.fixture
def service() -> MagicMock:
    return MagicMock()


@pytest.fixture
def client(service):
    app = create_app(service)
    app.config["TESTING"] = True
    return app.test_client()


def test_search_returns_ranked_researchers(client, service) -> None:
    service.search.return_value = [
        ResearcherCandidate(registry_id=ORCID, display_name="Josiah Carberry", country="US",
                            citation_count=12, publication_count=None, rank=1),
    ]
    response = client.post("/api/search", json={"query": "Carberry", "type": "name", "country": "US"})

    assert response.status_code == 200
    body = response.get_json()
    assert body["researchers"][0]["orcidId"] == ORCID
    assert body["researchers"][0]["publicationCount"] == "-"
    service.search.assert_called_once_with("Carberry", "name", "US")


def test_search_without_json_is_rejected(client) -> None:
    response = client.post("/api/search", data="nope", content_type="text/plain")
    assert response.status_code == 400


def test_search_validation_error(client, service) -> None:
    service.search.side_effect = ValueError("Query is required")
    response = client.post("/api/search", json={"query": ""})
    assert response.status_code == 400
    assert response.get_json() == {"error": "Query is required"}


def test_search_failure_is_an_explicit_error_payload(client, service) -> None:
    service.search.side_effect = SearchFailed("Search failed: 503", status=503)
    response = client.post("/api/search", json={"query": "Carberry"})

    assert response.status_code == 502
    body = response.get_json()
    assert body["error"] == "Search failed"
    assert "try again" in body["message"]


def test_missing_credentials_are_a_configuration_error(client, service) -> None:
    service.search.side_effect = AuthError("ORCID credentials not configured")
    response = client.post("/api/search", json={"query": "Carberry"})

    assert response.status_code == 500
    assert response.get_json()["error"] == "Server configuration incomplete"


def test_profile_returns_aggregate(client, service) -> None:
    service.get_profile.return_value = ResearcherProfile(
        registry_id=ORCID,
        display_name="Josiah Carberry",
        publications=(Publication(title="Cracks", year=2005, citations=0),),
        total_citations=None,
    )
    response = client.get(f"/api/researcher/{ORCID}")

    assert response.status_code == 200
    body = response.get_json()
    assert body["name"] == "Josiah Carberry"
    assert body["publications"][0]["citations"] == 0
    assert body["totalCitations"] == "-"


def test_unknown_researcher_is_404(client, service) -> None:
    service.get_profile.side_effect = NotFound("no such id")
    response = client.get("/api/researcher/0000-0000-0000-0000")

    assert response.status_code == 404
    assert response.get_json() == {"error": "Researcher not found"}


def test_malformed_id_is_400(client, service) -> None:
    service.get_profile.side_effect = ValueError("Invalid ORCID ID format: 12")
    assert client.get("/api/researcher/12").status_code == 400


def test_profile_upstream_failure_is_retryable(client, service) -> None:
    service.get_profile.side_effect = UpstreamTimeout("timed out")
    response = client.get(f"/api/researcher/{ORCID}")
    assert response.status_code == 502


def test_unknown_route_is_json_404(client) -> None:
    response = client.get("/nowhere")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Not found"}
