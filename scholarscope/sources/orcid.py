"""scholarscope.sources.orcid
~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Registry client for the **scholarscope** aggregation layer.

▸ RegistryClient
    Authenticated, read-only access to the ORCID Public API v3.0: search,
    person, works, employments, educations and single-work detail. Every call
    carries its own timeout and fails with ``UpstreamTimeout``,
    ``UpstreamError`` or ``NotFound``; nothing is retried here, callers own
    the retry/degradation policy.

▸ Record helpers
    Pure functions that turn raw ORCID JSON into the canonical models
    (see models.Publication, models.Employment, models.Education).
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

import requests

from ..config import ORCID_API_BASE, USER_AGENT
from ..errors import AuthError, NotFound, UpstreamError, UpstreamTimeout
from ..models import UNKNOWN_COUNTRY, Education, Employment, Publication, current_year
from .orcid_auth import TokenProvider

logger = logging.getLogger(__name__)

__all__ = ["RegistryClient", "normalize_orcid_id"]

SOURCE_NAME = "ORCID"
UNTITLED = "Title not available"


# ---------------------------------------------------------------------------
# 1) ORCID API Client
# ---------------------------------------------------------------------------

def normalize_orcid_id(orcid_id: str) -> str:
    """Normalize an ORCID iD to ``####-####-####-###X``; raise ValueError if malformed."""
    if not orcid_id or not isinstance(orcid_id, str):
        raise ValueError("ORCID ID is required")
    orcid_id = orcid_id.strip()
    orcid_id = re.sub(r"^(https?://)?(www\.)?orcid\.org/", "", orcid_id)
    orcid_id = re.sub(r"[^\dX\-]", "", orcid_id.upper())

    # Add hyphens if missing
    if len(orcid_id) == 16 and "-" not in orcid_id:
        orcid_id = f"{orcid_id[:4]}-{orcid_id[4:8]}-{orcid_id[8:12]}-{orcid_id[12:16]}"

    if not re.match(r"^\d{4}-\d{4}-\d{4}-\d{3}[\dX]$", orcid_id):
        raise ValueError(f"Invalid ORCID ID format: {orcid_id}")
    return orcid_id


class RegistryClient:
    """ORCID Public API client using a shared :class:`TokenProvider`."""

    def __init__(
        self,
        token_provider: TokenProvider,
        *,
        base_url: str = ORCID_API_BASE,
        default_timeout: float = 8.0,
    ):
        self.token_provider = token_provider
        self.base_url = base_url.rstrip("/")
        self.default_timeout = default_timeout

    def _make_request(
        self,
        endpoint: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Make an authenticated GET request and return the decoded JSON body."""
        access_token = self.token_provider.get_access_token()
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {access_token}",
            "User-Agent": USER_AGENT,
        }
        url = f"{self.base_url}/{endpoint}"
        timeout = timeout or self.default_timeout

        try:
            response = requests.get(url, headers=headers, params=params, timeout=timeout)
        except requests.exceptions.Timeout as e:
            raise UpstreamTimeout(f"ORCID request timed out after {timeout}s: {endpoint}") from e
        except requests.exceptions.RequestException as e:
            raise UpstreamError(f"ORCID API request failed: {e}") from e

        if response.status_code == 404:
            raise NotFound(f"ORCID record not found: {endpoint}")
        if response.status_code == 401:
            self.token_provider.invalidate()
            raise AuthError("ORCID API authentication failed. Check your client credentials.")
        if response.status_code != 200:
            raise UpstreamError(f"ORCID API error: {response.status_code}", status=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"ORCID API returned invalid JSON for {endpoint}") from e

    def search(
        self,
        query: str,
        *,
        rows: int = 100,
        start: int = 0,
        timeout: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        """Run a registry search; return ``[{"orcid_id", "score", "raw"}]`` in registry order."""
        logger.debug(f"ORCID search: {query}")
        data = self._make_request(
            "search/", params={"q": query, "rows": rows, "start": start}, timeout=timeout
        )
        entries = data.get("result") or []
        if isinstance(entries, dict):
            entries = [entries]

        hits = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            orcid_id = (entry.get("orcid-identifier") or {}).get("path")
            if not orcid_id:
                continue
            score = entry.get("score")
            hits.append({
                "orcid_id": orcid_id,
                "score": float(score) if isinstance(score, (int, float)) else 0.0,
                "raw": entry,
            })
        logger.info(f"ORCID search returned {len(hits)} hits")
        return hits

    def get_person(self, orcid_id: str, *, timeout: Optional[float] = None) -> Dict[str, Any]:
        return self._make_request(f"{orcid_id}/person", timeout=timeout)

    def get_works(self, orcid_id: str, *, timeout: Optional[float] = None) -> Dict[str, Any]:
        return self._make_request(f"{orcid_id}/works", timeout=timeout)

    def get_employments(self, orcid_id: str, *, timeout: Optional[float] = None) -> Dict[str, Any]:
        return self._make_request(f"{orcid_id}/employments", timeout=timeout)

    def get_educations(self, orcid_id: str, *, timeout: Optional[float] = None) -> Dict[str, Any]:
        return self._make_request(f"{orcid_id}/educations", timeout=timeout)

    def get_work_detail(self, orcid_id: str, put_code: Any, *, timeout: Optional[float] = None) -> Dict[str, Any]:
        return self._make_request(f"{orcid_id}/work/{put_code}", timeout=timeout)


# ---------------------------------------------------------------------------
# 2) Record helpers
# ---------------------------------------------------------------------------

def _value(obj: Any, *path: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing."""
    for key in path:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def _text(obj: Any, *path: str) -> Optional[str]:
    value = _value(obj, *path)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _list(obj: Any, *path: str) -> List[Any]:
    value = _value(obj, *path)
    if isinstance(value, dict):
        return [value]
    return value if isinstance(value, list) else []


def extract_display_name(person: Dict[str, Any], fallback: str) -> str:
    given = _text(person, "name", "given-names", "value") or ""
    family = _text(person, "name", "family-name", "value") or ""
    full = f"{given} {family}".strip()
    return full or _text(person, "name", "credit-name", "value") or fallback


def extract_country(person: Dict[str, Any]) -> str:
    addresses = _list(person, "addresses", "address")
    if addresses:
        return _text(addresses[0], "country", "value") or UNKNOWN_COUNTRY
    return UNKNOWN_COUNTRY


def extract_keywords(person: Dict[str, Any], limit: int) -> List[str]:
    keywords = []
    for keyword in _list(person, "keywords", "keyword"):
        content = _text(keyword, "content")
        if content:
            keywords.append(content)
    return keywords[:limit]


def extract_email(person: Dict[str, Any]) -> Optional[str]:
    emails = _list(person, "emails", "email")
    return _text(emails[0], "email") if emails else None


def extract_website(person: Dict[str, Any]) -> Optional[str]:
    urls = _list(person, "researcher-urls", "researcher-url")
    return _text(urls[0], "url", "value") if urls else None


def extract_biography(person: Dict[str, Any]) -> Optional[str]:
    return _text(person, "biography", "content")


def format_date(date_obj: Any) -> Optional[str]:
    """ORCID fuzzy date -> ``YYYY/MM`` or ``YYYY``."""
    year = _text(date_obj, "year", "value")
    if not year:
        return None
    month = _text(date_obj, "month", "value")
    return f"{year}/{month.zfill(2)}" if month else year


def _affiliation_summaries(payload: Dict[str, Any], kind: str) -> List[Dict[str, Any]]:
    key = f"{kind}-summary"
    summaries: List[Dict[str, Any]] = []
    for group in _list(payload, "affiliation-group"):
        for summary in _list(group, "summaries"):
            item = _value(summary, key)
            if isinstance(item, dict):
                summaries.append(item)
    # Older record layout exposes the summaries directly
    summaries.extend(s for s in _list(payload, key) if isinstance(s, dict))
    return summaries


def _date_sort_key(date_obj: Any):
    year = _text(date_obj, "year", "value")
    month = _text(date_obj, "month", "value")
    try:
        return (int(year), int(month) if month else 0)
    except (TypeError, ValueError):
        return (0, 0)


def parse_employments(payload: Dict[str, Any], limit: int) -> List[Employment]:
    """Employments, most recent first."""
    summaries = _affiliation_summaries(payload, "employment")
    summaries.sort(key=lambda s: _date_sort_key(s.get("start-date")), reverse=True)
    employments = []
    for emp in summaries[:limit]:
        employments.append(Employment(
            organization=_text(emp, "organization", "name") or "Organization not informed",
            role=_text(emp, "role-title"),
            start_date=format_date(emp.get("start-date")),
            end_date=format_date(emp.get("end-date")),
        ))
    return employments


def parse_educations(payload: Dict[str, Any], limit: int) -> List[Education]:
    educations = []
    for edu in _affiliation_summaries(payload, "education")[:limit]:
        educations.append(Education(
            organization=_text(edu, "organization", "name") or "Institution not informed",
            degree=_text(edu, "role-title"),
            year=_text(edu, "end-date", "year", "value"),
        ))
    return educations


def work_summaries(works_payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    """First summary of each work group, in registry order."""
    summaries = []
    for group in _list(works_payload, "group"):
        group_summaries = _list(group, "work-summary")
        if group_summaries and isinstance(group_summaries[0], dict):
            summaries.append(group_summaries[0])
    return summaries


def work_count(works_payload: Dict[str, Any]) -> int:
    return len(_list(works_payload, "group"))


def extract_doi(work: Dict[str, Any]) -> Optional[str]:
    for ext_id in _list(work, "external-ids", "external-id"):
        if (_text(ext_id, "external-id-type") or "").lower() == "doi":
            doi = _text(ext_id, "external-id-value")
            if doi:
                return doi
    return None


def _year(work: Dict[str, Any]) -> Optional[int]:
    year = _text(work, "publication-date", "year", "value")
    try:
        return int(year) if year else None
    except ValueError:
        return None


def publication_from_work(detail: Optional[Dict[str, Any]], summary: Dict[str, Any]) -> Publication:
    """Build a Publication from a work detail, falling back to its summary field by field."""
    detail = detail or {}
    title = (
        _text(detail, "title", "title", "value")
        or _text(summary, "title", "title", "value")
        or UNTITLED
    )
    return Publication(
        title=title,
        year=_year(detail) or _year(summary) or current_year(),
        venue=_text(detail, "journal-title", "value") or _text(summary, "journal-title", "value"),
        citations=None,
        doi=extract_doi(detail) or extract_doi(summary),
        source=SOURCE_NAME,
    )
