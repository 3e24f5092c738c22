"""CrossRef works search by author, most-cited first."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..config import USER_AGENT
from ..matching import NOISY_SOURCE_THRESHOLD
from ..models import Publication, current_year
from .base import BibliometricClient


def _first(values: Any) -> Optional[str]:
    if isinstance(values, list) and values:
        return str(values[0]).strip() or None
    if isinstance(values, str):
        return values.strip() or None
    return None


def _published_year(item: Dict[str, Any]) -> Optional[int]:
    parts = (item.get("published") or {}).get("date-parts") or []
    try:
        return int(parts[0][0])
    except (IndexError, TypeError, ValueError):
        return None


class CrossRefClient(BibliometricClient):
    name = "CrossRef"
    # Titles differ more in formatting here (subtitles, markup)
    match_threshold = NOISY_SOURCE_THRESHOLD
    seed_limit = 15
    url = "https://api.crossref.org/works"

    def __init__(self, cache, *, contact_email: Optional[str] = None, **kwargs):
        super().__init__(cache, **kwargs)
        self.contact_email = contact_email

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        if self.contact_email:
            headers["User-Agent"] = f"{USER_AGENT} (mailto:{self.contact_email})"
        return headers

    def _request_params(self, author_name: str) -> Dict[str, Any]:
        return {
            "query.author": author_name,
            "rows": 10,
            "select": "title,published,container-title,is-referenced-by-count,DOI",
            "sort": "is-referenced-by-count",
            "order": "desc",
        }

    def _parse_publications(self, payload: Dict[str, Any], author_name: str) -> List[Publication]:
        items = (payload.get("message") or {}).get("items") or []
        publications = []
        for item in items:
            title = _first(item.get("title"))
            if not title:
                continue
            cites = item.get("is-referenced-by-count")
            publications.append(Publication(
                title=title,
                year=_published_year(item) or current_year(),
                venue=_first(item.get("container-title")),
                citations=cites if isinstance(cites, int) else None,
                doi=item.get("DOI"),
                source=self.name,
            ))
        return publications
