"""scholarscope.sources.base
~~~~~~~~~~~~~~~~~~~~~~~~~~~
Shared plumbing for bibliometric sources.

▸ RateLimiter
    Courtesy spacing: a minimum interval between two calls to the same source.

▸ BibliometricClient
    Author-name search with a response cache keyed by the normalized name.
    Each client owns a requests session whose adapter retries 429/5xx and
    connection errors with exponential backoff and jitter (urllib3 ``Retry``);
    other 4xx are not retried. Failures degrade to an empty result, never an
    exception: enrichment must not fail a request.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..cache import TTLCache
from ..config import USER_AGENT
from ..matching import HIGH_CONFIDENCE_THRESHOLD
from ..models import AuthorMetrics, Publication

logger = logging.getLogger(__name__)

RETRY_STATUSES = [429, 500, 502, 503, 504]


def normalize_author_key(name: str) -> str:
    return " ".join((name or "").lower().split())


def create_retry_session(
    max_attempts: int = 3, backoff_factor: float = 0.5, backoff_jitter: float = 0.5
) -> requests.Session:
    """Session that retries transient failures up to ``max_attempts`` calls in total."""
    session = requests.Session()
    retries = max(0, max_attempts - 1)

    retry_strategy = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=backoff_factor,
        backoff_jitter=backoff_jitter,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=["GET"],
        respect_retry_after_header=True,
        raise_on_status=False,  # the last response comes back, we check its status
    )

    adapter = HTTPAdapter(max_retries=retry_strategy, pool_connections=5, pool_maxsize=10)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class RateLimiter:
    """Enforce a minimum interval between calls, across threads."""

    def __init__(
        self,
        min_interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._next_slot = 0.0
        self._lock = threading.Lock()

    def wait(self) -> None:
        # Reserve a slot under the lock, sleep outside it
        with self._lock:
            now = self._clock()
            slot = max(now, self._next_slot)
            self._next_slot = slot + self.min_interval
        delay = slot - now
        if delay > 0:
            self._sleep(delay)


class BibliometricClient:
    """Base class for a citation/publication source searched by author name."""

    name = "unknown"
    match_threshold = HIGH_CONFIDENCE_THRESHOLD
    seed_limit = 20
    url = ""
    # Sources that report author-level totals override _parse_author_metrics
    reports_author_metrics = False

    def __init__(
        self,
        cache: TTLCache,
        *,
        min_interval: float = 1.0,
        timeout: float = 8.0,
        max_attempts: int = 3,
        backoff_base: float = 0.5,
        backoff_jitter: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.cache = cache
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.session = create_retry_session(self.max_attempts, backoff_base, backoff_jitter)
        self.rate_limiter = RateLimiter(min_interval, sleep=sleep)

    # -- subclass hooks -----------------------------------------------------

    def _request_params(self, author_name: str) -> Dict[str, Any]:
        raise NotImplementedError

    def _headers(self) -> Dict[str, str]:
        return {"Accept": "application/json", "User-Agent": USER_AGENT}

    def _parse_publications(self, payload: Dict[str, Any], author_name: str) -> List[Publication]:
        raise NotImplementedError

    def _parse_author_metrics(self, payload: Dict[str, Any], author_name: str) -> Optional[AuthorMetrics]:
        return None

    # -- public API ---------------------------------------------------------

    def lookup(self, author_name: str) -> Tuple[List[Publication], Optional[AuthorMetrics]]:
        """
        Publications and author-level totals for ``author_name`` from one fetch.

        Returns
        -------
        tuple
            ``(publications, metrics)``; ``([], None)`` on any failure.
        """
        payload = self._author_payload(author_name)
        if payload is None:
            return [], None
        return self._publications_from(payload, author_name), self._metrics_from(payload, author_name)

    def search_by_author(self, author_name: str) -> List[Publication]:
        """Publications attributed to ``author_name``; empty on any failure."""
        payload = self._author_payload(author_name)
        if payload is None:
            return []
        return self._publications_from(payload, author_name)

    def author_metrics(self, author_name: str) -> Optional[AuthorMetrics]:
        """Author-level totals when the source reports them for a confident name match."""
        if not self.reports_author_metrics:
            return None
        payload = self._author_payload(author_name)
        if payload is None:
            return None
        return self._metrics_from(payload, author_name)

    # -- internals ----------------------------------------------------------

    def _publications_from(self, payload: Dict[str, Any], author_name: str) -> List[Publication]:
        try:
            publications = self._parse_publications(payload, author_name)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"{self.name}: could not parse response for {author_name!r}: {e}")
            return []
        logger.info(f"{self.name} found {len(publications)} works for {author_name}")
        return publications

    def _metrics_from(self, payload: Dict[str, Any], author_name: str) -> Optional[AuthorMetrics]:
        if not self.reports_author_metrics:
            return None
        try:
            return self._parse_author_metrics(payload, author_name)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"{self.name}: could not parse author metrics for {author_name!r}: {e}")
            return None

    def _author_payload(self, author_name: str) -> Optional[Dict[str, Any]]:
        key = normalize_author_key(author_name)
        if not key:
            return None
        return self.cache.get_or_compute(
            (self.name, key),
            lambda: self._get_json(self._request_params(author_name)),
            should_store=lambda payload: payload is not None,
        )

    def _get_json(self, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """GET ``self.url`` through the retry session; None when the call ultimately fails."""
        self.rate_limiter.wait()
        try:
            response = self.session.get(self.url, params=params, headers=self._headers(), timeout=self.timeout)
        except requests.exceptions.Timeout:
            logger.warning(f"{self.name}: timed out after {self.max_attempts} attempt(s)")
            return None
        except requests.exceptions.RequestException as e:
            logger.warning(f"{self.name}: network error after {self.max_attempts} attempt(s): {e}")
            return None

        status = response.status_code
        if status == 200:
            try:
                return response.json()
            except ValueError:
                logger.warning(f"{self.name}: response is not JSON")
                return None
        if status in RETRY_STATUSES:
            logger.warning(f"{self.name}: giving up with status {status} after {self.max_attempts} attempt(s)")
        else:
            logger.warning(f"{self.name}: client error {status}, not retrying")
        return None
