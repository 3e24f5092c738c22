"""
ScholarScope Configuration
~~~~~~~~~~~~~~~~~~~~~~~~~~
Credentials, timeouts, cache lifetimes and limits for the aggregation layer.

Credentials are read from environment variables (a local ``.env`` file is
loaded first). Nothing here talks to the network; missing registry
credentials only surface as an ``AuthError`` when a token is first needed.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

ORCID_API_BASE = "https://pub.orcid.org/v3.0"
ORCID_TOKEN_URL = "https://orcid.org/oauth/token"
USER_AGENT = "ScholarScope/1.0"


@dataclass
class ScholarScopeConfig:
    # Registry credentials
    orcid_client_id: Optional[str] = None
    orcid_client_secret: Optional[str] = None
    orcid_api_base: str = ORCID_API_BASE
    orcid_token_url: str = ORCID_TOKEN_URL
    token_safety_margin: float = 300.0
    token_timeout: float = 30.0

    # Bibliometric sources
    contact_email: Optional[str] = None
    semantic_scholar_api_key: Optional[str] = None
    source_timeout: float = 8.0
    source_max_attempts: int = 3
    source_backoff_base: float = 0.5
    source_backoff_jitter: float = 0.5
    semantic_scholar_min_interval: float = 1.0
    crossref_min_interval: float = 0.5

    # Registry timeouts (seconds)
    search_timeout: float = 8.0
    person_timeout: float = 3.0
    works_count_timeout: float = 10.0
    profile_timeout: float = 12.0
    work_detail_timeout: float = 8.0
    enrichment_timeout: float = 15.0

    # Cache lifetimes (seconds)
    person_cache_ttl: float = 20 * 60
    profile_cache_ttl: float = 30 * 60
    source_cache_ttl: float = 15 * 60
    search_cache_ttl: float = 10 * 60

    # Limits
    search_rows: int = 100
    max_hits_per_query: int = 50
    candidate_batch_size: int = 8
    candidate_batch_delay: float = 0.025
    general_search_threshold: int = 15
    max_results: int = 50
    max_keywords: int = 15
    max_affiliations: int = 10
    max_works_detailed: int = 50
    work_batch_size: int = 10
    work_batch_delay: float = 0.2
    search_works_sample: int = 20
    max_publications: int = 50


def get_config() -> ScholarScopeConfig:
    """
    Build the configuration from environment variables.

    Returns
    -------
    ScholarScopeConfig
        Defaults overridden by ``ORCID_CLIENT_ID``, ``ORCID_CLIENT_SECRET``,
        ``SCHOLARSCOPE_CONTACT_EMAIL`` and ``SEMANTIC_SCHOLAR_API_KEY``.
    """
    load_dotenv()
    return ScholarScopeConfig(
        orcid_client_id=os.environ.get("ORCID_CLIENT_ID") or None,
        orcid_client_secret=os.environ.get("ORCID_CLIENT_SECRET") or None,
        contact_email=os.environ.get("SCHOLARSCOPE_CONTACT_EMAIL") or None,
        semantic_scholar_api_key=os.environ.get("SEMANTIC_SCHOLAR_API_KEY") or None,
    )


def get_log_level() -> str:
    load_dotenv()
    return os.environ.get("SCHOLARSCOPE_LOG_LEVEL", "INFO").upper()


# Web interface settings
WEB_SETTINGS = {
    "default_host": "127.0.0.1",
    "default_port": 5000,
    "debug_mode": False,
}
