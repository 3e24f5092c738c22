"""scholarscope.aggregate
~~~~~~~~~~~~~~~~~~~~~~~
Service wiring for the scholarscope aggregation layer.

``build_service`` assembles one process-wide :class:`ResearcherService`: a
shared token provider and registry client, one TTL cache per cache kind, the
bibliometric sources, the enrichment orchestrator, and the search and
profile components on top of them.

A small CLI is included:

    scholarscope search "Maria Silva" --country BR
    scholarscope search "machine learning, ecology" --type keywords
    scholarscope profile 0000-0002-1825-0097

Public entry-point:
    build_service(config=None) -> ResearcherService
"""
from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, List, Optional

import pandas as pd

from .cache import TTLCache
from .config import ScholarScopeConfig, get_config, get_log_level
from .enrichment import EnrichmentOrchestrator
from .errors import AuthError, NotFound, UpstreamError
from .models import ResearcherCandidate, ResearcherProfile
from .profile import ProfileBuilder
from .search import SearchAggregator
from .sources import CrossRefClient, RegistryClient, SemanticScholarClient, TokenProvider
from .utils import setup_logging


class ResearcherService:
    """Facade exposing the two operations offered to callers."""

    def __init__(self, searcher: SearchAggregator, profiles: ProfileBuilder):
        self.searcher = searcher
        self.profiles = profiles

    def search(self, query: str, search_type: str = "name", country: Optional[str] = None) -> List[ResearcherCandidate]:
        return self.searcher.search(query, search_type, country)

    def get_profile(self, registry_id: str) -> ResearcherProfile:
        return self.profiles.get_profile(registry_id)


def build_sources(config: ScholarScopeConfig, cache: TTLCache) -> list:
    """Bibliometric sources in merge order."""
    common: Dict[str, Any] = {
        "timeout": config.source_timeout,
        "max_attempts": config.source_max_attempts,
        "backoff_base": config.source_backoff_base,
        "backoff_jitter": config.source_backoff_jitter,
    }
    return [
        SemanticScholarClient(
            cache,
            api_key=config.semantic_scholar_api_key,
            min_interval=config.semantic_scholar_min_interval,
            **common,
        ),
        CrossRefClient(
            cache,
            contact_email=config.contact_email,
            min_interval=config.crossref_min_interval,
            **common,
        ),
    ]


def build_service(config: Optional[ScholarScopeConfig] = None) -> ResearcherService:
    """
    Wire the aggregation layer.

    Parameters
    ----------
    config : ScholarScopeConfig, optional
        Defaults to :func:`config.get_config` (environment and ``.env``).

    Returns
    -------
    ResearcherService
        Ready to serve; no network call happens until the first request.
    """
    config = config or get_config()

    token_provider = TokenProvider(
        config.orcid_client_id,
        config.orcid_client_secret,
        token_url=config.orcid_token_url,
        safety_margin=config.token_safety_margin,
        timeout=config.token_timeout,
    )
    registry = RegistryClient(token_provider, base_url=config.orcid_api_base, default_timeout=config.search_timeout)

    source_cache = TTLCache("bibliometric", config.source_cache_ttl)
    enricher = EnrichmentOrchestrator(
        build_sources(config, source_cache),
        timeout=config.enrichment_timeout,
        max_publications=config.max_publications,
    )

    searcher = SearchAggregator(
        registry,
        enricher,
        person_cache=TTLCache("person", config.person_cache_ttl),
        search_cache=TTLCache("search", config.search_cache_ttl),
        config=config,
    )
    profiles = ProfileBuilder(
        registry,
        enricher,
        profile_cache=TTLCache("profile", config.profile_cache_ttl),
        config=config,
    )
    return ResearcherService(searcher, profiles)


def _display_candidates(candidates: List[ResearcherCandidate]) -> None:
    if not candidates:
        print("\n❌ No researchers found.")
        return

    print(f"\n✅ Found {len(candidates)} researchers.")
    pd.set_option("display.max_colwidth", 60)
    pd.set_option("display.width", 120)

    df = pd.DataFrame([c.to_dict() for c in candidates])
    df["keywords"] = df["keywords"].apply(lambda kws: ", ".join(kws[:3]))
    display_cols = ["rank", "name", "orcidId", "country", "citationCount", "publicationCount", "keywords"]
    print(df[display_cols].to_string(index=False))


def _display_profile(profile: ResearcherProfile) -> None:
    data = profile.to_dict()
    print(f"\n👤 {data['name']} ({data['orcidId']})")
    print(f"   📍 Country: {data['country']}")
    if data["email"]:
        print(f"   ✉️  Email: {data['email']}")
    if data["website"]:
        print(f"   🌐 Website: {data['website']}")
    print(f"   📈 Total citations: {data['totalCitations']}   h-index: {data['hIndex']}")
    if data["enhancedWith"]:
        print(f"   🔬 Enhanced with: {', '.join(data['enhancedWith'])}")

    if data["employments"]:
        print("\n--- Employments ---")
        print(pd.DataFrame(data["employments"]).to_string(index=False))

    if not data["publications"]:
        print("\n❌ No publications found.")
        return

    pd.set_option("display.max_colwidth", 80)
    pd.set_option("display.width", 120)
    df = pd.DataFrame(data["publications"])
    print(f"\n--- Publications ({len(df)}) ---")
    print(df[["year", "citations", "title", "doi"]].head(20).to_string(index=False))


def main(argv: Optional[List[str]] = None) -> None:
    """Command-line interface for the scholarscope aggregation layer."""
    parser = argparse.ArgumentParser(
        description="Search researchers and build aggregated researcher profiles.",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog="""
Examples:
  scholarscope search "Maria Silva" --country BR
  scholarscope search "ecology, genomics" --type keywords
  scholarscope profile 0000-0002-1825-0097
""",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (or SCHOLARSCOPE_LOG_LEVEL env var)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    search_parser = subparsers.add_parser("search", help="Search researchers by name or keywords")
    search_parser.add_argument("query", help="Name or keywords")
    search_parser.add_argument("--type", dest="search_type", choices=["name", "keywords"], default="name")
    search_parser.add_argument("--country", help="Country code (e.g. BR, US) or 'all'")

    profile_parser = subparsers.add_parser("profile", help="Show the aggregated profile for an ORCID iD")
    profile_parser.add_argument("orcid_id", help="ORCID iD")

    args = parser.parse_args(argv)
    setup_logging(args.log_level or get_log_level())

    service = build_service()
    try:
        if args.command == "search":
            _display_candidates(service.search(args.query, args.search_type, args.country))
        else:
            _display_profile(service.get_profile(args.orcid_id))
    except ValueError as e:
        print(f"\n❌ {e}")
        sys.exit(2)
    except AuthError as e:
        print(f"\n❌ Server configuration incomplete: {e}")
        sys.exit(1)
    except NotFound:
        print("\n❌ Researcher not found.")
        sys.exit(1)
    except UpstreamError as e:
        print(f"\n❌ {e}. Please try again in a moment.")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n⚠️ Process interrupted by user.")
        sys.exit(1)


if __name__ == "__main__":
    main()
