"""ScholarScope: researcher search and profile aggregation.

ScholarScope searches the ORCID registry for researchers, enriches what it
finds with citation data from Semantic Scholar and CrossRef, and returns ranked
search results and aggregated researcher profiles.

Quick Start
-----------

```python
from scholarscope import build_service

# Reads ORCID_CLIENT_ID / ORCID_CLIENT_SECRET from the environment (or .env)
service = build_service()

for candidate in service.search("Maria Silva", country="BR")[:5]:
    print(candidate.rank, candidate.display_name, candidate.citation_count)

profile = service.get_profile("0000-0002-1825-0097")
print(profile.total_citations, profile.h_index, profile.enhanced_with)
```

Individual Component Usage
--------------------------

```python
from scholarscope.metrics import h_index
h_index([10, 8, 5, 4, 3])  # 4

from scholarscope.matching import match
match(base_publication, candidates, threshold=0.8)
```
"""

from .models import Publication, ResearcherCandidate, ResearcherProfile
from .aggregate import ResearcherService, build_service
from .config import get_config, ScholarScopeConfig
from .errors import AuthError, NotFound, ScholarScopeError, SearchFailed, UpstreamError, UpstreamTimeout
from .utils import setup_logging

# Source modules are available for direct import if needed
from . import sources

__version__ = "0.1.0"
__author__ = "ScholarScope Team"

__all__ = [
    # Core models
    "Publication",
    "ResearcherCandidate",
    "ResearcherProfile",

    # Service
    "ResearcherService",
    "build_service",

    # Errors
    "ScholarScopeError",
    "AuthError",
    "UpstreamError",
    "UpstreamTimeout",
    "NotFound",
    "SearchFailed",

    # Configuration
    "get_config",
    "ScholarScopeConfig",

    # Utilities
    "setup_logging",

    # Source modules
    "sources",
]
