"""ScholarScope Sources

Adapters for the external systems the aggregation layer talks to: the ORCID
registry (with its OAuth token provider) and the bibliometric sources.
"""

from . import crossref
from . import orcid
from . import semantic_scholar
from .crossref import CrossRefClient
from .orcid import RegistryClient
from .orcid_auth import TokenProvider
from .semantic_scholar import SemanticScholarClient

__all__ = [
    "crossref",
    "orcid",
    "semantic_scholar",
    "CrossRefClient",
    "RegistryClient",
    "SemanticScholarClient",
    "TokenProvider",
]
