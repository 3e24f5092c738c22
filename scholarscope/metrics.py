"""Citation metrics derived from per-publication counts."""
from __future__ import annotations

from typing import Iterable, List, Optional


def h_index(citation_counts: Iterable[int]) -> int:
    """Largest h such that at least h publications have >= h citations."""
    ordered = sorted((c for c in citation_counts if c is not None), reverse=True)
    h = 0
    for i, count in enumerate(ordered, start=1):
        if count >= i:
            h = i
        else:
            break
    return h


def total_citations(citation_counts: Iterable[Optional[int]]) -> Optional[int]:
    """Sum of known counts, or ``None`` unless at least one count is a known positive value.

    Unknown entries contribute 0 to the sum.
    """
    known: List[int] = [c for c in citation_counts if c is not None]
    if not any(c > 0 for c in known):
        return None
    return sum(known)
