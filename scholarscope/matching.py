"""scholarscope.matching
~~~~~~~~~~~~~~~~~~~~~~~
Record Matcher: decides whether a bibliometric record describes the same work
as a registry publication, so its citation count can be attached without
creating a duplicate.

Titles are normalized (diacritics stripped, lowercased, punctuation removed,
so "state-of-the-art" becomes the single token "stateoftheart"),
split into tokens, and tokens of three characters or fewer are discarded. The
overlap score is ``|common| / max(|tokens_a|, |tokens_b|)``. Equal normalized
titles always match; otherwise the best-scoring candidate is accepted only
when its score reaches the source's threshold. Precision is favoured over
recall: a wrong citation count is worse than a missing one.
"""
from __future__ import annotations

import re
import unicodedata
from typing import List, Optional, Sequence, Set

from .models import Publication

HIGH_CONFIDENCE_THRESHOLD = 0.8
NOISY_SOURCE_THRESHOLD = 0.7
MIN_TOKEN_LENGTH = 4

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_title(title: Optional[str]) -> str:
    """Lowercase, strip diacritics and punctuation, collapse whitespace."""
    if not title:
        return ""
    nkfd = unicodedata.normalize("NFKD", title)
    latin = "".join(c for c in nkfd if not unicodedata.combining(c))
    text = _NON_ALNUM.sub("", latin.lower())
    return _WHITESPACE.sub(" ", text).strip()


def title_tokens(title: Optional[str]) -> Set[str]:
    return {t for t in normalize_title(title).split(" ") if len(t) >= MIN_TOKEN_LENGTH}


def title_overlap(title_a: Optional[str], title_b: Optional[str]) -> float:
    """Token overlap between two titles in [0, 1]."""
    tokens_a = title_tokens(title_a)
    tokens_b = title_tokens(title_b)
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / max(len(tokens_a), len(tokens_b))


def match(
    base: Publication,
    candidates: Sequence[Publication],
    threshold: float = HIGH_CONFIDENCE_THRESHOLD,
) -> Optional[Publication]:
    """Return the candidate that describes the same work as ``base``, or None.

    Declining to match (no candidate reaches ``threshold``) is the normal
    outcome for ambiguous records, not an error.
    """
    base_norm = normalize_title(base.title)
    if not base_norm:
        return None

    best: Optional[Publication] = None
    best_score = 0.0
    for candidate in candidates:
        cand_norm = normalize_title(candidate.title)
        if not cand_norm:
            continue
        if cand_norm == base_norm:
            return candidate
        score = title_overlap(base_norm, cand_norm)
        if score > best_score:
            best, best_score = candidate, score

    if best is not None and best_score >= threshold:
        return best
    return None


def dedupe_by_title(publications: Sequence[Publication]) -> List[Publication]:
    """Keep the first publication for each normalized title, preserving order."""
    seen: Set[str] = set()
    unique: List[Publication] = []
    for pub in publications:
        key = normalize_title(pub.title)
        if not key or key in seen:
            continue
        seen.add(key)
        unique.append(pub)
    return unique
