"""scholarscope.query
~~~~~~~~~~~~~~~~~~~~
Registry query construction.

Queries are built as a small clause tree (:class:`Term`, :class:`Range`,
:class:`And`, :class:`Or`) and rendered to the ORCID search syntax
(Solr/Lucene) only at the client boundary by :func:`render`.

▸ Name queries
    "Maria Silva" -> family name "Silva", given names "Maria", each matched as
    an exact phrase or a prefix wildcard. A single name is tried as either
    family or given name. Very common single names get a recency filter on
    the profile submission date to keep the hit list manageable.

▸ Keyword queries
    Several comma/space separated keywords are ORed as quoted phrases.

▸ Country scoping
    ``(name or keyword clause) AND (any affiliation field mentions a country
    variant)``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from .countries import query_variants

NAME = "name"
KEYWORDS = "keywords"
SEARCH_TYPES = (NAME, KEYWORDS)

PHRASE = "phrase"
PREFIX = "prefix"
CONTAINS = "contains"

VERY_COMMON_NAMES = frozenset([
    "maria silva", "jose silva", "john smith", "mary johnson",
    "maria", "jose", "john", "mary", "silva", "smith",
])
RECENCY_FIELD = "profile-submission-date"
RECENCY_START = "2010-01-01"

AFFILIATION_FIELDS = ("affiliation-org-name", "current-institution-affiliation-name")

_SOLR_SPECIAL = re.compile(r'([+\-!(){}\[\]^"~*?:\\/&|])')


@dataclass(frozen=True)
class Term:
    field: Optional[str]
    value: str
    mode: str = PHRASE


@dataclass(frozen=True)
class Range:
    field: str
    lower: str
    upper: str = "*"


@dataclass(frozen=True)
class And:
    clauses: Tuple["Clause", ...]


@dataclass(frozen=True)
class Or:
    clauses: Tuple["Clause", ...]


Clause = Union[Term, Range, And, Or]


def all_of(*clauses: Clause) -> Clause:
    return clauses[0] if len(clauses) == 1 else And(tuple(clauses))


def any_of(*clauses: Clause) -> Clause:
    return clauses[0] if len(clauses) == 1 else Or(tuple(clauses))


def _escape(value: str) -> str:
    return _SOLR_SPECIAL.sub(r"\\\1", value)


def _render_term(term: Term) -> str:
    if term.mode == PHRASE:
        body = '"' + term.value.replace("\\", "\\\\").replace('"', '\\"') + '"'
    elif term.mode == PREFIX:
        body = _escape(term.value) + "*"
    elif term.mode == CONTAINS:
        body = "*" + _escape(term.value) + "*"
    else:
        raise ValueError(f"Unknown term mode: {term.mode}")
    return f"{term.field}:{body}" if term.field else body


def render(clause: Clause) -> str:
    """Render a clause tree to the registry's textual query syntax."""
    if isinstance(clause, Term):
        return _render_term(clause)
    if isinstance(clause, Range):
        return f"{clause.field}:[{clause.lower} TO {clause.upper}]"
    if isinstance(clause, (And, Or)):
        joiner = " AND " if isinstance(clause, And) else " OR "
        parts = []
        for child in clause.clauses:
            text = render(child)
            parts.append(f"({text})" if isinstance(child, (And, Or)) else text)
        return joiner.join(parts)
    raise TypeError(f"Not a query clause: {clause!r}")


def is_very_common_name(query: str) -> bool:
    return query.strip().lower() in VERY_COMMON_NAMES


def _phrase_or_prefix(field: str, value: str) -> Clause:
    tokens = value.split()
    prefix = all_of(*(Term(field, t, PREFIX) for t in tokens))
    return any_of(Term(field, value, PHRASE), prefix)


def name_clause(query: str, *, recency_filter: bool = True) -> Clause:
    parts = [p for p in query.strip().split() if len(p) > 1]
    if not parts:
        parts = query.strip().split()
    if not parts:
        raise ValueError("Query is required")

    if len(parts) > 1:
        given = " ".join(parts[:-1])
        family = parts[-1]
        return And((
            _phrase_or_prefix("family-name", family),
            _phrase_or_prefix("given-names", given),
        ))

    single = parts[0]
    clause: Clause = Or((
        Term("family-name", single, PHRASE),
        Term("family-name", single, PREFIX),
        Term("given-names", single, PHRASE),
        Term("given-names", single, PREFIX),
    ))
    if recency_filter and is_very_common_name(single):
        clause = And((clause, Range(RECENCY_FIELD, RECENCY_START)))
    return clause


def keyword_clause(query: str) -> Clause:
    keywords = [k for k in re.split(r"[,\s]+", query.strip()) if len(k) > 2]
    if len(keywords) > 1:
        return Or(tuple(Term(None, k, PHRASE) for k in keywords))
    text = query.strip()
    if not text:
        raise ValueError("Query is required")
    return Term(None, text, PHRASE)


def base_clause(query: str, search_type: str, *, recency_filter: bool = True) -> Clause:
    if search_type == KEYWORDS:
        return keyword_clause(query)
    if search_type == NAME:
        return name_clause(query, recency_filter=recency_filter)
    raise ValueError(f"Unsupported search type: {search_type!r}")


def country_clause(country: str) -> Clause:
    terms: List[Clause] = []
    for variant in query_variants(country):
        for field in AFFILIATION_FIELDS:
            terms.append(Term(field, variant, PHRASE))
            if " " not in variant:
                terms.append(Term(field, variant, CONTAINS))
    return Or(tuple(terms))


def country_scoped_query(query: str, search_type: str, country: str) -> Clause:
    return And((base_clause(query, search_type), country_clause(country)))


def general_query(query: str, search_type: str) -> Clause:
    return base_clause(query, search_type)


def plain_query(query: str, search_type: str) -> Clause:
    """Last-resort query: the bare name/keyword clause without extra filters."""
    return base_clause(query, search_type, recency_filter=False)
