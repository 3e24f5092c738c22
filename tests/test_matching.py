"""Tests for the record matcher."""

from __future__ import annotations

from scholarscope.matching import (
    HIGH_CONFIDENCE_THRESHOLD,
    NOISY_SOURCE_THRESHOLD,
    dedupe_by_title,
    match,
    normalize_title,
    title_overlap,
    title_tokens,
)
from scholarscope.models import Publication


def _pub(title: str, citations=None) -> Publication:
    return Publication(title=title, year=2020, citations=citations)


def test_normalize_title_strips_case_accents_and_punctuation() -> None:
    assert normalize_title("  Análise de Dados: um Estudo!  ") == "analise de dados um estudo"
    assert normalize_title("Graph-based  Learning") == "graphbased learning"
    assert normalize_title(None) == ""


def test_short_tokens_are_discarded() -> None:
    assert title_tokens("On the use of deep nets") == {"deep", "nets"}


def test_hyphenated_compounds_form_one_token() -> None:
    assert title_tokens("A state-of-the-art survey") == {"stateoftheart", "survey"}


def test_overlap_uses_the_larger_token_set() -> None:
    # 3 common tokens, larger set has 4
    assert title_overlap("alpha beta gamma delta", "alpha beta gamma") == 0.75


def test_identical_normalized_titles_always_match() -> None:
    base = _pub("Deep Learning for Soil Carbon")
    candidate = _pub("deep learning, for soil carbon!")
    assert match(base, [candidate], threshold=1.0) is candidate


def test_identical_short_titles_match_despite_no_scorable_tokens() -> None:
    base = _pub("On AI")
    candidate = _pub("on ai")
    assert match(base, [candidate], threshold=HIGH_CONFIDENCE_THRESHOLD) is candidate


def test_disjoint_titles_never_match() -> None:
    base = _pub("Coral reef resilience under warming")
    candidate = _pub("Quantum error correction with surface codes")
    assert match(base, [candidate], threshold=0.0) is None


def test_best_candidate_above_threshold_wins() -> None:
    base = _pub("Tropical forest carbon dynamics and drought response")
    weak = _pub("Tropical forest birds")
    strong = _pub("Tropical forest carbon dynamics and drought responses")
    # 5 of 6 scorable tokens shared
    assert match(base, [weak, strong], threshold=HIGH_CONFIDENCE_THRESHOLD) is strong


def test_below_threshold_declines() -> None:
    base = _pub("Tropical forest carbon dynamics and drought response")
    candidate = _pub("Tropical forest carbon stocks")
    assert match(base, [candidate], threshold=NOISY_SOURCE_THRESHOLD) is None


def test_empty_titles_never_match() -> None:
    assert match(_pub(""), [_pub("")]) is None
    assert match(_pub("Something measurable"), []) is None


def test_dedupe_by_title_keeps_first_occurrence() -> None:
    first = _pub("Soil Carbon", citations=1)
    second = _pub("soil carbon.", citations=2)
    other = _pub("Coral Reefs")
    assert dedupe_by_title([first, second, other]) == [first, other]
