"""Relevance and profile-match scoring for normalized opportunities."""

from .match import score_match
from .relevance import rank_by_relevance, score_relevance
from .taxonomy import (
    DEFAULT_TAXONOMY,
    Taxonomy,
    get_eligibility_keywords,
    get_focus_area_keywords,
    load_taxonomy,
    use_taxonomy,
)
from .weights import MATCH_THRESHOLD, MATCH_WEIGHTS, RELEVANCE_WEIGHTS, MatchWeights, RelevanceWeights

__all__ = [
    "score_match",
    "score_relevance",
    "rank_by_relevance",
    "DEFAULT_TAXONOMY",
    "Taxonomy",
    "get_eligibility_keywords",
    "get_focus_area_keywords",
    "load_taxonomy",
    "use_taxonomy",
    "MATCH_THRESHOLD",
    "MATCH_WEIGHTS",
    "RELEVANCE_WEIGHTS",
    "MatchWeights",
    "RelevanceWeights",
]
