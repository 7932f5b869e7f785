"""Scoring weights for relevance ranking and profile matching.

Stored match scores are computed from these values; they are constants,
not runtime configuration.
"""

from pydantic import BaseModel


class RelevanceWeights(BaseModel):
    """Points per query term found in each opportunity field."""

    model_config = {"frozen": True}

    title: int = 10
    title_whole_word: int = 5
    agency: int = 5
    description: int = 2
    description_repeat: int = 1
    description_repeat_cap: int = 2
    has_amount: int = 2
    future_deadline: int = 3
    min_term_length: int = 3


class MatchWeights(BaseModel):
    """Points per match dimension; amount_penalty is subtracted."""

    model_config = {"frozen": True}

    focus_area: int = 30
    keyword: int = 25
    preferred_source: int = 15
    eligibility: int = 20
    geography: int = 10
    amount_penalty: int = 20
    max_score: int = 100


RELEVANCE_WEIGHTS = RelevanceWeights()
MATCH_WEIGHTS = MatchWeights()

# Pipeline policy, not part of the scorer contract
MATCH_THRESHOLD = 30
