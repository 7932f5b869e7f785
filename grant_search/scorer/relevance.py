"""Query relevance scoring for ranking search results.

Pure and deterministic for a fixed `now`; the score is recomputed on every
search and never persisted.
"""

import re
from datetime import date, datetime, time, timezone
from typing import Iterable, List, Optional

from ..models.opportunity import NormalizedOpportunity
from .weights import RELEVANCE_WEIGHTS, RelevanceWeights


def query_terms(query: Optional[str], min_length: int = RELEVANCE_WEIGHTS.min_term_length) -> List[str]:
    """Lower-cased whitespace-split terms, dropping terms of length <= 2."""
    return [term.lower() for term in (query or "").split() if len(term) >= min_length]


def _as_utc(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def deadline_in_future(deadline_date: Optional[str], now: Optional[datetime] = None) -> bool:
    """True when the ISO deadline (midnight UTC) is strictly after `now`."""
    if not deadline_date:
        return False
    try:
        deadline = date.fromisoformat(deadline_date)
    except ValueError:
        return False
    return datetime.combine(deadline, time.min, tzinfo=timezone.utc) > _as_utc(now)


def score_relevance(
    opportunity: NormalizedOpportunity,
    query: Optional[str],
    now: Optional[datetime] = None,
    weights: RelevanceWeights = RELEVANCE_WEIGHTS,
) -> int:
    title = (opportunity.title or "").lower()
    agency = (opportunity.agency or "").lower()
    description = (opportunity.description or "").lower()

    score = 0
    for term in query_terms(query, weights.min_term_length):
        if term in title:
            score += weights.title
            if re.search(rf"\b{re.escape(term)}\b", title):
                score += weights.title_whole_word
        if term in agency:
            score += weights.agency
        occurrences = description.count(term)
        if occurrences:
            extra = min(weights.description_repeat_cap, (occurrences - 1) * weights.description_repeat)
            score += weights.description + extra

    if opportunity.amount is not None:
        score += weights.has_amount
    if deadline_in_future(opportunity.deadline_date, now):
        score += weights.future_deadline
    return score


def rank_by_relevance(
    opportunities: Iterable[NormalizedOpportunity],
    query: Optional[str],
    now: Optional[datetime] = None,
) -> List[NormalizedOpportunity]:
    """Copies of `opportunities` with relevance_score set, input order kept."""
    now = _as_utc(now)
    return [
        opp.model_copy(update={"relevance_score": score_relevance(opp, query, now)})
        for opp in opportunities
    ]
