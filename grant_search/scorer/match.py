"""Profile match scoring: 0-100 fit score with ordered explanations.

Dimensions (points from MatchWeights):
1. Focus areas: +30 per area with any keyword hit, at most once per area
2. Custom keywords: +25 per keyword hit, uncapped
3. Preferred source: +15 when the profile lists the opportunity's source
4. Eligibility: +20 when organization-type keywords appear in the
   eligibility text, or when there is no eligibility text at all
5. Geography: +10 when the profile's state appears in the grant text
6. Amount range: -20 (floored at 0) when a known amount falls outside
   [min_amount, max_amount]

Never raises; an unset profile field means "no constraint".
"""

import re
from typing import List, Optional

from ..models.grant_match import MatchResult
from ..models.opportunity import NormalizedOpportunity
from ..models.profile import OrganizationProfile
from ..normalizer.money import parse_money
from .taxonomy import Taxonomy, active_taxonomy
from .weights import MATCH_WEIGHTS, MatchWeights


def grant_text(opportunity: NormalizedOpportunity) -> str:
    """Lower-cased title + description + agency + category text."""
    parts = [
        opportunity.title,
        opportunity.description,
        opportunity.agency,
        opportunity.category_text,
    ]
    return " ".join(p for p in parts if p).lower()


def eligibility_text(opportunity: NormalizedOpportunity) -> str:
    parts = [opportunity.eligibility_text, opportunity.description]
    return " ".join(p for p in parts if p).lower()


def _focus_area_hits(text: str, profile: OrganizationProfile, taxonomy: Taxonomy) -> List[str]:
    hits = []
    for area in profile.focus_areas:
        for keyword in taxonomy.focus_area_keywords(area):
            if keyword.lower() in text:
                hits.append(area)
                break
    return hits


def _is_eligible(opportunity: NormalizedOpportunity, org_type: str, taxonomy: Taxonomy) -> bool:
    text = eligibility_text(opportunity)
    if not text.strip():
        return True
    return any(keyword in text for keyword in taxonomy.eligibility_keywords(org_type))


def _state_matches(opportunity: NormalizedOpportunity, state: str, text: str, taxonomy: Taxonomy) -> bool:
    name = taxonomy.state_name(state)
    if name and name.lower() in text:
        return True

    code = taxonomy.state_code(state)
    if code:
        raw = " ".join(
            p for p in (opportunity.title, opportunity.description, opportunity.agency, opportunity.category_text) if p
        )
        if re.search(rf"\b{code}\b", raw):
            return True

    # Free-form value outside the state table
    return name is None and state.strip().lower() in text


def _amount_in_range(amount: float, profile: OrganizationProfile) -> bool:
    minimum = profile.min_amount or 0
    maximum = profile.max_amount
    return amount >= minimum and (maximum is None or amount <= maximum)


def score_match(
    opportunity: NormalizedOpportunity,
    profile: OrganizationProfile,
    taxonomy: Optional[Taxonomy] = None,
    weights: MatchWeights = MATCH_WEIGHTS,
) -> MatchResult:
    taxonomy = taxonomy or active_taxonomy()
    text = grant_text(opportunity)
    score = 0
    reasons: List[str] = []

    for area in _focus_area_hits(text, profile, taxonomy):
        score += weights.focus_area
        reasons.append(f"Matches {area} focus area")

    for keyword in profile.keywords:
        if keyword.lower() in text:
            score += weights.keyword
            reasons.append(f"Contains keyword: {keyword}")

    if profile.preferred_sources and opportunity.source in profile.preferred_sources:
        score += weights.preferred_source
        reasons.append(f"From preferred source: {opportunity.source.value}")

    if profile.organization_type and _is_eligible(opportunity, profile.organization_type.value, taxonomy):
        score += weights.eligibility
        reasons.append("Eligible for your organization type")

    if profile.state and profile.state.strip() and _state_matches(opportunity, profile.state, text, taxonomy):
        score += weights.geography
        reasons.append(f"Available in {profile.state.strip()}")

    amount = parse_money(opportunity.amount)
    if amount is not None and not _amount_in_range(amount, profile):
        score = max(0, score - weights.amount_penalty)

    return MatchResult(
        score=min(weights.max_score, round(score)),
        reasons=list(dict.fromkeys(reasons)),
    )
