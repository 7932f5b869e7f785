"""Matching pipeline: score opportunities against saved profiles and persist matches."""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from ..deduplicator import Deduplicator
from ..errors import ProfileNotFound
from ..models.grant_match import GrantMatch
from ..models.opportunity import NormalizedOpportunity
from ..models.profile import OrganizationProfile, OrganizationType
from ..scorer.match import score_match
from ..scorer.weights import MATCH_THRESHOLD

logger = logging.getLogger(__name__)

PREVIEW_LIMIT = 20
PREVIEW_PROFILE_ID = "preview"

# Used when no store is configured so the matcher can still be exercised
PREVIEW_PROFILE = OrganizationProfile(
    id=PREVIEW_PROFILE_ID,
    email="preview@example.com",
    organization_name="Preview Organization",
    organization_type=OrganizationType.NONPROFIT,
    state="CA",
    focus_areas=["education", "technology"],
    keywords=["stem", "innovation"],
    min_amount=0,
)


@dataclass
class MatchRunSummary:
    profiles_processed: int = 0
    total_matches: int = 0
    errors: List[str] = field(default_factory=list)
    preview: bool = False
    matches: List[GrantMatch] = field(default_factory=list)


def match_profile(
    profile: OrganizationProfile,
    opportunities: Iterable[NormalizedOpportunity],
    threshold: int = MATCH_THRESHOLD,
) -> List[GrantMatch]:
    """GrantMatch rows for every opportunity scoring at or above `threshold`."""
    profile_id = profile.id or PREVIEW_PROFILE_ID
    matches = []
    for opp in opportunities:
        if not opp.source_record_id:
            continue
        result = score_match(opp, profile)
        if result.score >= threshold:
            matches.append(GrantMatch.from_opportunity(profile_id, opp, result))
    return matches


def preview_matches(
    opportunities: Iterable[NormalizedOpportunity],
    threshold: int = MATCH_THRESHOLD,
    limit: int = PREVIEW_LIMIT,
) -> List[GrantMatch]:
    matches = match_profile(PREVIEW_PROFILE, opportunities, threshold)
    return sorted(matches, key=lambda m: m.score, reverse=True)[:limit]


def run_matching(
    opportunities: Iterable[NormalizedOpportunity],
    store: Optional[Any] = None,
    profile_id: Optional[str] = None,
    threshold: int = MATCH_THRESHOLD,
) -> MatchRunSummary:
    """Score opportunities against one or every notifiable profile.

    Without a store, runs in preview mode against PREVIEW_PROFILE and returns
    the best matches without persisting anything. A failure for one profile
    is recorded and the run continues with the next.

    Raises:
        ProfileNotFound: if `profile_id` is given and no such profile exists.
    """
    # One row per (profile, grant, source); a batch upsert rejects repeated conflict keys
    opportunities = Deduplicator().deduplicate(o for o in opportunities if o.source_record_id)

    if store is None:
        matches = preview_matches(opportunities, threshold)
        logger.info("match_run mode=preview opportunities=%d matches=%d", len(opportunities), len(matches))
        return MatchRunSummary(profiles_processed=1, total_matches=len(matches), preview=True, matches=matches)

    if profile_id:
        profile = store.get_profile(profile_id)
        if profile is None:
            raise ProfileNotFound(f"Profile not found: {profile_id}")
        profiles = [profile]
    else:
        profiles = store.list_notifiable_profiles()

    summary = MatchRunSummary()
    for profile in profiles:
        try:
            matches = match_profile(profile, opportunities, threshold)
            if matches:
                store.upsert_matches(matches)
            summary.total_matches += len(matches)
            summary.profiles_processed += 1
            logger.info("match_profile profile=%s matches=%d", profile.id, len(matches))
        except Exception as exc:
            logger.error("match_profile profile=%s result=failure error=%s", profile.id, exc)
            summary.errors.append(f"Profile {profile.id}: {exc}")

    logger.info(
        "match_run mode=store profiles=%d matches=%d errors=%d",
        summary.profiles_processed,
        summary.total_matches,
        len(summary.errors),
    )
    return summary
