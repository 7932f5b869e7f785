"""Profile matching pipeline."""

from .pipeline import PREVIEW_PROFILE, MatchRunSummary, match_profile, preview_matches, run_matching

__all__ = ["PREVIEW_PROFILE", "MatchRunSummary", "match_profile", "preview_matches", "run_matching"]
