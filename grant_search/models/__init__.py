"""Shared Pydantic models - contract between adapters, scorers, pipelines and the store."""

from .opportunity import (
    SOURCE_CATEGORIES,
    SOURCE_LABELS,
    Category,
    NormalizedOpportunity,
    SourceId,
    category_for,
)
from .profile import FocusArea, NotificationFrequency, OrganizationProfile, OrganizationType
from .grant_match import GrantMatch, MatchResult, MatchStatus
from .search import SearchResults, SortBy, SourceResult

__all__ = [
    "SOURCE_CATEGORIES",
    "SOURCE_LABELS",
    "Category",
    "NormalizedOpportunity",
    "SourceId",
    "category_for",
    "FocusArea",
    "NotificationFrequency",
    "OrganizationProfile",
    "OrganizationType",
    "GrantMatch",
    "MatchResult",
    "MatchStatus",
    "SearchResults",
    "SortBy",
    "SourceResult",
]
