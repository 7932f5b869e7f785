"""Per-source search results and the combined search response."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .opportunity import Category, NormalizedOpportunity, SourceId


class SortBy(str, Enum):
    RELEVANCE = "relevance"
    DEADLINE = "deadline"
    POSTED = "posted"
    AMOUNT = "amount"


class SourceResult(BaseModel):
    """Outcome of one source for one query page.

    A failed source has an empty `opportunities` list and a source-scoped
    `error`. Pagination is per source; there is no global page count.
    """

    source: SourceId
    opportunities: List[NormalizedOpportunity] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 0
    total_pages: int = 0
    total_is_estimate: bool = False
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, source: SourceId, error: str, kind: str = "upstream_error", page: int = 1) -> "SourceResult":
        return cls(source=source, error=error, error_kind=kind, page=page)

    def page_info(self) -> Dict[str, object]:
        return {
            "page": self.page,
            "page_size": self.page_size,
            "total": self.total,
            "total_pages": self.total_pages,
            "estimated": self.total_is_estimate,
        }


class SearchResults(BaseModel):
    """Combined response for one keyword across every queried source."""

    query: str
    page: int = 1
    results: Dict[SourceId, SourceResult] = Field(default_factory=dict)
    searched_at: Optional[datetime] = None

    @property
    def errors(self) -> Dict[SourceId, str]:
        return {source: r.error for source, r in self.results.items() if r.error}

    @property
    def pagination(self) -> Dict[SourceId, Dict[str, object]]:
        return {source: r.page_info() for source, r in self.results.items()}

    @property
    def total_results(self) -> int:
        return sum(r.total for r in self.results.values())

    def opportunities(
        self,
        sort_by: SortBy = SortBy.RELEVANCE,
        category: Optional[Category] = None,
        now: Optional[datetime] = None,
    ) -> List[NormalizedOpportunity]:
        """Merged, ranked and sorted opportunities across every source."""
        from ..aggregator.orchestrator import aggregate

        per_source = {source: r.opportunities for source, r in self.results.items()}
        return aggregate(per_source, sort_by=sort_by, query=self.query, now=now, category=category)
