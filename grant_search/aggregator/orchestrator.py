"""Aggregation and sorting across sources, plus the concurrent search fan-out."""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..adapters import ADAPTER_CLASSES, BaseAdapter
from ..config.config import Config
from ..deduplicator import Deduplicator
from ..errors import InvalidUserInput
from ..models.opportunity import Category, NormalizedOpportunity, SourceId, category_for
from ..models.search import SearchResults, SortBy, SourceResult
from ..scorer.relevance import rank_by_relevance

logger = logging.getLogger(__name__)

FAR_FUTURE = "9999-12-31"
EPOCH = "1970-01-01"


def sort_opportunities(
    opportunities: Sequence[NormalizedOpportunity], sort_by: SortBy = SortBy.RELEVANCE
) -> List[NormalizedOpportunity]:
    """Stable sort; ties keep their input order.

    relevance: score desc. deadline: asc, missing last. posted: desc,
    missing last. amount: desc, missing as 0.
    """
    sort_by = SortBy(sort_by)
    if sort_by == SortBy.RELEVANCE:
        return sorted(opportunities, key=lambda o: o.relevance_score, reverse=True)
    if sort_by == SortBy.DEADLINE:
        return sorted(opportunities, key=lambda o: o.deadline_date or FAR_FUTURE)
    if sort_by == SortBy.POSTED:
        return sorted(opportunities, key=lambda o: o.posted_date or EPOCH, reverse=True)
    return sorted(opportunities, key=lambda o: o.amount if o.amount is not None else 0.0, reverse=True)


def filter_by_category(
    opportunities: Iterable[NormalizedOpportunity], category: Optional[Category]
) -> List[NormalizedOpportunity]:
    """Keep only opportunities whose source belongs to `category` (None keeps all)."""
    if category is None:
        return list(opportunities)
    category = Category(category)
    return [o for o in opportunities if category_for(o.source) == category]


def aggregate(
    per_source_results: Mapping[SourceId, Iterable[NormalizedOpportunity]],
    sort_by: SortBy = SortBy.RELEVANCE,
    query: Optional[str] = "",
    now: Optional[datetime] = None,
    category: Optional[Category] = None,
) -> List[NormalizedOpportunity]:
    """Merge per-source lists into one ranked, sorted list.

    Records from different sources are never merged with each other; a
    repeated (source, id) within the input keeps its first occurrence.
    """
    merged: List[NormalizedOpportunity] = []
    for opportunities in per_source_results.values():
        for opp in opportunities or []:
            if opp.source_record_id:
                merged.append(opp)

    unique = Deduplicator().deduplicate(merged)
    ranked = rank_by_relevance(unique, query, now)
    return filter_by_category(sort_opportunities(ranked, sort_by), category)


def partition_by_category(
    opportunities: Iterable[NormalizedOpportunity],
) -> Dict[Category, List[NormalizedOpportunity]]:
    """Group an already-sorted list into category tabs, order preserved."""
    tabs: Dict[Category, List[NormalizedOpportunity]] = {c: [] for c in Category}
    for opp in opportunities:
        tabs[category_for(opp.source)].append(opp)
    return tabs


async def _bounded_search(adapter: BaseAdapter, query: str, page: int) -> SourceResult:
    try:
        return await asyncio.wait_for(adapter.safe_search(query, page), timeout=adapter.budget_seconds)
    except asyncio.TimeoutError:
        logger.error(
            "fetch_complete source=%s result=failure kind=timeout budget_s=%.0f",
            adapter.source_name,
            adapter.budget_seconds,
        )
        return SourceResult.failed(
            adapter.source,
            f"{adapter.label} search timed out - try a more specific search term or try again later",
            "unavailable",
            page=page,
        )


async def search_sources(adapters: Sequence[BaseAdapter], query: str, page: int = 1) -> SearchResults:
    """Search every adapter concurrently and collect per-source results.

    A best-effort gather: each source is bounded by its own time budget and
    a failing source contributes an empty list plus an error entry.

    Raises:
        InvalidUserInput: if `query` is empty, before any upstream call.
    """
    query = (query or "").strip()
    if not query:
        raise InvalidUserInput("Keyword is required")

    start = time.monotonic()
    outcomes = await asyncio.gather(
        *(_bounded_search(adapter, query, page) for adapter in adapters),
        return_exceptions=True,
    )

    results: Dict[SourceId, SourceResult] = {}
    for adapter, outcome in zip(adapters, outcomes):
        if isinstance(outcome, BaseException):
            if isinstance(outcome, InvalidUserInput):
                raise outcome
            logger.error("search source=%s unexpected error=%s", adapter.source_name, outcome)
            outcome = SourceResult.failed(adapter.source, f"Failed to fetch from {adapter.label}", page=page)
        results[adapter.source] = outcome

    logger.info(
        "search_complete query=%r sources=%d failed=%d duration_ms=%.0f",
        query,
        len(results),
        sum(1 for r in results.values() if r.error),
        (time.monotonic() - start) * 1000,
    )
    return SearchResults(query=query, page=page, results=results, searched_at=datetime.now(timezone.utc))


def check_source_status(config: Config) -> Dict[SourceId, Dict[str, str]]:
    """Configuration status per source: configured, missing_key or disabled."""
    enabled = set(config.sources)
    keys = {
        SourceId.SAM_GOV: config.sam_api_key,
        SourceId.REGULATIONS: config.regulations_api_key,
    }
    status: Dict[SourceId, Dict[str, str]] = {}
    for source in SourceId:
        adapter_cls = ADAPTER_CLASSES[source]
        if source not in enabled:
            state = "disabled"
        elif adapter_cls.requires_api_key and not keys.get(source):
            state = "missing_key"
        else:
            state = "configured"
        status[source] = {"status": state, "category": category_for(source).value}
    return status
