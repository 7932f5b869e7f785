"""Aggregation & sort orchestrator."""

from .orchestrator import (
    aggregate,
    check_source_status,
    filter_by_category,
    partition_by_category,
    search_sources,
    sort_opportunities,
)

__all__ = [
    "aggregate",
    "check_source_status",
    "filter_by_category",
    "partition_by_category",
    "search_sources",
    "sort_opportunities",
]
