"""NIH RePORTER adapters - POST /v2/projects/search.

Federal RePORTER was retired; its search runs against the same NIH endpoint
restricted to non-NIH HHS agencies.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..models.opportunity import SourceId
from .base import BaseAdapter, as_int, as_list, dig

FISCAL_YEARS_BACK = 4

FEDERAL_REPORTER_AGENCIES = ["CDC", "AHRQ", "FDA", "SAMHSA", "HRSA", "ACF", "CMS"]


def recent_fiscal_years(now: Optional[datetime] = None) -> List[int]:
    year = (now or datetime.now(timezone.utc)).year
    return [year - offset for offset in range(FISCAL_YEARS_BACK + 1)]


class NihReporterAdapter(BaseAdapter):
    source = SourceId.NIH
    API_URL = "https://api.reporter.nih.gov/v2/projects/search"
    method = "POST"
    page_size = 50

    def criteria(self, query: str) -> Dict[str, Any]:
        return {
            "advanced_text_search": {"operator": "and", "search_field": "all", "search_text": query},
            "fiscal_years": recent_fiscal_years(),
        }

    def build_request(self, query: str, page: int) -> Dict[str, Any]:
        return {
            "json": {
                "criteria": self.criteria(query),
                "offset": (page - 1) * self.page_size,
                "limit": self.page_size,
                "sort_field": "award_amount",
                "sort_order": "desc",
            },
            "headers": {"Content-Type": "application/json"},
        }

    def parse_response(self, data: Any, page: int) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        if not isinstance(data, dict):
            return [], None
        return as_list(data.get("results")), as_int(dig(data, "meta", "total"))


class FederalReporterAdapter(NihReporterAdapter):
    source = SourceId.FEDERAL_REPORTER

    def __init__(self, agencies: Optional[List[str]] = None, **kwargs):
        super().__init__(**kwargs)
        self.agencies = agencies or list(FEDERAL_REPORTER_AGENCIES)

    def criteria(self, query: str) -> Dict[str, Any]:
        criteria = super().criteria(query)
        criteria["agencies"] = list(self.agencies)
        return criteria
