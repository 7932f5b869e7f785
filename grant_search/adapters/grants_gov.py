"""Grants.gov API adapter - POST /v1/api/search2."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..models.opportunity import SourceId
from .base import BaseAdapter, as_int, as_list, dig

logger = logging.getLogger(__name__)


class GrantsGovAdapter(BaseAdapter):
    """Adapter for the Grants.gov search2 API.

    Requests carry an attribution User-Agent per the Grants.gov terms of use.
    Results are wrapped in a `data` envelope: data.oppHits / data.hitCount.
    """

    source = SourceId.GRANTS_GOV
    API_URL = "https://api.grants.gov/v1/api/search2"
    method = "POST"
    page_size = 50

    def __init__(self, attribution_header: str = "Grant Search", agency: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.attribution_header = attribution_header
        self.agency = agency

    def build_request(self, query: str, page: int) -> Dict[str, Any]:
        payload = {
            "keyword": query,
            "oppStatuses": "forecasted|posted",
            "rows": self.page_size,
            "startRecordNum": (page - 1) * self.page_size,
        }
        if self.agency:
            payload["agencies"] = self.agency
        return {
            "json": payload,
            "headers": {"Content-Type": "application/json", "User-Agent": self.attribution_header},
        }

    def parse_response(self, data: Any, page: int) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        inner = dig(data, "data")
        if not isinstance(inner, dict):
            inner = data if isinstance(data, dict) else {}
        hits = as_list(inner.get("oppHits"))
        logger.debug("Grants.gov returned %s hits", inner.get("hitCount"))
        return hits, as_int(inner.get("hitCount"))
