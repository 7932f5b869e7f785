"""California Grants Portal adapter - CKAN datastore_search on data.ca.gov."""

import json
from typing import Any, Dict, List, Optional, Tuple

from ..errors import UpstreamError
from ..models.opportunity import SourceId
from .base import BaseAdapter, as_int, as_list, dig

DATASET_ID = "111c8c88-21f6-453c-ae2c-b4785a0624f5"


class CaliforniaGrantsAdapter(BaseAdapter):
    source = SourceId.CALIFORNIA
    API_URL = "https://data.ca.gov/api/3/action/datastore_search"
    page_size = 50

    def __init__(self, category: Optional[str] = None, agency: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.category = category
        self.agency = agency

    def build_request(self, query: str, page: int) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "resource_id": DATASET_ID,
            "q": query,
            "limit": self.page_size,
            "offset": (page - 1) * self.page_size,
        }
        filters = {}
        if self.category:
            filters["category"] = self.category
        if self.agency:
            filters["grantmaker_name"] = self.agency
        if filters:
            params["filters"] = json.dumps(filters)
        return {"params": params}

    def parse_response(self, data: Any, page: int) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        if not isinstance(data, dict) or not data.get("success"):
            message = dig(data, "error", "message") or "API returned unsuccessful response"
            raise UpstreamError(self.source_name, f"California Grants error: {message}")
        return as_list(dig(data, "result", "records")), as_int(dig(data, "result", "total"))
