"""ProPublica Nonprofit Explorer adapter - GET /nonprofits/api/v2/search.json.

Records are organizations, not grants; `amount` carries annual revenue.
"""

from typing import Any, Dict, List, Optional, Tuple

from ..models.opportunity import SourceId
from .base import BaseAdapter, as_int, as_list, dig


class ProPublicaAdapter(BaseAdapter):
    source = SourceId.PROPUBLICA
    API_URL = "https://projects.propublica.org/nonprofits/api/v2/search.json"
    page_size = 25

    def __init__(self, state: Optional[str] = None, ntee_code: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.state = state
        self.ntee_code = ntee_code

    def build_request(self, query: str, page: int) -> Dict[str, Any]:
        params: Dict[str, Any] = {"q": query}
        # 0-based pages upstream
        if page > 1:
            params["page"] = page - 1
        if self.state:
            params["state[id]"] = self.state
        if self.ntee_code:
            params["ntee[id]"] = self.ntee_code
        return {"params": params}

    def parse_response(self, data: Any, page: int) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        organizations = as_list(dig(data, "organizations"))
        total = as_int(dig(data, "total_results"))
        num_pages = as_int(dig(data, "num_pages"))
        if total is None and num_pages is not None:
            total = num_pages * self.page_size
        return organizations, total
