"""OpenFEMA adapter - Public Assistance grant award activities (OData)."""

from typing import Any, Dict, List, Optional, Tuple

from ..models.opportunity import SourceId
from .base import BaseAdapter, as_int, as_list, dig


def _odata_literal(value: str) -> str:
    return value.replace("'", "''")


class FemaAdapter(BaseAdapter):
    """OpenFEMA has no full-text search; the keyword is matched against
    applicant name and project title."""

    source = SourceId.FEMA
    API_URL = "https://www.fema.gov/api/open/v2/PublicAssistanceGrantAwardActivities"
    page_size = 50

    def __init__(self, state: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.state = state

    def build_request(self, query: str, page: int) -> Dict[str, Any]:
        keyword = _odata_literal(query)
        filters = [f"(contains(applicantName,'{keyword}') or contains(projectTitle,'{keyword}'))"]
        if self.state:
            filters.append(f"state eq '{_odata_literal(self.state)}'")
        return {
            "params": {
                "$filter": " and ".join(filters),
                "$skip": (page - 1) * self.page_size,
                "$top": self.page_size,
                "$inlinecount": "allpages",
            }
        }

    def parse_response(self, data: Any, page: int) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        records = as_list(dig(data, "PublicAssistanceGrantAwardActivities"))
        return records, as_int(dig(data, "metadata", "count"))
