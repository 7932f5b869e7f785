"""USASpending.gov adapter - POST /api/v2/search/spending_by_award/ (grants only)."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..models.opportunity import SourceId
from .base import BaseAdapter, as_int, as_list, dig

# Block grant, formula grant, project grant, cooperative agreement
GRANT_AWARD_TYPES = ["02", "03", "04", "05"]

AWARD_FIELDS = [
    "Award ID",
    "Recipient Name",
    "Recipient State Code",
    "Award Amount",
    "Description",
    "Start Date",
    "End Date",
    "Awarding Agency",
    "Awarding Sub Agency",
    "Award Type",
    "CFDA Number",
    "generated_internal_id",
]


class UsaSpendingAdapter(BaseAdapter):
    source = SourceId.USASPENDING
    API_URL = "https://api.usaspending.gov/api/v2/search/spending_by_award/"
    method = "POST"
    page_size = 25
    period_start = "2020-01-01"

    def build_request(self, query: str, page: int) -> Dict[str, Any]:
        return {
            "json": {
                "filters": {
                    "keywords": [query],
                    "award_type_codes": GRANT_AWARD_TYPES,
                    "time_period": [
                        {
                            "start_date": self.period_start,
                            "end_date": datetime.now(timezone.utc).date().isoformat(),
                        }
                    ],
                },
                "fields": AWARD_FIELDS,
                "page": page,
                "limit": self.page_size,
                "sort": "Award Amount",
                "order": "desc",
                "subawards": False,
            },
            "headers": {"Content-Type": "application/json"},
        }

    def parse_response(self, data: Any, page: int) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        results = as_list(dig(data, "results"))
        return results, as_int(dig(data, "page_metadata", "total"))
