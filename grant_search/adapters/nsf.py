"""NSF Awards API adapter - GET /services/v1/awards.json."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..models.opportunity import SourceId
from .base import BaseAdapter, as_list, dig

PRINT_FIELDS = (
    "id,title,abstractText,agency,awardeeName,awardeeCity,awardeeStateCode,date,startDate,expDate,"
    "estimatedTotalAmt,fundsObligatedAmt,primaryProgram,fundProgramName,pdPIName,cfdaNumber"
)

LOOKBACK_DAYS = 5 * 365


class NsfAdapter(BaseAdapter):
    """NSF does not report a total; it is estimated from how full the page is."""

    source = SourceId.NSF
    API_URL = "https://api.nsf.gov/services/v1/awards.json"
    page_size = 25
    total_is_estimate = True

    def build_request(self, query: str, page: int) -> Dict[str, Any]:
        today = datetime.now(timezone.utc)
        return {
            "params": {
                "keyword": query,
                "printFields": PRINT_FIELDS,
                "dateStart": (today - timedelta(days=LOOKBACK_DAYS)).strftime("%m/%d/%Y"),
                "dateEnd": today.strftime("%m/%d/%Y"),
                # 1-based offset
                "offset": (page - 1) * self.page_size + 1,
                "rpp": self.page_size,
            }
        }

    def parse_response(self, data: Any, page: int) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        awards = as_list(dig(data, "response", "award"))
        if len(awards) < self.page_size:
            total = (page - 1) * self.page_size + len(awards)
        else:
            # A full page means at least one more page exists
            total = (page + 1) * self.page_size
        return awards, total
