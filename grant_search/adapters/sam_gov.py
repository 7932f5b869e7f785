"""SAM.gov API adapter - authenticated API access with bounded retry."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..errors import UpstreamUnavailable
from ..models.opportunity import SourceId
from .base import BaseAdapter, as_int, as_list

logger = logging.getLogger(__name__)

# Posted-date window around today; SAM.gov rejects ranges over a year
POSTED_WINDOW_DAYS = 90


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, UpstreamUnavailable) and exc.transient


class SamGovAdapter(BaseAdapter):
    """Adapter for SAM.gov Opportunities API.

    API Docs: https://open.gsa.gov/api/opportunities-api/
    Requires an API key (env: SAM_API_KEY). Timeouts, network errors and
    gateway errors are retried up to 2 more times with 2s/4s backoff; 4xx,
    429 and a missing key are never retried.
    """

    source = SourceId.SAM_GOV
    API_URL = "https://api.sam.gov/opportunities/v2/search"
    page_size = 50
    timeout_seconds = 25.0
    requires_api_key = True

    def __init__(self, api_key: Optional[str] = None, opportunity_type: Optional[str] = None, **kwargs):
        super().__init__(api_key=api_key, **kwargs)
        self.opportunity_type = opportunity_type
        self.max_attempts = 3
        self.retry_wait = wait_exponential(multiplier=2, min=2, max=4)

    @property
    def budget_seconds(self) -> float:
        # every attempt plus the 2s and 4s backoff sleeps
        return self.max_attempts * self.timeout_seconds + 6.0 + 5.0

    @property
    def missing_key_message(self) -> str:
        return "SAM.gov API key not configured. Contact administrator to enable SAM.gov search."

    def build_request(self, query: str, page: int) -> Dict[str, Any]:
        today = datetime.now(timezone.utc)
        params = {
            "api_key": self.api_key,
            "q": query,
            "postedFrom": (today - timedelta(days=POSTED_WINDOW_DAYS)).strftime("%m/%d/%Y"),
            "postedTo": (today + timedelta(days=POSTED_WINDOW_DAYS)).strftime("%m/%d/%Y"),
            "limit": self.page_size,
            "offset": (page - 1) * self.page_size,
        }
        if self.opportunity_type:
            params["ptype"] = self.opportunity_type
        return {"params": params}

    async def _request(self, request_kwargs: Dict[str, Any]) -> Any:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.retry_wait,
            retry=retry_if_exception(_is_transient),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await super()._request(request_kwargs)

    def parse_response(self, data: Any, page: int) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        if not isinstance(data, dict):
            return [], None
        records = as_list(data.get("opportunitiesData") or data.get("opportunities"))
        return records, as_int(data.get("totalRecords"))
