"""Base adapter interface for grant sources."""

import logging
import math
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..errors import (
    InvalidUserInput,
    MissingConfiguration,
    UpstreamError,
    UpstreamRateLimited,
    UpstreamRequestError,
    UpstreamUnavailable,
)
from ..models.opportunity import SOURCE_LABELS, SourceId
from ..models.search import SourceResult
from ..normalizer import normalize_records

logger = logging.getLogger(__name__)

# Gateway-style statuses that are worth retrying
TRANSIENT_STATUSES = {502, 503, 504}


class BaseAdapter(ABC):
    """Abstract base class for grant source adapters.

    Subclasses describe the request (`build_request`) and the response
    envelope (`parse_response`); the base class owns HTTP, status
    classification, normalization and per-source pagination.
    """

    source: SourceId
    API_URL: str
    method: str = "GET"
    page_size: int = 25
    timeout_seconds: float = 30.0
    requires_api_key: bool = False
    total_is_estimate: bool = False

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.api_key = api_key
        self.client = client
        if timeout_seconds is not None:
            self.timeout_seconds = timeout_seconds

    @property
    def source_name(self) -> str:
        return self.source.value

    @property
    def label(self) -> str:
        return SOURCE_LABELS[self.source]

    @property
    def budget_seconds(self) -> float:
        """Wall-clock budget the orchestrator grants one search on this source."""
        return self.timeout_seconds + 5.0

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) or not self.requires_api_key

    @property
    def missing_key_message(self) -> str:
        return f"{self.label} API key not configured. Contact administrator to enable {self.label} search."

    @abstractmethod
    def build_request(self, query: str, page: int) -> Dict[str, Any]:
        """Keyword arguments for the HTTP call (`params`, `json`, `headers`)."""

    @abstractmethod
    def parse_response(self, data: Any, page: int) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        """Extract (raw records, total count) from the response body."""

    def prepare_records(self, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Hook for sources that need to reshape records before normalization."""
        return records

    async def search(self, query: str, page: int = 1) -> SourceResult:
        """Fetch one page for `query` and normalize it. Raises UpstreamError."""
        query = (query or "").strip()
        if not query:
            raise InvalidUserInput("Keyword is required")
        if not self.is_configured:
            raise MissingConfiguration(self.source_name, self.missing_key_message)

        page = max(1, int(page or 1))
        data = await self._request(self.build_request(query, page))
        records, total = self.parse_response(data, page)
        opportunities = normalize_records(self.prepare_records(records), self.source)

        if total is None:
            total = len(records)
        return SourceResult(
            source=self.source,
            opportunities=opportunities,
            total=total,
            page=page,
            page_size=self.page_size,
            total_pages=math.ceil(total / self.page_size) if self.page_size else 0,
            total_is_estimate=self.total_is_estimate,
        )

    async def _request(self, request_kwargs: Dict[str, Any]) -> Any:
        """Perform one HTTP call and classify failures into the error taxonomy."""
        url = self.API_URL
        start = time.monotonic()
        timeout = httpx.Timeout(self.timeout_seconds)
        request_kwargs = dict(request_kwargs)
        headers = {"Accept": "application/json", **request_kwargs.pop("headers", {})}

        try:
            if self.client is not None:
                response = await self.client.request(self.method, url, headers=headers, timeout=timeout, **request_kwargs)
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.request(self.method, url, headers=headers, **request_kwargs)
        except httpx.TimeoutException as e:
            logger.error(
                "request source=%s url=%s status=timeout duration_ms=%.0f error='%s'",
                self.source_name, url, (time.monotonic() - start) * 1000, e,
            )
            raise UpstreamUnavailable(
                self.source_name,
                f"{self.label} search timed out - try a more specific search term or try again later",
            ) from e
        except httpx.TransportError as e:
            logger.error(
                "request source=%s url=%s status=network_error duration_ms=%.0f error='%s'",
                self.source_name, url, (time.monotonic() - start) * 1000, e,
            )
            raise UpstreamUnavailable(self.source_name, f"Could not reach {self.label} - please try again later") from e

        status = response.status_code
        logger.info(
            "request source=%s url=%s status=%d duration_ms=%.0f",
            self.source_name, url, status, (time.monotonic() - start) * 1000,
        )

        if status == 429:
            raise UpstreamRateLimited(
                self.source_name,
                f"Rate limit exceeded for {self.label} - please wait a moment and try again",
                status_code=status,
            )
        if status >= 500:
            raise UpstreamUnavailable(
                self.source_name,
                f"{self.label} service temporarily unavailable - please try again later",
                status_code=status,
                transient=status in TRANSIENT_STATUSES,
            )
        if status >= 400:
            raise UpstreamRequestError(self.source_name, f"{self.label} API error: {status}", status_code=status)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(self.source_name, f"Unexpected response format from {self.label}", status) from e

    async def safe_search(self, query: str, page: int = 1) -> SourceResult:
        """Search with full error handling - never raises an upstream failure.

        This is the entry point callers should use for partial-failure
        isolation: any failure becomes an empty SourceResult carrying a
        source-scoped error message.
        """
        start = time.monotonic()
        try:
            result = await self.search(query, page)
        except InvalidUserInput:
            raise
        except UpstreamError as exc:
            logger.error(
                "fetch_complete source=%s result=failure kind=%s error=%s duration_ms=%.0f",
                self.source_name, exc.kind, exc.message, (time.monotonic() - start) * 1000,
            )
            return SourceResult.failed(self.source, exc.message, exc.kind, page=page)
        except Exception as exc:
            logger.exception(
                "fetch_complete source=%s result=failure error=%s duration_ms=%.0f",
                self.source_name, exc, (time.monotonic() - start) * 1000,
            )
            return SourceResult.failed(self.source, f"Failed to fetch from {self.label}", page=page)

        logger.info(
            "fetch_complete source=%s result=success count=%d duration_ms=%.0f",
            self.source_name, len(result.opportunities), (time.monotonic() - start) * 1000,
        )
        return result


def dig(data: Any, *path: str, default: Any = None) -> Any:
    """Walk nested dicts, returning `default` when any level is missing."""
    current = data
    for key in path:
        if not isinstance(current, dict):
            return default
        current = current.get(key)
        if current is None:
            return default
    return current


def as_list(value: Any) -> List[Dict[str, Any]]:
    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    return []


def as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
