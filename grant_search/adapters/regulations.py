"""Regulations.gov adapter - GET /v4/documents (requires an api.data.gov key)."""

from typing import Any, Dict, List, Optional, Tuple

from ..models.opportunity import SourceId
from .base import BaseAdapter, as_int, as_list, dig


class RegulationsAdapter(BaseAdapter):
    source = SourceId.REGULATIONS
    API_URL = "https://api.regulations.gov/v4/documents"
    page_size = 25
    requires_api_key = True

    def __init__(self, api_key: Optional[str] = None, document_type: Optional[str] = None, **kwargs):
        super().__init__(api_key=api_key, **kwargs)
        self.document_type = document_type

    @property
    def missing_key_message(self) -> str:
        return "Regulations.gov API key not configured. Contact administrator to enable regulatory search."

    def build_request(self, query: str, page: int) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "filter[searchTerm]": query,
            "page[size]": self.page_size,
            "page[number]": page,
            "sort": "-postedDate",
        }
        if self.document_type:
            params["filter[documentType]"] = self.document_type
        return {"params": params, "headers": {"X-Api-Key": self.api_key}}

    def parse_response(self, data: Any, page: int) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        documents = as_list(dig(data, "data"))
        return documents, as_int(dig(data, "meta", "totalElements"))
