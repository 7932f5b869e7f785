"""NormalizedOpportunity - canonical record for a funding opportunity or award from any source."""

import hashlib
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class SourceId(str, Enum):
    """The ten upstream grant and funding-data providers."""

    GRANTS_GOV = "grants_gov"
    SAM_GOV = "sam_gov"
    NIH = "nih"
    NSF = "nsf"
    USASPENDING = "usaspending"
    FEMA = "fema"
    PROPUBLICA = "propublica"
    REGULATIONS = "regulations"
    FEDERAL_REPORTER = "federal_reporter"
    CALIFORNIA = "california"


class Category(str, Enum):
    """Result tabs. Every source belongs to exactly one."""

    OPPORTUNITIES = "opportunities"
    RESEARCH = "research"
    AWARDS = "awards"
    NONPROFITS = "nonprofits"
    REGULATORY = "regulatory"


SOURCE_CATEGORIES: Dict[SourceId, Category] = {
    SourceId.GRANTS_GOV: Category.OPPORTUNITIES,
    SourceId.SAM_GOV: Category.OPPORTUNITIES,
    SourceId.CALIFORNIA: Category.OPPORTUNITIES,
    SourceId.NIH: Category.RESEARCH,
    SourceId.NSF: Category.RESEARCH,
    SourceId.FEDERAL_REPORTER: Category.RESEARCH,
    SourceId.USASPENDING: Category.AWARDS,
    SourceId.FEMA: Category.AWARDS,
    SourceId.PROPUBLICA: Category.NONPROFITS,
    SourceId.REGULATIONS: Category.REGULATORY,
}

SOURCE_LABELS: Dict[SourceId, str] = {
    SourceId.GRANTS_GOV: "Grants.gov",
    SourceId.SAM_GOV: "SAM.gov",
    SourceId.NIH: "NIH RePORTER",
    SourceId.NSF: "NSF Awards",
    SourceId.USASPENDING: "USASpending",
    SourceId.FEMA: "OpenFEMA",
    SourceId.PROPUBLICA: "ProPublica Nonprofits",
    SourceId.REGULATIONS: "Regulations.gov",
    SourceId.FEDERAL_REPORTER: "Federal RePORTER",
    SourceId.CALIFORNIA: "California Grants",
}


def category_for(source: SourceId) -> Category:
    """Category tab a source's results are listed under."""
    return SOURCE_CATEGORIES[SourceId(source)]


class NormalizedOpportunity(BaseModel):
    """Normalized funding record from any source.

    Only `source` is guaranteed. `source_record_id` is absent solely for raw
    records that could not be identified; those are dropped before they reach
    ranking, matching or persistence. "Not specified" is a presentation
    concern: missing upstream values stay None here.
    """

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "source": "grants_gov",
                "source_record_id": "350123",
                "title": "STEM Education Innovation Grants",
                "agency": "Department of Education",
                "description": "Supports K-12 STEM curriculum development",
                "amount": 500000.0,
                "posted_date": "2025-01-15",
                "deadline_date": "2025-03-18",
                "link": "https://www.grants.gov/search-results-detail/350123",
                "eligibility_text": "Nonprofits having a 501(c)(3) status",
                "category_text": "Education",
            }
        },
    }

    # Identity
    source: SourceId = Field(..., description="Upstream source identifier")
    source_record_id: Optional[str] = Field(None, description="Source-local identifier")

    # Details
    title: str = Field("Untitled", description="Human title")
    agency: Optional[str] = Field(None, description="Funding body or organization name")
    description: Optional[str] = Field(None, description="Synopsis or abstract")
    category_text: Optional[str] = Field(None, description="Upstream category / funding category")
    eligibility_text: Optional[str] = Field(None, description="Free-text eligibility information")

    # Money: award ceiling, total cost or revenue depending on the source
    amount: Optional[float] = Field(None, description="Representative dollar figure")

    # Dates (ISO YYYY-MM-DD)
    posted_date: Optional[str] = Field(None, description="Publication / start date")
    deadline_date: Optional[str] = Field(None, description="Submission / comment deadline")

    link: Optional[str] = Field(None, description="Deep link to the original listing")

    # Computed per query / per profile, never part of the identity
    relevance_score: int = Field(0, ge=0, description="Per-query ranking score")
    match_score: Optional[int] = Field(None, ge=0, le=100, description="Per-profile fit score")
    match_reasons: List[str] = Field(default_factory=list, description="Ordered match explanations")

    @property
    def identity_key(self) -> tuple:
        return (self.source.value, self.source_record_id)

    @property
    def identity_hash(self) -> str:
        """SHA256(source:source_record_id)."""
        return hashlib.sha256(f"{self.source.value}:{self.source_record_id}".encode()).hexdigest()

    @property
    def category(self) -> Category:
        return category_for(self.source)

    @property
    def is_identifiable(self) -> bool:
        return bool(self.source_record_id)
