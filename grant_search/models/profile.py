"""OrganizationProfile - saved matching preferences for one organization."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .opportunity import SourceId


class OrganizationType(str, Enum):
    NONPROFIT = "nonprofit"
    SMALL_BUSINESS = "small_business"
    UNIVERSITY = "university"
    K12 = "k12"
    GOVERNMENT = "government"
    TRIBAL = "tribal"
    HOSPITAL = "hospital"
    INDIVIDUAL = "individual"
    OTHER = "other"


class FocusArea(str, Enum):
    EDUCATION = "education"
    HEALTHCARE = "healthcare"
    ENVIRONMENT = "environment"
    RESEARCH = "research"
    TECHNOLOGY = "technology"
    ARTS = "arts"
    HOUSING = "housing"
    WORKFORCE = "workforce"
    AGRICULTURE = "agriculture"
    DISASTER = "disaster"
    JUSTICE = "justice"
    TRANSPORTATION = "transportation"
    ENERGY = "energy"
    SOCIAL_SERVICES = "social_services"
    VETERANS = "veterans"


class NotificationFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    NONE = "none"


def normalize_email(email: str) -> str:
    """Profiles are keyed by lower-cased, trimmed email."""
    return (email or "").strip().lower()


class OrganizationProfile(BaseModel):
    """Organization profile used for grant matching and digest notifications.

    Every constraint is optional; an unset field means "no constraint" to the
    match scorer. `focus_areas` is kept as plain strings so a taxonomy
    swapped in at runtime can introduce new tags.
    """

    id: Optional[str] = Field(None, description="Store-assigned profile id")
    email: str = Field(..., description="Unique key, normalized lower/trim")
    organization_name: str = Field("", description="Display name")
    organization_type: Optional[OrganizationType] = Field(None, description="Eligibility category")
    ein: Optional[str] = None

    # Geography
    state: Optional[str] = Field(None, description="Two-letter code or full state name")
    city: Optional[str] = None
    zip_code: Optional[str] = None

    # Matching preferences
    focus_areas: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    min_amount: Optional[float] = Field(None, ge=0)
    max_amount: Optional[float] = Field(None, ge=0)
    preferred_sources: List[SourceId] = Field(default_factory=list, description="Empty means any source")

    # Notifications
    notification_frequency: NotificationFrequency = NotificationFrequency.WEEKLY
    notifications_enabled: bool = True
    last_notification_sent: Optional[datetime] = None

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("keywords")
    @classmethod
    def _strip_keywords(cls, v: List[str]) -> List[str]:
        cleaned = []
        for keyword in v:
            keyword = (keyword or "").strip()
            if keyword and keyword not in cleaned:
                cleaned.append(keyword)
        return cleaned

    @property
    def wants_notifications(self) -> bool:
        return self.notifications_enabled and self.notification_frequency != NotificationFrequency.NONE

    def to_row(self) -> Dict[str, Any]:
        """Map to `agency_profiles` columns."""
        return {
            "email": self.email,
            "organization_name": self.organization_name.strip(),
            "organization_type": self.organization_type.value if self.organization_type else None,
            "ein": (self.ein or "").strip() or None,
            "state": self.state or None,
            "city": (self.city or "").strip() or None,
            "zip_code": (self.zip_code or "").strip() or None,
            "focus_areas": list(self.focus_areas),
            "keywords": list(self.keywords),
            "min_grant_amount": self.min_amount or 0,
            "max_grant_amount": self.max_amount,
            "preferred_sources": [s.value for s in self.preferred_sources],
            "notification_frequency": self.notification_frequency.value,
            "email_notifications": self.notifications_enabled,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "OrganizationProfile":
        """Build from an `agency_profiles` row. Unknown source ids are ignored."""
        valid_sources = {s.value for s in SourceId}
        org_type = row.get("organization_type")
        return cls(
            id=str(row["id"]) if row.get("id") is not None else None,
            email=row.get("email") or "",
            organization_name=row.get("organization_name") or "",
            organization_type=org_type if org_type in {t.value for t in OrganizationType} else None,
            ein=row.get("ein"),
            state=row.get("state"),
            city=row.get("city"),
            zip_code=row.get("zip_code"),
            focus_areas=row.get("focus_areas") or [],
            keywords=row.get("keywords") or [],
            min_amount=row.get("min_grant_amount"),
            max_amount=row.get("max_grant_amount"),
            preferred_sources=[s for s in (row.get("preferred_sources") or []) if s in valid_sources],
            notification_frequency=row.get("notification_frequency") or NotificationFrequency.WEEKLY,
            notifications_enabled=row.get("email_notifications") is not False,
            last_notification_sent=row.get("last_notification_sent"),
        )
