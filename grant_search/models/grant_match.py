"""GrantMatch - persisted (profile, opportunity) pairing that cleared the match threshold."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .opportunity import NormalizedOpportunity, SourceId

DESCRIPTION_SNAPSHOT_CHARS = 500


class MatchStatus(str, Enum):
    NEW = "new"
    SENT = "sent"
    VIEWED = "viewed"


class MatchResult(BaseModel):
    """Score and ordered, de-duplicated reasons for one opportunity against one profile."""

    score: int = Field(0, ge=0, le=100)
    reasons: List[str] = Field(default_factory=list)


class GrantMatch(BaseModel):
    """A match row keyed by (profile_id, source_record_id, source).

    Carries a snapshot of the opportunity so digests can be rendered without
    refetching. Status moves new -> sent -> viewed.
    """

    profile_id: str
    source_record_id: str
    source: SourceId

    # Snapshot
    title: str = "Untitled"
    agency: Optional[str] = None
    amount: Optional[float] = None
    deadline_date: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = Field(None, max_length=DESCRIPTION_SNAPSHOT_CHARS)

    score: int = Field(..., ge=0, le=100)
    reasons: List[str] = Field(default_factory=list)
    status: MatchStatus = MatchStatus.NEW
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    sent_at: Optional[datetime] = None

    @property
    def key(self) -> tuple:
        return (self.profile_id, self.source_record_id, self.source.value)

    @classmethod
    def from_opportunity(
        cls, profile_id: str, opportunity: NormalizedOpportunity, result: MatchResult
    ) -> "GrantMatch":
        description = opportunity.description
        if description:
            description = description[:DESCRIPTION_SNAPSHOT_CHARS]
        return cls(
            profile_id=profile_id,
            source_record_id=opportunity.source_record_id,
            source=opportunity.source,
            title=opportunity.title,
            agency=opportunity.agency,
            amount=opportunity.amount,
            deadline_date=opportunity.deadline_date,
            link=opportunity.link,
            description=description,
            score=result.score,
            reasons=list(result.reasons),
        )

    def to_row(self) -> Dict[str, Any]:
        """Map to `grant_matches` columns."""
        return {
            "profile_id": self.profile_id,
            "grant_id": self.source_record_id,
            "grant_source": self.source.value,
            "grant_title": self.title,
            "grant_agency": self.agency,
            "grant_amount": self.amount,
            "grant_deadline": self.deadline_date,
            "grant_url": self.link,
            "grant_description": self.description,
            "match_score": self.score,
            "match_reasons": list(self.reasons),
            "status": self.status.value,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "GrantMatch":
        return cls(
            profile_id=str(row["profile_id"]),
            source_record_id=str(row["grant_id"]),
            source=row["grant_source"],
            title=row.get("grant_title") or "Untitled",
            agency=row.get("grant_agency"),
            amount=row.get("grant_amount"),
            deadline_date=row.get("grant_deadline"),
            link=row.get("grant_url"),
            description=(row.get("grant_description") or "")[:DESCRIPTION_SNAPSHOT_CHARS] or None,
            score=row.get("match_score") or 0,
            reasons=row.get("match_reasons") or [],
            status=row.get("status") or MatchStatus.NEW,
            created_at=row.get("created_at") or datetime.now(timezone.utc),
            sent_at=row.get("sent_at"),
        )
