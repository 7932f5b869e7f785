"""Pytest configuration and fixtures."""

from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

from grant_search.models import (
    GrantMatch,
    MatchStatus,
    NormalizedOpportunity,
    NotificationFrequency,
    OrganizationProfile,
    OrganizationType,
    SourceId,
)
from grant_search.models.profile import normalize_email
from grant_search.notifier.sender import SendResult

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------

class InMemoryStore:
    """Stand-in for SupabaseClient with the same method surface."""

    def __init__(self, profiles: Optional[List[OrganizationProfile]] = None):
        self.profiles: Dict[str, OrganizationProfile] = {}
        self.matches: Dict[tuple, GrantMatch] = {}
        self.notification_log: List[dict] = []
        self.upsert_calls = 0
        for profile in profiles or []:
            self.upsert_profile(profile)

    # Profiles
    def get_profile(self, profile_id):
        return self.profiles.get(profile_id)

    def get_profile_by_email(self, email):
        email = normalize_email(email)
        for profile in self.profiles.values():
            if profile.email == email:
                return profile
        return None

    def list_notifiable_profiles(self, frequency=None):
        profiles = [p for p in self.profiles.values() if p.wants_notifications]
        if frequency is not None:
            profiles = [p for p in profiles if p.notification_frequency == NotificationFrequency(frequency)]
        return profiles

    def upsert_profile(self, profile):
        existing = self.get_profile_by_email(profile.email)
        profile_id = existing.id if existing else (profile.id or f"p{len(self.profiles) + 1}")
        saved = profile.model_copy(update={"id": profile_id})
        self.profiles[profile_id] = saved
        return saved

    def delete_profile(self, email):
        profile = self.get_profile_by_email(email)
        if profile is None:
            return False
        del self.profiles[profile.id]
        return True

    def stamp_notification_sent(self, profile_id, sent_at):
        profile = self.profiles[profile_id]
        self.profiles[profile_id] = profile.model_copy(update={"last_notification_sent": sent_at})

    # Matches
    def upsert_matches(self, matches):
        self.upsert_calls += 1
        matches = list(matches)
        keys = [m.key for m in matches]
        if len(set(keys)) != len(keys):
            # Postgres: ON CONFLICT DO UPDATE command cannot affect row a second time
            raise ValueError("duplicate conflict key in upsert batch")
        count = 0
        for match in matches:
            existing = self.matches.get(match.key)
            status = existing.status if existing else MatchStatus.NEW
            self.matches[match.key] = match.model_copy(update={"status": status})
            count += 1
        return count

    def _for_profile(self, profile_id):
        return [m for m in self.matches.values() if m.profile_id == profile_id]

    def get_new_matches(self, profile_id, limit=20):
        rows = [m for m in self._for_profile(profile_id) if m.status == MatchStatus.NEW]
        return sorted(rows, key=lambda m: m.score, reverse=True)[:limit]

    def get_recent_matches(self, profile_id, limit=10):
        return sorted(self._for_profile(profile_id), key=lambda m: m.score, reverse=True)[:limit]

    def mark_matches_sent(self, matches, sent_at):
        for match in matches:
            stored = self.matches[match.key]
            self.matches[match.key] = stored.model_copy(update={"status": MatchStatus.SENT, "sent_at": sent_at})

    def log_notification(self, profile_id, email, notification_type, grants_included, status, error_message=None):
        self.notification_log.append({
            "profile_id": profile_id,
            "email": email,
            "notification_type": notification_type,
            "grants_included": grants_included,
            "status": status,
            "error_message": error_message,
        })


class FakeSender:
    """Records sends; fails for addresses listed in `fail_for`."""

    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    def send(self, to, subject, html):
        if to in self.fail_for:
            return SendResult(success=False, error="mailbox unavailable")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return SendResult(success=True, message_id=f"msg-{len(self.sent)}")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def nonprofit_profile():
    return OrganizationProfile(
        id="p1",
        email="Grants@Example.org ",
        organization_name="River Valley Learning Center",
        organization_type=OrganizationType.NONPROFIT,
        state="CA",
        focus_areas=["education"],
        keywords=["literacy"],
        min_amount=10000,
        max_amount=1000000,
        notification_frequency=NotificationFrequency.DAILY,
    )


@pytest.fixture
def education_grant():
    return NormalizedOpportunity(
        source=SourceId.GRANTS_GOV,
        source_record_id="ED-2025-001",
        title="Adult Literacy Education Grants",
        agency="Department of Education",
        description="Supports adult literacy programs in California community centers.",
        amount=250000,
        deadline_date="2025-09-30",
        eligibility_text="Nonprofit organizations with 501(c)(3) status",
        link="https://www.grants.gov/search-results-detail/ED-2025-001",
    )


@pytest.fixture
def store_factory():
    """The in-memory store class; call it with a list of profiles to seed."""
    return InMemoryStore


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def sender_factory():
    return FakeSender


@pytest.fixture
def sender():
    return FakeSender()


@pytest.fixture
def sample_grants_gov_response():
    """Sample Grants.gov API response."""
    return {
        "errorcode": 0,
        "data": {
            "hitCount": 2,
            "oppHits": [
                {
                    "id": "335512",
                    "number": "HHS-2024-ACF-OCS-TE-0001",
                    "title": "Community Services Block Grant",
                    "agency": "Department of Health and Human Services",
                    "openDate": "01/15/2024",
                    "closeDate": "03/18/2024",
                    "oppStatus": "posted",
                },
                {
                    "id": "335513",
                    "number": "NSF-25-001",
                    "title": "CSSI: Cyberinfrastructure for Sustained Scientific Innovation",
                    "agency": "National Science Foundation",
                    "openDate": "02/01/2024",
                    "closeDate": "",
                    "oppStatus": "forecasted",
                },
            ],
        },
    }


@pytest.fixture
def sample_sam_gov_response():
    """Sample SAM.gov API response."""
    return {
        "totalRecords": 1,
        "opportunitiesData": [
            {
                "noticeId": "abc123",
                "solicitationNumber": "W911NF-24-R-0001",
                "title": "Army Research Laboratory AI/ML Research",
                "fullParentPathName": "DEPT OF DEFENSE.DEPT OF THE ARMY.ARMY RESEARCH LAB",
                "postedDate": "2024-01-15",
                "responseDeadLine": "2024-03-18T17:00:00-05:00",
                "typeOfSetAsideDescription": "Total Small Business Set-Aside",
                "type": "Solicitation",
                "uiLink": "https://sam.gov/opp/abc123/view",
            }
        ],
    }
