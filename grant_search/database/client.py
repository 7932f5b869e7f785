"""Supabase database client for profiles, grant matches and the notification log."""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from supabase import Client, create_client

from ..models.grant_match import GrantMatch, MatchStatus
from ..models.profile import NotificationFrequency, OrganizationProfile, normalize_email

logger = logging.getLogger(__name__)

PROFILES_TABLE = "agency_profiles"
MATCHES_TABLE = "grant_matches"
NOTIFICATION_LOG_TABLE = "notification_log"

MATCH_CONFLICT_KEY = "profile_id,grant_id,grant_source"


class SupabaseClient:
    """Client for the agency_profiles, grant_matches and notification_log tables."""

    def __init__(
        self,
        url: Optional[str] = None,
        key: Optional[str] = None,
    ) -> None:
        """Initialize Supabase client from explicit args or env vars.

        Args:
            url: Supabase project URL (falls back to SUPABASE_URL env var).
            key: Supabase anon/service key (falls back to SUPABASE_KEY env var).
        """
        self._url = url or os.environ["SUPABASE_URL"]
        self._key = key or os.environ["SUPABASE_KEY"]
        self._client: Client = create_client(self._url, self._key)

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def get_profile(self, profile_id: str) -> Optional[OrganizationProfile]:
        response = (
            self._client.table(PROFILES_TABLE)
            .select("*")
            .eq("id", profile_id)
            .execute()
        )
        return OrganizationProfile.from_row(response.data[0]) if response.data else None

    def get_profile_by_email(self, email: str) -> Optional[OrganizationProfile]:
        response = (
            self._client.table(PROFILES_TABLE)
            .select("*")
            .eq("email", normalize_email(email))
            .execute()
        )
        return OrganizationProfile.from_row(response.data[0]) if response.data else None

    def list_notifiable_profiles(
        self, frequency: Optional[NotificationFrequency] = None
    ) -> List[OrganizationProfile]:
        """Profiles with email notifications on and a frequency other than none.

        Args:
            frequency: Restrict to one notification frequency.
        """
        query = (
            self._client.table(PROFILES_TABLE)
            .select("*")
            .eq("email_notifications", True)
            .neq("notification_frequency", NotificationFrequency.NONE.value)
        )
        if frequency is not None:
            query = query.eq("notification_frequency", NotificationFrequency(frequency).value)
        response = query.execute()
        return [OrganizationProfile.from_row(row) for row in response.data]

    def upsert_profile(self, profile: OrganizationProfile) -> OrganizationProfile:
        """Insert or update a profile keyed by normalized email."""
        record = profile.to_row()
        record["updated_at"] = datetime.now(timezone.utc).isoformat()
        response = (
            self._client.table(PROFILES_TABLE)
            .upsert(record, on_conflict="email")
            .execute()
        )
        logger.info("Upserted profile %s", profile.email)
        return OrganizationProfile.from_row(response.data[0]) if response.data else profile

    def delete_profile(self, email: str) -> bool:
        response = (
            self._client.table(PROFILES_TABLE)
            .delete()
            .eq("email", normalize_email(email))
            .execute()
        )
        logger.info("Deleted profile %s", normalize_email(email))
        return bool(response.data)

    def stamp_notification_sent(self, profile_id: str, sent_at: datetime) -> None:
        (
            self._client.table(PROFILES_TABLE)
            .update({"last_notification_sent": sent_at.isoformat()})
            .eq("id", profile_id)
            .execute()
        )

    # ------------------------------------------------------------------
    # Grant matches
    # ------------------------------------------------------------------

    def upsert_matches(self, matches: Iterable[GrantMatch]) -> int:
        """Upsert match rows on (profile_id, grant_id, grant_source).

        Re-scoring overwrites score and reasons; it never duplicates a row.

        Returns:
            Number of rows written.
        """
        records = [m.to_row() for m in matches]
        if not records:
            return 0
        now = datetime.now(timezone.utc).isoformat()
        for record in records:
            record["updated_at"] = now
            # A re-scored match keeps whatever status it already reached
            record.pop("status", None)
        response = (
            self._client.table(MATCHES_TABLE)
            .upsert(records, on_conflict=MATCH_CONFLICT_KEY)
            .execute()
        )
        logger.info("Upserted %d grant matches", len(records))
        return len(response.data) if response.data is not None else len(records)

    def get_new_matches(self, profile_id: str, limit: int = 20) -> List[GrantMatch]:
        """Unsent matches for a profile, best first."""
        response = (
            self._client.table(MATCHES_TABLE)
            .select("*")
            .eq("profile_id", profile_id)
            .eq("status", MatchStatus.NEW.value)
            .order("match_score", desc=True)
            .limit(limit)
            .execute()
        )
        return [GrantMatch.from_row(row) for row in response.data]

    def get_recent_matches(self, profile_id: str, limit: int = 10) -> List[GrantMatch]:
        """Best matches for a profile regardless of status."""
        response = (
            self._client.table(MATCHES_TABLE)
            .select("*")
            .eq("profile_id", profile_id)
            .order("match_score", desc=True)
            .limit(limit)
            .execute()
        )
        return [GrantMatch.from_row(row) for row in response.data]

    def mark_matches_sent(self, matches: Iterable[GrantMatch], sent_at: datetime) -> None:
        for match in matches:
            (
                self._client.table(MATCHES_TABLE)
                .update({"status": MatchStatus.SENT.value, "sent_at": sent_at.isoformat()})
                .eq("profile_id", match.profile_id)
                .eq("grant_id", match.source_record_id)
                .eq("grant_source", match.source.value)
                .execute()
            )

    # ------------------------------------------------------------------
    # Notification log
    # ------------------------------------------------------------------

    def log_notification(
        self,
        profile_id: str,
        email: str,
        notification_type: str,
        grants_included: int,
        status: str,
        error_message: Optional[str] = None,
    ) -> Dict[str, Any]:
        record = {
            "profile_id": profile_id,
            "email": email,
            "notification_type": notification_type,
            "grants_included": grants_included,
            "status": status,
            "error_message": error_message,
            "sent_at": datetime.now(timezone.utc).isoformat(),
        }
        response = (
            self._client.table(NOTIFICATION_LOG_TABLE)
            .insert(record)
            .execute()
        )
        return response.data[0] if response.data else {}
