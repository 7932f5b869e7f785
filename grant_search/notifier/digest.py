"""Notification dispatch: email each profile a digest of its new matches."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ..errors import ProfileNotFound
from ..models.profile import NotificationFrequency
from .formatters import DIGEST_MAX_MATCHES, digest_subject, render_digest
from .sender import EmailSender

logger = logging.getLogger(__name__)

MAX_MATCHES_PER_EMAIL = 20


@dataclass
class NotificationSummary:
    profiles_processed: int = 0
    emails_sent: int = 0
    errors: list[str] = field(default_factory=list)
    message: str = ""


def _select_profiles(store: Any, frequency: NotificationFrequency | None, profile_id: str | None) -> list:
    if profile_id:
        profile = store.get_profile(profile_id)
        if profile is None:
            raise ProfileNotFound(f"Profile not found: {profile_id}")
        return [profile] if profile.notifications_enabled else []
    return store.list_notifiable_profiles(frequency)


def dispatch_notifications(
    store: Any | None,
    sender: EmailSender,
    frequency: NotificationFrequency | None = None,
    profile_id: str | None = None,
    test_mode: bool = False,
    base_url: str = "http://localhost:3000",
) -> NotificationSummary:
    """Send one digest per profile that has new matches.

    On a successful send the included matches move to `sent`, a
    notification_log row is written and the profile's
    last_notification_sent is stamped. In test mode nothing is sent or
    updated. A failure for one profile is recorded and the run continues.
    """
    if store is None:
        return NotificationSummary(message="Supabase not configured - notification preview only")

    profiles = _select_profiles(store, frequency, profile_id)
    if not profiles:
        return NotificationSummary(message="No profiles need notifications")

    notification_type = NotificationFrequency(frequency).value if frequency else "manual"
    summary = NotificationSummary(profiles_processed=len(profiles))

    for profile in profiles:
        try:
            matches = store.get_new_matches(profile.id, limit=MAX_MATCHES_PER_EMAIL)
        except Exception as exc:
            logger.error("notify profile=%s step=fetch_matches error=%s", profile.id, exc)
            summary.errors.append(f"Profile {profile.id}: {exc}")
            continue

        if not matches:
            continue

        subject = digest_subject(len(matches))
        html = render_digest(profile, matches, base_url)

        if test_mode:
            logger.info("notify profile=%s mode=test to=%s matches=%d", profile.id, profile.email, len(matches))
            summary.emails_sent += 1
            continue

        try:
            result = sender.send(profile.email, subject, html)
            if result.success:
                sent_at = datetime.now(timezone.utc)
                store.mark_matches_sent(matches, sent_at)
                store.log_notification(profile.id, profile.email, notification_type, len(matches), "sent")
                store.stamp_notification_sent(profile.id, sent_at)
                summary.emails_sent += 1
            else:
                summary.errors.append(f"Profile {profile.id}: {result.error}")
                store.log_notification(
                    profile.id, profile.email, notification_type, len(matches), "failed", result.error
                )
        except Exception as exc:
            logger.error("notify profile=%s step=deliver error=%s", profile.id, exc)
            summary.errors.append(f"Profile {profile.id}: {exc}")

    summary.message = f"Sent {summary.emails_sent} notification{'' if summary.emails_sent == 1 else 's'}"
    logger.info(
        "notify_complete profiles=%d sent=%d errors=%d",
        summary.profiles_processed,
        summary.emails_sent,
        len(summary.errors),
    )
    return summary


def preview_digest(store: Any, email: str, base_url: str = "http://localhost:3000") -> tuple[str, int]:
    """Render the digest a profile would receive from its best recent matches."""
    profile = store.get_profile_by_email(email)
    if profile is None:
        raise ProfileNotFound(f"Profile not found: {email}")
    matches = store.get_recent_matches(profile.id, limit=DIGEST_MAX_MATCHES)
    return render_digest(profile, matches, base_url), len(matches)
