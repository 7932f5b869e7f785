"""Email digests of new grant matches."""

from .digest import NotificationSummary, dispatch_notifications, preview_digest
from .formatters import digest_subject, render_digest, score_color
from .sender import EmailSender, SendResult

__all__ = [
    "NotificationSummary",
    "dispatch_notifications",
    "preview_digest",
    "digest_subject",
    "render_digest",
    "score_color",
    "EmailSender",
    "SendResult",
]
