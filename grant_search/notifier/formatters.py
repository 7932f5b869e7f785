"""HTML digest formatting for grant match emails."""

from __future__ import annotations

from html import escape
from typing import List, Optional
from urllib.parse import quote

from ..models.grant_match import GrantMatch
from ..models.profile import OrganizationProfile

DIGEST_MAX_MATCHES = 10
DESCRIPTION_PREVIEW_CHARS = 200
REASONS_SHOWN = 3
NOT_SPECIFIED = "Not specified"


def score_color(score: int) -> str:
    if score >= 80:
        return "#059669"  # green
    if score >= 60:
        return "#3b82f6"  # blue
    if score >= 40:
        return "#f59e0b"  # yellow
    return "#6b7280"  # gray


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


def digest_subject(count: int) -> str:
    return f"{count} New Grant{_plural(count)} Match Your Profile - Grant Search Tool"


def _fmt_amount(amount: Optional[float]) -> str:
    if amount is None:
        return NOT_SPECIFIED
    return f"${amount:,.0f}"


def _fmt_text(value: Optional[str]) -> str:
    return escape(value) if value else NOT_SPECIFIED


def _match_card(match: GrantMatch, base_url: str) -> str:
    description = ""
    if match.description:
        preview = match.description[:DESCRIPTION_PREVIEW_CHARS]
        ellipsis = "..." if len(match.description) > DESCRIPTION_PREVIEW_CHARS else ""
        description = (
            '<p style="font-size: 14px; color: #4b5563; margin: 8px 0; line-height: 1.5;">'
            f"{escape(preview)}{ellipsis}</p>"
        )

    reasons = " &bull; ".join(escape(r) for r in match.reasons[:REASONS_SHOWN])
    view_link = ""
    if match.link:
        view_link = (
            f'<a href="{escape(match.link, quote=True)}" style="display: inline-block; background: #3b82f6; '
            'color: white; padding: 8px 16px; border-radius: 6px; text-decoration: none; font-size: 14px; '
            'font-weight: 500; margin-right: 8px;">View Grant &rarr;</a>'
        )
    highlight = f"{base_url}?highlight={quote(match.source_record_id, safe='')}"

    return f"""
    <div style="border: 1px solid #e5e7eb; border-radius: 8px; padding: 16px; margin-bottom: 16px; background: #ffffff;">
      <div style="display: flex; justify-content: space-between; align-items: start; margin-bottom: 8px;">
        <h3 style="margin: 0; font-size: 16px; color: #1f2937; line-height: 1.4;">{escape(match.title)}</h3>
        <span style="background: {score_color(match.score)}; color: white; padding: 4px 8px; border-radius: 12px; font-size: 12px; font-weight: bold; white-space: nowrap; margin-left: 12px;">{match.score}% Match</span>
      </div>
      <div style="font-size: 14px; color: #6b7280; margin-bottom: 8px;">
        <strong>Agency:</strong> {_fmt_text(match.agency)} |
        <strong>Amount:</strong> {_fmt_amount(match.amount)} |
        <strong>Deadline:</strong> {_fmt_text(match.deadline_date)}
      </div>
      {description}
      <div style="margin-top: 12px;">
        <span style="font-size: 12px; color: #059669;">Why it matches: {reasons}</span>
      </div>
      <div style="margin-top: 12px;">
        {view_link}
        <a href="{escape(highlight, quote=True)}" style="display: inline-block; background: #10b981; color: white; padding: 8px 16px; border-radius: 6px; text-decoration: none; font-size: 14px; font-weight: 500;">Get Template</a>
      </div>
    </div>"""


def render_digest(profile: OrganizationProfile, matches: List[GrantMatch], base_url: str) -> str:
    """Render the digest email body for a profile's matches.

    Shows the top 10 matches; the rest are summarized as a "more" link.
    """
    base_url = base_url.rstrip("/")
    org = escape(profile.organization_name or profile.email)
    count = len(matches)
    cards = "".join(_match_card(m, base_url) for m in matches[:DIGEST_MAX_MATCHES])

    more = ""
    if count > DIGEST_MAX_MATCHES:
        more = (
            '<div style="text-align: center; margin-top: 16px;">'
            f'<a href="{base_url}?tab=matches" style="color: #7c3aed; font-weight: 500; text-decoration: none;">'
            f"View {count - DIGEST_MAX_MATCHES} more matches &rarr;</a></div>"
        )

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background: #f3f4f6; margin: 0; padding: 20px;">
  <div style="max-width: 600px; margin: 0 auto;">
    <div style="background: linear-gradient(135deg, #7c3aed 0%, #3b82f6 100%); padding: 32px; border-radius: 12px 12px 0 0; text-align: center;">
      <h1 style="color: white; margin: 0; font-size: 24px;">New Grant Matches for {org}</h1>
      <p style="color: rgba(255,255,255,0.9); margin: 8px 0 0 0; font-size: 16px;">We found {count} grant{_plural(count)} matching your profile</p>
    </div>
    <div style="background: #f9fafb; padding: 24px; border-radius: 0 0 12px 12px;">
      {cards}
      {more}
      <div style="border-top: 1px solid #e5e7eb; margin-top: 24px; padding-top: 24px; text-align: center;">
        <p style="font-size: 12px; color: #9ca3af; margin: 0 0 8px 0;">You're receiving this because you enabled grant alerts for {org}</p>
        <a href="{base_url}?settings=notifications" style="font-size: 12px; color: #6b7280; text-decoration: underline;">Manage notification preferences</a>
      </div>
    </div>
  </div>
</body>
</html>
"""
