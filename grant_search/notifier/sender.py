"""Send digest emails through the Resend API with retry logic."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"


class EmailRetryableError(Exception):
    """Raised on 429 / 5xx so tenacity retries."""
    pass


class EmailSendError(Exception):
    """Non-retryable rejection from the email API."""
    pass


@dataclass
class SendResult:
    success: bool
    message_id: str | None = None
    error: str | None = None
    preview: bool = False


class EmailSender:
    """Sends HTML emails via Resend. Without an API key, sends are logged only."""

    def __init__(self, api_key: str | None = None, from_email: str | None = None) -> None:
        self.api_key = api_key if api_key is not None else os.environ.get("RESEND_API_KEY", "")
        self.from_email = from_email or os.environ.get("FROM_EMAIL", "grants@localhost")

    # ------------------------------------------------------------------
    # Retry-wrapped HTTP post
    # ------------------------------------------------------------------
    @retry(
        retry=retry_if_exception_type(EmailRetryableError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    def _post_email(self, to: str, subject: str, html: str) -> dict:
        """Post one email. Raises EmailRetryableError on 429/5xx."""
        resp = httpx.post(
            RESEND_URL,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json={"from": self.from_email, "to": [to], "subject": subject, "html": html},
            timeout=30,
        )

        if resp.status_code == 429 or resp.status_code >= 500:
            raise EmailRetryableError(f"Resend returned {resp.status_code}: {resp.text[:200]}")

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if resp.status_code >= 400:
            raise EmailSendError(data.get("message") or f"Resend returned {resp.status_code}")
        return data

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------
    def send(self, to: str, subject: str, html: str) -> SendResult:
        """Send one email. Returns a SendResult, never raises for delivery failures."""
        if not self.api_key:
            logger.info("email_preview to=%s subject=%r (Resend API key not configured)", to, subject)
            return SendResult(success=True, preview=True)

        try:
            data = self._post_email(to, subject, html)
        except (EmailRetryableError, EmailSendError, httpx.HTTPError) as exc:
            logger.error("email_send to=%s result=failure error=%s", to, exc)
            return SendResult(success=False, error=str(exc))

        logger.info("email_send to=%s result=success id=%s", to, data.get("id"))
        return SendResult(success=True, message_id=data.get("id"))
