"""Email Service.

Delivers one-time codes to parents. Production mail goes through the Brevo
transactional email API; without an API key the codes are only logged so a
developer can register locally.
"""

import html
import logging
from typing import Protocol

import httpx

from tinymath.config import settings

logger = logging.getLogger(__name__)


class EmailSendError(Exception):
    """The email provider did not accept the message."""


class EmailSender(Protocol):
    async def send(self, to: str, subject: str, html_body: str) -> None:
        """Deliver one message. Raises ``EmailSendError`` on failure."""
        ...


class BrevoEmailSender:
    """Send mail through Brevo's ``/v3/smtp/email`` endpoint."""

    def __init__(
        self,
        api_key: str,
        sender_email: str,
        sender_name: str,
        api_url: str = "https://api.brevo.com/v3/smtp/email",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.sender_email = sender_email
        self.sender_name = sender_name
        self.api_url = api_url
        self.timeout = timeout
        self._transport = transport

    async def send(self, to: str, subject: str, html_body: str) -> None:
        payload = {
            "sender": {"name": self.sender_name, "email": self.sender_email},
            "to": [{"email": to}],
            "subject": subject,
            "htmlContent": html_body,
        }
        headers = {"api-key": self.api_key, "Content-Type": "application/json"}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport,
            ) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Brevo rejected email to %s: %s %s",
                to, e.response.status_code, e.response.text,
            )
            raise EmailSendError(f"Email provider returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("Brevo request for %s failed: %s", to, e)
            raise EmailSendError(str(e)) from e

        logger.info("Email sent to %s", to)


class LoggingEmailSender:
    """Development sender: writes the message summary to the log."""

    async def send(self, to: str, subject: str, html_body: str) -> None:
        logger.info("[DEV] Email to %s: %s", to, subject)


def get_email_sender() -> EmailSender:
    """FastAPI dependency returning the configured email sender."""
    if not settings.BREVO_API_KEY:
        return LoggingEmailSender()
    return BrevoEmailSender(
        api_key=settings.BREVO_API_KEY,
        sender_email=settings.EMAIL_SENDER_ADDRESS,
        sender_name=settings.EMAIL_SENDER_NAME,
        api_url=settings.BREVO_API_URL,
        timeout=settings.EMAIL_TIMEOUT_SECONDS,
    )


# ---------------------------------------------------------------------------
# Code email content
# ---------------------------------------------------------------------------

_CODE_EMAIL_TEMPLATE = """\
<div style="font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; max-width: 500px; margin: auto; border: 1px solid #ddd; border-radius: 12px; overflow: hidden;">
  <div style="background-color: #4A90E2; padding: 25px; text-align: center;">
    <h1 style="color: white; margin: 0; font-size: 24px;">TinyMath Education</h1>
  </div>
  <div style="padding: 30px; background-color: #ffffff;">
    <p style="font-size: 16px; color: #333;">Hello,</p>
    <p style="font-size: 16px; color: #555;">{intro}</p>
    <div style="margin: 25px 0; background-color: #f0f7ff; padding: 20px; text-align: center; border-radius: 8px; border: 2px solid #4A90E2;">
      <span style="font-size: 32px; font-weight: bold; color: #000000; letter-spacing: 12px;">{code}</span>
    </div>
    <p style="font-size: 14px; color: #888; text-align: center;">This code expires in {validity}.</p>
  </div>
</div>"""

# purpose -> (subject prefix, intro line)
CODE_EMAILS = {
    "verify": (
        "Confirm your TinyMath Account",
        "To finish setting up your parent account, please use the 6-digit verification code below:",
    ),
    "resend": (
        "New Verification Code",
        "You requested a new code for your TinyMath account:",
    ),
    "login": (
        "Activate Your Account",
        "You tried to log in, but your account isn't active yet. Use this code to verify:",
    ),
    "reset": (
        "Reset Your TinyMath Password",
        "We received a request to reset your password. Use the code below:",
    ),
}


def _format_validity(minutes: int) -> str:
    if minutes % 60 == 0:
        hours = minutes // 60
        return "1 hour" if hours == 1 else f"{hours} hours"
    return "1 minute" if minutes == 1 else f"{minutes} minutes"


def render_code_email(purpose: str, code: str, valid_minutes: int) -> tuple[str, str]:
    """Return ``(subject, html_body)`` for a code email."""
    subject_prefix, intro = CODE_EMAILS[purpose]
    body = _CODE_EMAIL_TEMPLATE.format(
        intro=html.escape(intro),
        code=html.escape(code),
        validity=_format_validity(valid_minutes),
    )
    return f"{subject_prefix}: {code}", body
