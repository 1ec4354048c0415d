"""Resend email client."""
import logging

import resend

from wedvite.core.config import settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """The email provider did not accept a message."""


def has_email_credentials() -> bool:
    """Check if a Resend API key is configured."""
    return bool(settings.resend_api_key)


class ResendMailer:
    """Sends HTML email through the Resend API."""

    def __init__(self, api_key: str, from_email: str):
        self.api_key = api_key
        self.from_email = from_email

    def send(self, to: str, subject: str, html: str) -> str:
        """
        Send one message.

        Returns:
            The provider's message id.

        Raises:
            EmailDeliveryError: If no API key is configured or Resend
                rejects the message.
        """
        if not self.api_key:
            raise EmailDeliveryError("Email delivery is not configured (RESEND_API_KEY)")

        resend.api_key = self.api_key
        params = {
            "from": self.from_email,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        try:
            response = resend.Emails.send(params)
        except Exception as e:
            raise EmailDeliveryError(str(e)) from e

        message_id = response.get("id", "") if isinstance(response, dict) else ""
        logger.info(f"Sent '{subject}' to {to} (id={message_id})")
        return message_id


def get_mailer() -> ResendMailer:
    """Dependency for the configured mailer."""
    if not has_email_credentials():
        logger.warning("No RESEND_API_KEY configured, outbound email will fail")
    return ResendMailer(settings.resend_api_key, settings.resend_from_email)
