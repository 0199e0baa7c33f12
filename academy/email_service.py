"""
Transactional email via Resend
"""

import logging
from typing import Optional, Union

import resend

from . import config

logger = logging.getLogger(__name__)


class EmailNotConfigured(Exception):
    """RESEND_API_KEY is missing"""


class EmailSendError(Exception):
    """Resend rejected or failed to deliver the request"""


def is_configured() -> bool:
    return bool(config.RESEND_API_KEY)


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    text: Optional[str] = None,
    html: Optional[str] = None,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        text: Plain-text body
        html: HTML body
        from_address: Optional sender; defaults to RESEND_FROM_EMAIL

    Returns:
        Resend response dict (contains the message id)
    """
    if not config.RESEND_API_KEY:
        logger.error("No email service configured - RESEND_API_KEY missing")
        raise EmailNotConfigured("Email service not configured")

    resend.api_key = config.RESEND_API_KEY
    recipients = [to] if isinstance(to, str) else list(to)

    email_data: dict = {
        "from": from_address or config.RESEND_FROM_EMAIL,
        "to": recipients,
        "subject": subject,
    }
    if text is not None:
        email_data["text"] = text
    if html is not None:
        email_data["html"] = html

    try:
        logger.info(f"Sending email via Resend to {len(recipients)} recipient(s): {subject}")
        response = resend.Emails.send(email_data)
        logger.info(f"Email sent successfully via Resend: {response.get('id') if isinstance(response, dict) else response}")
        return response
    except Exception as e:
        logger.error(f"Email send error to {recipients}: {e}")
        raise EmailSendError(f"Failed to send email: {str(e)}") from e
